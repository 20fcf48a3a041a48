"""Per-connection message throttling."""

import time


class TokenBucket:
    """Token bucket: ``rate`` tokens per second refill up to ``burst`` capacity.

    Each allowed message spends one token.
    """

    def __init__(self, rate: float, burst: int) -> None:
        if rate <= 0 or burst < 1:
            raise ValueError(f"rate must be > 0 and burst >= 1, got rate={rate}, burst={burst}")
        self._rate = rate
        self._capacity = float(burst)
        self._tokens = self._capacity
        self._updated_at = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(self._capacity, self._tokens + (now - self._updated_at) * self._rate)
        self._updated_at = now

    def consume(self) -> bool:
        """Spend one token. Returns False when the caller should drop the message."""
        self._refill()
        if self._tokens < 1.0:
            return False
        self._tokens -= 1.0
        return True
