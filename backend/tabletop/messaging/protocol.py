"""Abstract client connection used by the session layer."""

from abc import ABC, abstractmethod
from typing import Any


class ConnectionProtocol(ABC):
    """
    Abstract interface for a client connection.

    Lets the session layer and router be tested without real WebSockets.
    Implementations choose the wire encoding.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this connection. Also the logged-in user's id."""
        ...

    @abstractmethod
    async def send_message(self, data: dict[str, Any]) -> None:
        """Encode and send one message to the client."""
        ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the connection."""
        ...
