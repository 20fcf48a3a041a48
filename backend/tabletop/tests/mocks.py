from typing import Any
from uuid import uuid4

from tabletop.messaging.encoder import decode_msgpack, encode_msgpack
from tabletop.messaging.protocol import ConnectionProtocol


class MockConnection(ConnectionProtocol):
    """
    In-memory connection for tests.

    Outbound messages go through the MessagePack codec, so anything a test
    sees has survived the same encoding a real client would receive.
    """

    def __init__(self, connection_id: str | None = None) -> None:
        self._connection_id = connection_id or str(uuid4())
        self._outbox: list[dict[str, Any]] = []
        self._is_closed = False
        self._close_code: int | None = None
        self.fail_sends = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def sent_messages(self) -> list[dict[str, Any]]:
        return self._outbox

    @property
    def is_closed(self) -> bool:
        return self._is_closed

    @property
    def close_code(self) -> int | None:
        return self._close_code

    def messages_of_type(self, message_type: str) -> list[dict[str, Any]]:
        return [m for m in self._outbox if m.get("type") == message_type]

    def clear(self) -> None:
        self._outbox.clear()

    async def send_message(self, data: dict[str, Any]) -> None:
        if self._is_closed or self.fail_sends:
            raise ConnectionError("Connection is closed")
        self._outbox.append(decode_msgpack(encode_msgpack(data)))

    async def close(self, code: int = 1000, reason: str = "") -> None:  # noqa: ARG002
        self._is_closed = True
        self._close_code = code
