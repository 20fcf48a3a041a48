from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

from tabletop.messaging.encoder import DecodeError, WireFormat, decode, encode
from tabletop.messaging.protocol import ConnectionProtocol
from tabletop.messaging.types import ErrorMessage, SessionErrorCode
from tabletop.server.rate_limit import TokenBucket

if TYPE_CHECKING:
    from tabletop.messaging.router import MessageRouter
    from tabletop.server.settings import TabletopServerSettings

logger = structlog.get_logger()

# Consecutive undecodable frames tolerated before the socket is closed
_MAX_DECODE_ERRORS = 5
_CLOSE_TOO_MANY_DECODE_ERRORS = 4004


def _resolve_wire_format(websocket: WebSocket) -> WireFormat:
    requested = websocket.query_params.get("format", "").lower()
    return WireFormat.JSON if requested == WireFormat.JSON else WireFormat.MSGPACK


class WebSocketConnection(ConnectionProtocol):
    def __init__(
        self,
        websocket: WebSocket,
        wire_format: WireFormat = WireFormat.MSGPACK,
        connection_id: str | None = None,
    ) -> None:
        self._websocket = websocket
        self._wire_format = wire_format
        self._connection_id = connection_id or str(uuid4())

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def wire_format(self) -> WireFormat:
        return self._wire_format

    async def send_message(self, data: dict[str, Any]) -> None:
        frame = encode(data, self._wire_format)
        try:
            if isinstance(frame, bytes):
                await self._websocket.send_bytes(frame)
            else:
                await self._websocket.send_text(frame)
        except WebSocketDisconnect:
            raise ConnectionError("WebSocket already disconnected") from None

    async def receive_frame(self) -> bytes | str:
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise ConnectionError("WebSocket disconnected")
        if message.get("bytes") is not None:
            return message["bytes"]
        return message.get("text") or ""

    async def close(self, code: int = 1000, reason: str = "") -> None:
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await self._websocket.close(code=code, reason=reason)


async def _send_session_error(connection: WebSocketConnection, code: SessionErrorCode, message: str) -> None:
    await connection.send_message(ErrorMessage(code=code, message=message).model_dump(mode="json"))


async def websocket_endpoint(
    websocket: WebSocket,
    router: MessageRouter,
    settings: TabletopServerSettings,
) -> None:
    await websocket.accept()

    connection = WebSocketConnection(websocket, wire_format=_resolve_wire_format(websocket))
    structlog.contextvars.bind_contextvars(connection_id=connection.connection_id)
    logger.info("websocket connected", wire_format=connection.wire_format)
    await router.handle_connect(connection)

    bucket = TokenBucket(rate=settings.rate_limit_per_second, burst=settings.rate_limit_burst)
    decode_errors = 0

    try:
        while True:
            raw = await connection.receive_frame()

            # Decode before the rate check so the strike counter sees every frame.
            try:
                data = decode(raw)
            except DecodeError as e:
                decode_errors += 1
                logger.warning("decode error", error=str(e), strikes=decode_errors)
                await _send_session_error(connection, SessionErrorCode.INVALID_MESSAGE, str(e))
                if decode_errors >= _MAX_DECODE_ERRORS:
                    logger.info("too many decode errors, disconnecting")
                    await connection.close(code=_CLOSE_TOO_MANY_DECODE_ERRORS, reason="too_many_decode_errors")
                    return
                continue

            decode_errors = 0

            if not bucket.consume():
                await _send_session_error(connection, SessionErrorCode.RATE_LIMITED, "Too many messages")
                continue
            await router.handle_message(connection, data)
    except (WebSocketDisconnect, RuntimeError, OSError):  # fmt: skip
        pass
    finally:
        logger.info("websocket disconnected")
        await router.handle_disconnect(connection)
        structlog.contextvars.clear_contextvars()
