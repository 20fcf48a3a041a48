from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from tabletop.messaging.types import (
    CreateRoomMessage,
    JoinRoomMessage,
    LoginMessage,
    MakeMoveMessage,
    PingMessage,
    SessionErrorCode,
    StartGameMessage,
    parse_client_message,
)

if TYPE_CHECKING:
    from tabletop.messaging.protocol import ConnectionProtocol
    from tabletop.session.manager import SessionManager

logger = structlog.get_logger()


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


class MessageRouter:
    """
    Routes decoded client messages to the session manager.

    Contains no transport code, so it can be driven by mock connections.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle_message(self, connection: ConnectionProtocol, raw_message: dict[str, Any]) -> None:
        try:
            message = parse_client_message(raw_message)
        except ValidationError as e:
            logger.warning("invalid message", connection_id=connection.connection_id, error=str(e))
            await self._session_manager.handle_error(
                connection,
                SessionErrorCode.INVALID_MESSAGE,
                _describe_validation_error(e),
            )
            return

        try:
            await self._dispatch(connection, message)
        except (RuntimeError, OSError):
            raise
        except Exception:
            logger.exception("unexpected error while handling message", message_type=message.type)
            await self._session_manager.handle_error(
                connection,
                SessionErrorCode.INTERNAL_ERROR,
                "Internal server error",
            )

    async def _dispatch(
        self,
        connection: ConnectionProtocol,
        message: LoginMessage | CreateRoomMessage | JoinRoomMessage | StartGameMessage | MakeMoveMessage | PingMessage,
    ) -> None:
        manager = self._session_manager
        if isinstance(message, LoginMessage):
            await manager.login(connection, message.name)
        elif isinstance(message, CreateRoomMessage):
            await manager.create_room(connection, message.game_id)
        elif isinstance(message, JoinRoomMessage):
            await manager.join_room(connection, message.room_id)
        elif isinstance(message, StartGameMessage):
            await manager.start_game(connection, message.room_id)
        elif isinstance(message, MakeMoveMessage):
            await manager.make_move(connection, message.room_id, message.move)
        elif isinstance(message, PingMessage):
            await manager.handle_ping(connection)

    async def handle_connect(self, connection: ConnectionProtocol) -> None:
        self._session_manager.register_connection(connection)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        await self._session_manager.handle_disconnect(connection)
