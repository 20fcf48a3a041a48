from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

import structlog

from tabletop.logic.exceptions import GameRuleError
from tabletop.messaging.types import (
    ErrorMessage,
    GameOverMessage,
    LoginSuccessMessage,
    PongMessage,
    RoomCreatedMessage,
    RoomJoinedMessage,
    RoomUpdatedMessage,
    SessionErrorCode,
)
from tabletop.session.broadcast import broadcast_to_connections
from tabletop.session.exceptions import AuthRequiredError, SessionError
from tabletop.session.models import RoomStatus
from tabletop.session.room_manager import RoomManager
from tabletop.session.users import UserRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tabletop.logic.enums import GameErrorCode
    from tabletop.messaging.protocol import ConnectionProtocol
    from tabletop.session.models import Room, User

logger = structlog.get_logger()


class SessionManager:
    """
    Binds live connections to users and rooms and runs the event protocol.

    Each room mutation and the broadcasts it produces run under that room's
    lock, and the room snapshot is taken before the first send, so every
    member sees a room's updates in the order they were committed.
    Session and rule failures are reported to the originating connection only.
    """

    def __init__(
        self,
        room_manager: RoomManager | None = None,
        users: UserRegistry | None = None,
    ) -> None:
        self._room_manager = room_manager or RoomManager()
        self._users = users or UserRegistry()
        self._connections: dict[str, ConnectionProtocol] = {}
        self._room_members: dict[str, set[str]] = {}  # room_id -> connection_ids
        self._connection_rooms: dict[str, set[str]] = {}  # connection_id -> room_ids

    @property
    def room_manager(self) -> RoomManager:
        return self._room_manager

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def register_connection(self, connection: ConnectionProtocol) -> None:
        self._connections[connection.connection_id] = connection

    def get_user(self, connection_id: str) -> User | None:
        return self._users.get(connection_id)

    async def _send_error(
        self,
        connection: ConnectionProtocol,
        code: SessionErrorCode | GameErrorCode,
        message: str,
    ) -> None:
        logger.warning("error sent to client", error_code=code.value, error_message=message)
        with contextlib.suppress(RuntimeError, OSError):
            await connection.send_message(ErrorMessage(code=code, message=message).model_dump(mode="json"))

    @contextlib.asynccontextmanager
    async def _reporting_errors(self, connection: ConnectionProtocol) -> AsyncIterator[None]:
        """Turn session and rule failures into an error event for this connection."""
        try:
            yield
        except (SessionError, GameRuleError) as e:
            await self._send_error(connection, e.code, str(e))

    def _require_user(self, connection: ConnectionProtocol) -> User:
        user = self._users.get(connection.connection_id)
        if user is None:
            raise AuthRequiredError
        return user

    def _subscribe(self, connection: ConnectionProtocol, room_id: str) -> None:
        self._room_members.setdefault(room_id, set()).add(connection.connection_id)
        self._connection_rooms.setdefault(connection.connection_id, set()).add(room_id)

    def _member_connections(self, room_id: str) -> list[ConnectionProtocol]:
        return [
            self._connections[conn_id]
            for conn_id in self._room_members.get(room_id, ())
            if conn_id in self._connections
        ]

    async def _broadcast_to_room(self, room_id: str, message: dict[str, Any]) -> None:
        await broadcast_to_connections(self._member_connections(room_id), message)

    async def _broadcast_room_updated(self, room: Room) -> None:
        message = RoomUpdatedMessage(room=room.to_view()).model_dump(mode="json")
        await self._broadcast_to_room(room.room_id, message)

    async def login(self, connection: ConnectionProtocol, name: str) -> None:
        """Bind the connection to a user. A repeat login renames the user in every room it belongs to."""
        user = self._users.login(connection.connection_id, name)
        structlog.contextvars.bind_contextvars(user_name=name)
        await connection.send_message(LoginSuccessMessage(user=user).model_dump(mode="json"))

        for room_id in sorted(self._connection_rooms.get(connection.connection_id, ())):
            room = self._room_manager.get_room(room_id)
            if room is None:
                continue
            async with room.lock:
                if self._room_manager.update_player(room_id, user) is not None:
                    await self._broadcast_room_updated(room)

    async def create_room(self, connection: ConnectionProtocol, game_type: str) -> None:
        async with self._reporting_errors(connection):
            user = self._require_user(connection)
            room = self._room_manager.create_room(user, game_type)
            self._subscribe(connection, room.room_id)
            await connection.send_message(RoomCreatedMessage(room=room.to_view()).model_dump(mode="json"))

    async def join_room(self, connection: ConnectionProtocol, room_id: str) -> None:
        async with self._reporting_errors(connection):
            user = self._require_user(connection)
            room = self._room_manager.require_room(room_id)
            async with room.lock:
                room = self._room_manager.join_room(user, room_id)
                self._subscribe(connection, room_id)
                view = room.to_view()
                await self._broadcast_to_room(room_id, RoomUpdatedMessage(room=view).model_dump(mode="json"))
                await connection.send_message(RoomJoinedMessage(room=view).model_dump(mode="json"))

    async def start_game(self, connection: ConnectionProtocol, room_id: str) -> None:
        async with self._reporting_errors(connection):
            user = self._require_user(connection)
            room = self._room_manager.require_room(room_id)
            async with room.lock:
                self._room_manager.start_game(user.id, room_id)
                await self._broadcast_room_updated(room)

    async def make_move(self, connection: ConnectionProtocol, room_id: str, move: dict[str, Any]) -> None:
        user = self._users.get(connection.connection_id)
        room = self._room_manager.get_room(room_id)
        if user is None or room is None:
            logger.info("move ignored", room_id=room_id, reason="unknown user or room")
            return

        async with self._reporting_errors(connection), room.lock:
            room, result = self._room_manager.make_move(user.id, room_id, move)
            if result is not None:
                await self._broadcast_to_room(room_id, GameOverMessage(result=result).model_dump(mode="json"))
            await self._broadcast_room_updated(room)

    async def handle_ping(self, connection: ConnectionProtocol) -> None:
        await connection.send_message(PongMessage().model_dump(mode="json"))

    async def handle_error(self, connection: ConnectionProtocol, code: SessionErrorCode, message: str) -> None:
        await self._send_error(connection, code, message)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        """
        Forget a connection and its user.

        In a waiting room the user gives up their seat (and host role, if
        held). Started games keep the player seated. A room left with no
        connected members is removed.
        """
        connection_id = connection.connection_id
        self._connections.pop(connection_id, None)
        user = self._users.logout(connection_id)
        if user is not None:
            logger.info("user disconnected", user_id=user.id)

        for room_id in self._connection_rooms.pop(connection_id, set()):
            members = self._room_members.get(room_id, set())
            members.discard(connection_id)
            room = self._room_manager.get_room(room_id)
            if room is None:
                self._room_members.pop(room_id, None)
                continue
            async with room.lock:
                if not members:
                    self._room_members.pop(room_id, None)
                    self._room_manager.remove_room(room_id)
                    continue
                if user is not None and room.status is RoomStatus.WAITING:
                    updated = self._room_manager.remove_player(room_id, user.id)
                    if updated is not None:
                        await self._broadcast_room_updated(updated)
