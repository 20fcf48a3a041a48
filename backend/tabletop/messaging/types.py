from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, field_validator

from tabletop.logic.enums import GameErrorCode
from tabletop.logic.types import GameInfo, GameResult, WireModel
from tabletop.session.models import RoomView, User

# ASCII control character boundaries for input validation
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F

_ROOM_ID_FIELD = Field(min_length=1, max_length=50, pattern=r"^[a-zA-Z0-9_-]+$")


class ClientMessageType(StrEnum):
    LOGIN = "login"
    CREATE_ROOM = "create-room"
    JOIN_ROOM = "join-room"
    START_GAME = "start-game"
    MAKE_MOVE = "make-move"
    PING = "ping"


class ServerMessageType(StrEnum):
    LOGIN_SUCCESS = "login-success"
    ROOM_CREATED = "room-created"
    ROOM_JOINED = "room-joined"
    ROOM_UPDATED = "room-updated"
    GAME_OVER = "game-over"
    ERROR = "error"
    PONG = "pong"


class SessionErrorCode(StrEnum):
    AUTH_REQUIRED = "auth_required"
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_FULL = "room_full"
    NOT_HOST = "not_host"
    INSUFFICIENT_PLAYERS = "insufficient_players"
    UNKNOWN_GAME = "unknown_game"
    GAME_ALREADY_STARTED = "game_already_started"
    GAME_NOT_STARTED = "game_not_started"
    GAME_FINISHED = "game_finished"
    SERVER_AT_CAPACITY = "server_at_capacity"
    INVALID_MESSAGE = "invalid_message"
    RATE_LIMITED = "rate_limited"
    INTERNAL_ERROR = "internal_error"


class LoginMessage(WireModel):
    type: Literal[ClientMessageType.LOGIN] = ClientMessageType.LOGIN
    name: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        if any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in v):
            raise ValueError("name must not contain control characters")
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class CreateRoomMessage(WireModel):
    type: Literal[ClientMessageType.CREATE_ROOM] = ClientMessageType.CREATE_ROOM
    game_id: str = Field(min_length=1, max_length=50)


class JoinRoomMessage(WireModel):
    type: Literal[ClientMessageType.JOIN_ROOM] = ClientMessageType.JOIN_ROOM
    room_id: str = _ROOM_ID_FIELD


class StartGameMessage(WireModel):
    type: Literal[ClientMessageType.START_GAME] = ClientMessageType.START_GAME
    room_id: str = _ROOM_ID_FIELD


class MakeMoveMessage(WireModel):
    """The move payload is game-specific; only the room's rules engine reads it."""

    type: Literal[ClientMessageType.MAKE_MOVE] = ClientMessageType.MAKE_MOVE
    room_id: str = _ROOM_ID_FIELD
    move: dict[str, Any]


class PingMessage(WireModel):
    type: Literal[ClientMessageType.PING] = ClientMessageType.PING


ClientMessage = Annotated[
    LoginMessage | CreateRoomMessage | JoinRoomMessage | StartGameMessage | MakeMoveMessage | PingMessage,
    Field(discriminator="type"),
]

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


def parse_client_message(
    data: dict[str, Any],
) -> LoginMessage | CreateRoomMessage | JoinRoomMessage | StartGameMessage | MakeMoveMessage | PingMessage:
    """Parse a decoded frame into a typed client message."""
    return _client_message_adapter.validate_python(data)


class LoginSuccessMessage(WireModel):
    type: Literal[ServerMessageType.LOGIN_SUCCESS] = ServerMessageType.LOGIN_SUCCESS
    user: User


class RoomCreatedMessage(WireModel):
    type: Literal[ServerMessageType.ROOM_CREATED] = ServerMessageType.ROOM_CREATED
    room: RoomView


class RoomJoinedMessage(WireModel):
    type: Literal[ServerMessageType.ROOM_JOINED] = ServerMessageType.ROOM_JOINED
    room: RoomView


class RoomUpdatedMessage(WireModel):
    type: Literal[ServerMessageType.ROOM_UPDATED] = ServerMessageType.ROOM_UPDATED
    room: RoomView


class GameOverMessage(WireModel):
    type: Literal[ServerMessageType.GAME_OVER] = ServerMessageType.GAME_OVER
    result: GameResult


class ErrorMessage(WireModel):
    type: Literal[ServerMessageType.ERROR] = ServerMessageType.ERROR
    code: SessionErrorCode | GameErrorCode
    message: str


class PongMessage(WireModel):
    type: Literal[ServerMessageType.PONG] = ServerMessageType.PONG


class GameCatalogResponse(WireModel):
    games: tuple[GameInfo, ...]
