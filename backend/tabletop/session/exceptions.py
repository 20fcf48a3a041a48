"""Session-level failures raised by RoomManager and SessionManager.

Each subclass carries the SessionErrorCode reported to the client. They are
caught at the SessionManager boundary and sent to the originating
connection only.
"""

from tabletop.messaging.types import SessionErrorCode


class SessionError(Exception):
    code: SessionErrorCode


class AuthRequiredError(SessionError):
    code = SessionErrorCode.AUTH_REQUIRED

    def __init__(self, message: str = "Please login first") -> None:
        super().__init__(message)


class RoomNotFoundError(SessionError):
    code = SessionErrorCode.ROOM_NOT_FOUND

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__("Room not found")


class RoomFullError(SessionError):
    code = SessionErrorCode.ROOM_FULL

    def __init__(self, message: str = "Room is full") -> None:
        super().__init__(message)


class NotHostError(SessionError):
    code = SessionErrorCode.NOT_HOST

    def __init__(self, message: str = "Only host can start the game") -> None:
        super().__init__(message)


class InsufficientPlayersError(SessionError):
    code = SessionErrorCode.INSUFFICIENT_PLAYERS

    def __init__(self, min_players: int) -> None:
        self.min_players = min_players
        super().__init__(f"Need at least {min_players} players to start")


class UnknownGameError(SessionError):
    code = SessionErrorCode.UNKNOWN_GAME

    def __init__(self, game_type: str) -> None:
        self.game_type = game_type
        super().__init__(f"Unknown game: {game_type}")


class GameAlreadyStartedError(SessionError):
    code = SessionErrorCode.GAME_ALREADY_STARTED

    def __init__(self, message: str = "Game has already started") -> None:
        super().__init__(message)


class GameNotStartedError(SessionError):
    code = SessionErrorCode.GAME_NOT_STARTED

    def __init__(self, message: str = "Game has not started yet") -> None:
        super().__init__(message)


class GameFinishedError(SessionError):
    code = SessionErrorCode.GAME_FINISHED

    def __init__(self, message: str = "Game is already over") -> None:
        super().__init__(message)


class ServerAtCapacityError(SessionError):
    code = SessionErrorCode.SERVER_AT_CAPACITY

    def __init__(self, message: str = "Server at capacity") -> None:
        super().__init__(message)
