"""Room lifecycle and membership, with no connection I/O."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any

import structlog

from tabletop.logic.registry import get_rules_engine
from tabletop.session.exceptions import (
    GameAlreadyStartedError,
    GameFinishedError,
    GameNotStartedError,
    InsufficientPlayersError,
    NotHostError,
    RoomFullError,
    RoomNotFoundError,
    ServerAtCapacityError,
    UnknownGameError,
)
from tabletop.session.models import Room, RoomInfo, RoomStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from tabletop.logic.engine import RulesEngine
    from tabletop.logic.types import GameResult
    from tabletop.session.models import User

logger = structlog.get_logger()

ROOM_ID_BYTES = 4  # 8 hex chars
_MAX_ID_ATTEMPTS = 16


def generate_room_id() -> str:
    return secrets.token_hex(ROOM_ID_BYTES)


class RoomManager:
    """
    Owns every room in the process and enforces the room state machine.

    Purely state management: callers hold the room's lock while calling
    mutating methods and handle all messaging themselves. Failures raise
    SessionError subclasses; rejected moves raise GameRuleError subclasses
    from the rules engine. A rejected call leaves the room unchanged.
    """

    def __init__(
        self,
        engine_factory: Callable[[str], RulesEngine | None] = get_rules_engine,
        max_rooms: int | None = None,
        id_factory: Callable[[], str] = generate_room_id,
    ) -> None:
        self._rooms: dict[str, Room] = {}
        self._engine_factory = engine_factory
        self._max_rooms = max_rooms
        self._id_factory = id_factory

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def get_rooms_info(self) -> list[RoomInfo]:
        return [room.to_info() for room in self._rooms.values()]

    def _new_room_id(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            room_id = self._id_factory()
            if room_id not in self._rooms:
                return room_id
        logger.warning("room id space exhausted", attempts=_MAX_ID_ATTEMPTS)
        raise ServerAtCapacityError("Could not allocate a room id")

    def create_room(self, creator: User, game_type: str) -> Room:
        """Create a waiting room hosted by ``creator``, who becomes its first player."""
        engine = self._engine_factory(game_type)
        if engine is None:
            raise UnknownGameError(game_type)
        if self._max_rooms is not None and len(self._rooms) >= self._max_rooms:
            raise ServerAtCapacityError

        room = Room(
            room_id=self._new_room_id(),
            host_id=creator.id,
            game_info=engine.game_info,
            engine=engine,
            players=[creator],
        )
        self._rooms[room.room_id] = room
        logger.info("room created", room_id=room.room_id, game_type=game_type, host_id=creator.id)
        return room

    def join_room(self, user: User, room_id: str) -> Room:
        """Append ``user`` to the room. Joining a room you are already in changes nothing."""
        room = self.require_room(room_id)
        if room.has_player(user.id):
            return room
        if room.is_full:
            raise RoomFullError
        if room.status is not RoomStatus.WAITING:
            raise GameAlreadyStartedError

        room.players.append(user)
        logger.info("player joined room", room_id=room_id, user_id=user.id, player_count=room.player_count)
        return room

    def start_game(self, requester_id: str, room_id: str) -> Room:
        """Host starts the game: build the initial state and seat players in join order."""
        room = self.require_room(room_id)
        if room.host_id != requester_id:
            raise NotHostError
        if room.status is not RoomStatus.WAITING:
            raise GameAlreadyStartedError
        if not room.has_enough_players:
            raise InsufficientPlayersError(room.game_info.min_players)

        state = room.engine.get_initial_state()
        room.game_state = room.engine.bind_players(state, room.player_ids)
        room.status = RoomStatus.PLAYING
        logger.info("game started", room_id=room_id, game_type=room.game_type, player_count=room.player_count)
        return room

    def make_move(self, user_id: str, room_id: str, move: Mapping[str, Any]) -> tuple[Room, GameResult | None]:
        """
        Apply a move through the room's rules engine.

        Returns the room and the terminal result if the move ended the game.
        """
        room = self.require_room(room_id)
        if room.status is RoomStatus.WAITING:
            raise GameNotStartedError
        if room.status is RoomStatus.FINISHED:
            raise GameFinishedError

        outcome = room.engine.process_move(room.game_state, move, user_id)
        room.game_state = outcome.new_state

        result = outcome.result
        if result is not None and result.is_game_over:
            room.status = RoomStatus.FINISHED
            logger.info("game over", room_id=room_id, winner_id=result.winner_id)
            return room, result
        return room, None

    def remove_player(self, room_id: str, user_id: str) -> Room | None:
        """
        Drop a player from a waiting room, passing host to the next player in join order.

        Players of a started game stay seated because the game state refers
        to them. Returns the room if its membership changed.
        """
        room = self._rooms.get(room_id)
        if room is None or room.status is not RoomStatus.WAITING or not room.has_player(user_id):
            return None

        room.players = [p for p in room.players if p.id != user_id]
        if room.host_id == user_id and room.players:
            room.host_id = room.players[0].id
            logger.info("host transferred", room_id=room_id, host_id=room.host_id)
        return room

    def update_player(self, room_id: str, user: User) -> Room | None:
        """Replace the seated copy of ``user`` after a rename. Returns the room if it changed."""
        room = self._rooms.get(room_id)
        if room is None or not room.has_player(user.id):
            return None
        room.players = [user if p.id == user.id else p for p in room.players]
        return room

    def remove_room(self, room_id: str) -> None:
        if self._rooms.pop(room_id, None) is not None:
            logger.info("room removed", room_id=room_id)
