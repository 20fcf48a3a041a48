"""Room and user models for the session layer."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from tabletop.logic.types import WireModel

if TYPE_CHECKING:
    from pydantic import BaseModel

    from tabletop.logic.engine import RulesEngine
    from tabletop.logic.types import GameInfo


class RoomStatus(StrEnum):
    """Room lifecycle. Transitions only move forward: waiting -> playing -> finished."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class User(WireModel):
    """Logged-in identity. ``id`` is the id of the connection that logged in."""

    id: str
    name: str


class RoomView(WireModel):
    """Room snapshot sent to clients."""

    id: str
    host_id: str
    players: list[User]
    game_type: str
    status: RoomStatus
    game_state: dict[str, Any] | None = None


class RoomInfo(WireModel):
    """Room summary for the room listing endpoint."""

    id: str
    game_type: str
    status: RoomStatus
    host_id: str
    player_count: int
    max_players: int


@dataclass
class Room:
    """
    A game session container.

    ``players`` keeps join order, which is also turn order once the game
    starts. ``game_state`` is opaque here; only ``engine`` interprets it.
    """

    room_id: str
    host_id: str
    game_info: GameInfo
    engine: RulesEngine = field(repr=False)
    players: list[User] = field(default_factory=list)
    status: RoomStatus = RoomStatus.WAITING
    game_state: BaseModel | None = field(default=None, repr=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def game_type(self) -> str:
        return self.game_info.id

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.game_info.max_players

    @property
    def has_enough_players(self) -> bool:
        return self.player_count >= self.game_info.min_players

    def has_player(self, user_id: str) -> bool:
        return any(p.id == user_id for p in self.players)

    def to_view(self) -> RoomView:
        """Build a snapshot that stays valid after further mutations."""
        game_state = self.engine.dump_state(self.game_state) if self.game_state is not None else None
        return RoomView(
            id=self.room_id,
            host_id=self.host_id,
            players=list(self.players),
            game_type=self.game_type,
            status=self.status,
            game_state=game_state,
        )

    def to_info(self) -> RoomInfo:
        return RoomInfo(
            id=self.room_id,
            game_type=self.game_type,
            status=self.status,
            host_id=self.host_id,
            player_count=self.player_count,
            max_players=self.game_info.max_players,
        )
