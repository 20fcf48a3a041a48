"""
Game registry: maps a game id to its rules engine.

Adding a game means writing a RulesEngine subclass and listing it here;
the catalog served to clients and the session layer pick it up from this
table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabletop.logic.mahjong import Mahjong
from tabletop.logic.tictactoe import TicTacToe

if TYPE_CHECKING:
    from tabletop.logic.engine import RulesEngine
    from tabletop.logic.types import GameInfo

GAME_REGISTRY: dict[str, type[RulesEngine]] = {
    engine.game_info.id: engine
    for engine in (
        TicTacToe,
        Mahjong,
    )
}

GAME_CATALOG: tuple[GameInfo, ...] = tuple(engine.game_info for engine in GAME_REGISTRY.values())


def get_rules_engine(game_type: str) -> RulesEngine | None:
    """Return a new rules engine for ``game_type``, or None if the game is unknown."""
    engine_cls = GAME_REGISTRY.get(game_type)
    return engine_cls() if engine_cls is not None else None
