"""
String enum definitions for game rule concepts.
"""

from __future__ import annotations

from enum import StrEnum


class GameErrorCode(StrEnum):
    """Error codes sent to clients for rejected moves."""

    NOT_YOUR_TURN = "not_your_turn"
    ILLEGAL_MOVE = "illegal_move"
    UNKNOWN_ACTION = "unknown_action"
    PLAYER_NOT_IN_GAME = "player_not_in_game"


class Mark(StrEnum):
    """Tic-tac-toe marks."""

    X = "X"
    O = "O"  # noqa: E741

    @property
    def opponent(self) -> Mark:
        return Mark.O if self is Mark.X else Mark.X


class MahjongAction(StrEnum):
    """Actions a mahjong player can submit."""

    DRAW = "draw"
    DISCARD = "discard"
    REORDER = "reorder"


class MahjongPhase(StrEnum):
    """Sub-turn phase of the player in turn."""

    DRAW = "draw"
    DISCARD = "discard"
