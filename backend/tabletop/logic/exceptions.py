"""Typed domain exceptions for game rule violations.

Rules engines raise subclasses of GameRuleError when a move is rejected.
The session layer catches them at its boundary and reports the message to
the player who sent the move, leaving the game state untouched.
"""

from tabletop.logic.enums import GameErrorCode


class GameRuleError(Exception):
    """Base exception for game rule violations."""

    code: GameErrorCode = GameErrorCode.ILLEGAL_MOVE


class NotYourTurnError(GameRuleError):
    """The mover is seated but it is another player's turn."""

    code = GameErrorCode.NOT_YOUR_TURN


class IllegalMoveError(GameRuleError):
    """Bad cell/tile/index, wrong phase, malformed payload or non-permutation reorder."""

    code = GameErrorCode.ILLEGAL_MOVE


class UnknownActionError(GameRuleError):
    """The move names an action the game does not know."""

    code = GameErrorCode.UNKNOWN_ACTION


class PlayerNotInGameError(GameRuleError):
    """The mover has no role or seat in this game."""

    code = GameErrorCode.PLAYER_NOT_IN_GAME
