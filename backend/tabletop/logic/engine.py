from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import cycle
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ValidationError

from tabletop.logic.exceptions import IllegalMoveError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tabletop.logic.types import GameInfo, GameResult, MoveOutcome

# Generic role labels handed out by join order. The pool cycles, so beyond
# six players two players would share a label.
ROLE_SYMBOLS: tuple[str, ...] = ("X", "O", "A", "B", "C", "D")


def assign_roles(player_ids: Sequence[str]) -> dict[str, str]:
    """Bind each player id to a role symbol by join order."""
    return dict(zip(player_ids, cycle(ROLE_SYMBOLS), strict=False))


class RulesEngine(ABC):
    """
    Abstract interface for turn-based game rules.

    Engines are pure: they never perform I/O, know nothing about rooms or
    connections, and never mutate the state they are given. Every transition
    returns a new frozen state value.
    """

    game_info: ClassVar[GameInfo]

    @abstractmethod
    def get_initial_state(self) -> BaseModel:
        """Return a fresh state with no players bound yet."""
        ...

    @abstractmethod
    def bind_players(self, state: BaseModel, player_ids: Sequence[str]) -> BaseModel:
        """
        Seat the room's players (in join order) into a fresh state.

        Called once at game start. Performs any game-specific setup that needs
        the player list, such as dealing hands.
        """
        ...

    @abstractmethod
    def process_move(self, state: BaseModel, move: Mapping[str, Any], player_id: str) -> MoveOutcome:
        """
        Validate and apply a move submitted by ``player_id``.

        Raises a GameRuleError subclass when the move is rejected.
        """
        ...

    @abstractmethod
    def check_win_condition(self, state: BaseModel) -> GameResult:
        """Evaluate the terminal condition without changing state."""
        ...

    def dump_state(self, state: BaseModel) -> dict[str, Any]:
        """Serialize state for the wire."""
        return state.model_dump(mode="json")

    @staticmethod
    def parse_move(model: type[BaseModel], move: Mapping[str, Any]) -> BaseModel:
        """Validate a raw move payload against a typed move model."""
        try:
            return model.model_validate(move)
        except ValidationError as e:
            raise IllegalMoveError(f"Malformed move: {e.errors()[0]['msg']}") from e
