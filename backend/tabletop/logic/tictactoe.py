"""
Tic-tac-toe rules: 3x3 board, two marks, strict alternation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from tabletop.logic.engine import RulesEngine, assign_roles
from tabletop.logic.enums import Mark
from tabletop.logic.exceptions import IllegalMoveError, NotYourTurnError, PlayerNotInGameError
from tabletop.logic.types import DRAW, NOT_OVER, GameInfo, GameResult, MoveOutcome, WireModel

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

BOARD_SIZE = 9

# rows, columns, diagonals
WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class TicTacToeState(WireModel):
    board: tuple[Mark | None, ...] = (None,) * BOARD_SIZE
    current_player: Mark = Mark.X
    players: dict[str, str] = Field(default_factory=dict)  # player_id -> mark


class TicTacToeMove(WireModel):
    index: int = Field(strict=True)


class TicTacToe(RulesEngine):
    game_info: ClassVar[GameInfo] = GameInfo(id="tictactoe", name="Tic Tac Toe", min_players=2, max_players=2)

    def get_initial_state(self) -> TicTacToeState:
        return TicTacToeState()

    def bind_players(self, state: TicTacToeState, player_ids: Sequence[str]) -> TicTacToeState:
        return state.model_copy(update={"players": assign_roles(player_ids)})

    def process_move(self, state: TicTacToeState, move: Mapping[str, Any], player_id: str) -> MoveOutcome:
        symbol = state.players.get(player_id)
        if symbol not in (Mark.X, Mark.O):
            raise PlayerNotInGameError("You are not a player in this game")
        if symbol != state.current_player:
            raise NotYourTurnError("Not your turn")

        index = self.parse_move(TicTacToeMove, move).index
        if not 0 <= index < BOARD_SIZE:
            raise IllegalMoveError(f"Cell index must be in [0, {BOARD_SIZE}), got {index}")
        if state.board[index] is not None:
            raise IllegalMoveError("Cell already taken")

        mark = Mark(symbol)
        board = list(state.board)
        board[index] = mark
        new_state = state.model_copy(update={"board": tuple(board), "current_player": mark.opponent})
        return MoveOutcome(new_state=new_state, result=self.check_win_condition(new_state))

    def check_win_condition(self, state: TicTacToeState) -> GameResult:
        board = state.board
        for a, b, c in WINNING_LINES:
            if board[a] is not None and board[a] == board[b] == board[c]:
                return GameResult(is_game_over=True, winner_id=str(board[a]))
        if all(cell is not None for cell in board):
            return DRAW
        return NOT_OVER
