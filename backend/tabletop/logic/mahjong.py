"""
Simplified mahjong rules.

Each turn the player in turn draws one tile from the tail of the deck, then
discards one tile from their hand onto the shared discard pile, which passes
the turn to the next seat. Players may reorder their own hand at any time.
The game ends in a draw when a draw is attempted on an empty deck; winning
hands are not detected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import Field

from tabletop.logic.engine import RulesEngine
from tabletop.logic.enums import MahjongAction, MahjongPhase
from tabletop.logic.exceptions import (
    IllegalMoveError,
    NotYourTurnError,
    PlayerNotInGameError,
    UnknownActionError,
)
from tabletop.logic.tiles import HAND_SIZE, is_permutation, shuffled_deck, sort_tiles
from tabletop.logic.types import DRAW, NOT_OVER, GameInfo, GameResult, MoveOutcome, WireModel

if TYPE_CHECKING:
    import random
    from collections.abc import Sequence


class MahjongState(WireModel):
    deck: tuple[str, ...] = ()
    hands: dict[str, tuple[str, ...]] = Field(default_factory=dict)  # player_id -> tiles
    discards: tuple[str, ...] = ()
    current_player_index: int = 0
    last_drawn_tile: str | None = None
    phase: MahjongPhase = MahjongPhase.DRAW
    players: dict[str, int] = Field(default_factory=dict)  # player_id -> seat
    turn_order: tuple[str, ...] = ()

    @property
    def current_player_id(self) -> str | None:
        if not self.turn_order:
            return None
        return self.turn_order[self.current_player_index]


class DrawMove(WireModel):
    action: Literal[MahjongAction.DRAW]


class DiscardMove(WireModel):
    action: Literal[MahjongAction.DISCARD]
    tile_index: int = Field(strict=True)


class ReorderMove(WireModel):
    action: Literal[MahjongAction.REORDER]
    new_hand: tuple[str, ...]


def deal_hands(
    deck: Sequence[str],
    player_ids: Sequence[str],
) -> tuple[dict[str, tuple[str, ...]], tuple[str, ...]]:
    """
    Deal HAND_SIZE tiles to each player in order, popping from the deck tail.

    Players are dealt one after another, not interleaved. Each hand is sorted.
    Returns (hands, remaining_deck).
    """
    needed = HAND_SIZE * len(player_ids)
    if needed > len(deck):
        raise ValueError(f"Cannot deal {needed} tiles from a deck of {len(deck)}")
    remaining = list(deck)
    hands: dict[str, tuple[str, ...]] = {}
    for player_id in player_ids:
        hands[player_id] = sort_tiles(remaining.pop() for _ in range(HAND_SIZE))
    return hands, tuple(remaining)


class Mahjong(RulesEngine):
    game_info: ClassVar[GameInfo] = GameInfo(id="mahjong", name="Mahjong (Simplified)", min_players=2, max_players=4)

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def get_initial_state(self) -> MahjongState:
        return MahjongState(deck=shuffled_deck(self._rng))

    def bind_players(self, state: MahjongState, player_ids: Sequence[str]) -> MahjongState:
        hands, deck = deal_hands(state.deck, player_ids)
        return state.model_copy(
            update={
                "deck": deck,
                "hands": hands,
                "players": {player_id: seat for seat, player_id in enumerate(player_ids)},
                "turn_order": tuple(player_ids),
            },
        )

    def process_move(self, state: MahjongState, move: Mapping[str, Any], player_id: str) -> MoveOutcome:
        if player_id not in state.players:
            raise PlayerNotInGameError("You are not a player in this game")
        if not isinstance(move, Mapping):
            raise IllegalMoveError("Move must be an object")
        try:
            action = MahjongAction(move.get("action"))
        except ValueError:
            raise UnknownActionError("Unknown action") from None

        # reordering only touches the mover's own hand, so it is allowed off-turn
        if action is MahjongAction.REORDER:
            return self._reorder(state, self.parse_move(ReorderMove, move), player_id)

        if state.current_player_id != player_id:
            raise NotYourTurnError("Not your turn")
        if action is MahjongAction.DRAW:
            self.parse_move(DrawMove, move)
            return self._draw(state, player_id)
        return self._discard(state, self.parse_move(DiscardMove, move), player_id)

    def check_win_condition(self, state: MahjongState) -> GameResult:
        if not state.deck:
            return DRAW
        return NOT_OVER

    def _draw(self, state: MahjongState, player_id: str) -> MoveOutcome:
        if state.phase is not MahjongPhase.DRAW:
            raise IllegalMoveError("Already drawn, please discard")
        if not state.deck:
            # wall exhausted
            return MoveOutcome(new_state=state, result=self.check_win_condition(state))
        tile = state.deck[-1]
        hands = dict(state.hands)
        hands[player_id] = (*hands.get(player_id, ()), tile)
        new_state = state.model_copy(
            update={
                "deck": state.deck[:-1],
                "hands": hands,
                "last_drawn_tile": tile,
                "phase": MahjongPhase.DISCARD,
            },
        )
        return MoveOutcome(new_state=new_state)

    def _discard(self, state: MahjongState, move: DiscardMove, player_id: str) -> MoveOutcome:
        if state.phase is not MahjongPhase.DISCARD:
            raise IllegalMoveError("Please draw a tile first")
        hand = state.hands.get(player_id, ())
        if not 0 <= move.tile_index < len(hand):
            raise IllegalMoveError("Invalid tile")
        tile = hand[move.tile_index]
        hands = dict(state.hands)
        hands[player_id] = hand[: move.tile_index] + hand[move.tile_index + 1 :]
        new_state = state.model_copy(
            update={
                "hands": hands,
                "discards": (*state.discards, tile),
                "current_player_index": (state.current_player_index + 1) % len(state.turn_order),
                "last_drawn_tile": None,
                "phase": MahjongPhase.DRAW,
            },
        )
        return MoveOutcome(new_state=new_state)

    @staticmethod
    def _reorder(state: MahjongState, move: ReorderMove, player_id: str) -> MoveOutcome:
        hand = state.hands.get(player_id, ())
        if len(move.new_hand) != len(hand):
            raise IllegalMoveError("Hand length mismatch")
        if not is_permutation(move.new_hand, hand):
            raise IllegalMoveError("Invalid reorder: tiles do not match")
        hands = dict(state.hands)
        hands[player_id] = move.new_hand
        return MoveOutcome(new_state=state.model_copy(update={"hands": hands}))
