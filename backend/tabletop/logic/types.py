"""
Pydantic models shared by every rules engine.

Wire dumps use camelCase aliases so clients see ``isGameOver``/``winnerId``
while Python code keeps snake_case names. Either spelling is accepted on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Frozen model with camelCase wire aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
    )


class GameInfo(WireModel):
    """Static catalog entry for a playable game."""

    id: str
    name: str
    min_players: int = Field(ge=1)
    max_players: int = Field(ge=1)


class GameResult(WireModel):
    """Terminal check outcome. ``winner_id`` of None with ``is_game_over`` means a draw."""

    is_game_over: bool
    winner_id: str | None = None


NOT_OVER = GameResult(is_game_over=False)
DRAW = GameResult(is_game_over=True, winner_id=None)


class MoveOutcome(BaseModel):
    """Result of applying a move: the replacement state and, when checked, the terminal result."""

    model_config = ConfigDict(frozen=True)

    new_state: Any
    result: GameResult | None = None
