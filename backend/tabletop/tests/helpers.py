"""Shared test helpers."""

import random

from tabletop.logic.mahjong import Mahjong
from tabletop.logic.registry import get_rules_engine


def seeded_engine_factory(seed: int = 7):
    """Engine factory whose mahjong decks are shuffled deterministically."""

    def factory(game_type: str):
        if game_type == Mahjong.game_info.id:
            return Mahjong(rng=random.Random(seed))
        return get_rules_engine(game_type)

    return factory
