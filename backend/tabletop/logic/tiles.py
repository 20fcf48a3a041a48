"""
Tile set for the simplified mahjong variant.

Tiles are the Unicode mahjong glyphs, so a tile value is also its display
face. 34 distinct faces with 4 copies each make a 136-tile deck.
"""

from __future__ import annotations

import random
from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

COPIES_PER_FACE = 4
HAND_SIZE = 13


def _glyph_range(first: int, count: int) -> tuple[str, ...]:
    return tuple(chr(first + i) for i in range(count))


# characters (man) 1-9: U+1F007..U+1F00F
CHARACTERS = _glyph_range(0x1F007, 9)
# bamboo (sou) 1-9: U+1F010..U+1F018
BAMBOO = _glyph_range(0x1F010, 9)
# dots (pin) 1-9: U+1F019..U+1F021
DOTS = _glyph_range(0x1F019, 9)
# east, south, west, north: U+1F000..U+1F003
WINDS = _glyph_range(0x1F000, 4)
# red, green, white: U+1F004..U+1F006
DRAGONS = _glyph_range(0x1F004, 3)

TILE_FACES: tuple[str, ...] = DOTS + BAMBOO + CHARACTERS + WINDS + DRAGONS
FULL_DECK: tuple[str, ...] = tuple(face for face in TILE_FACES for _ in range(COPIES_PER_FACE))
DECK_SIZE = len(FULL_DECK)


def shuffled_deck(rng: random.Random | None = None) -> tuple[str, ...]:
    """Return the full deck in uniformly random order (Fisher-Yates via random.shuffle)."""
    rng = rng or random.SystemRandom()
    deck = list(FULL_DECK)
    rng.shuffle(deck)
    return tuple(deck)


def sort_tiles(tiles: Iterable[str]) -> tuple[str, ...]:
    """Sort tiles by face (code point order)."""
    return tuple(sorted(tiles))


def is_permutation(candidate: Iterable[str], hand: Iterable[str]) -> bool:
    """Check that ``candidate`` holds exactly the same multiset of faces as ``hand``."""
    return Counter(candidate) == Counter(hand)
