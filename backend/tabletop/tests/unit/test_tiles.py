import random
from collections import Counter

from tabletop.logic.tiles import (
    COPIES_PER_FACE,
    DECK_SIZE,
    FULL_DECK,
    TILE_FACES,
    is_permutation,
    shuffled_deck,
    sort_tiles,
)


def test_deck_has_136_tiles_of_34_faces():
    assert DECK_SIZE == 136
    assert len(TILE_FACES) == 34
    assert len(set(TILE_FACES)) == 34
    assert all(count == COPIES_PER_FACE for count in Counter(FULL_DECK).values())


def test_faces_are_mahjong_glyphs():
    assert all(0x1F000 <= ord(face) <= 0x1F021 for face in TILE_FACES)


def test_shuffled_deck_is_a_permutation_of_the_full_deck():
    deck = shuffled_deck(random.Random(1))
    assert len(deck) == DECK_SIZE
    assert is_permutation(deck, FULL_DECK)


def test_shuffle_is_deterministic_for_a_seeded_rng():
    assert shuffled_deck(random.Random(42)) == shuffled_deck(random.Random(42))


def test_sort_tiles_orders_by_code_point():
    tiles = ("\U0001f021", "\U0001f000", "\U0001f010")
    assert sort_tiles(tiles) == ("\U0001f000", "\U0001f010", "\U0001f021")


def test_is_permutation_respects_multiplicity():
    a = "\U0001f007"
    b = "\U0001f008"
    assert is_permutation((a, b, a), (a, a, b))
    assert not is_permutation((a, a, a), (a, a, b))
    assert not is_permutation((a, b), (a, a, b))
