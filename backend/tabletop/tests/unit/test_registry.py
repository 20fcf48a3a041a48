from tabletop.logic.mahjong import Mahjong
from tabletop.logic.registry import GAME_CATALOG, get_rules_engine
from tabletop.logic.tictactoe import TicTacToe


def test_catalog_lists_both_games():
    assert {info.id for info in GAME_CATALOG} == {"tictactoe", "mahjong"}


def test_get_rules_engine_returns_fresh_instances():
    first = get_rules_engine("mahjong")
    second = get_rules_engine("mahjong")
    assert isinstance(first, Mahjong)
    assert first is not second
    assert isinstance(get_rules_engine("tictactoe"), TicTacToe)


def test_unknown_game_type():
    assert get_rules_engine("chess") is None


def test_catalog_player_limits():
    limits = {info.id: (info.min_players, info.max_players) for info in GAME_CATALOG}
    assert limits == {"tictactoe": (2, 2), "mahjong": (2, 4)}


def test_catalog_serializes_with_camel_case_keys():
    dumped = GAME_CATALOG[0].model_dump(mode="json")
    assert set(dumped) == {"id", "name", "minPlayers", "maxPlayers"}
