import sys
import os
import random
import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from backgammon.game import BackgammonGame, GamePhase
from backgammon.play import HELP, human_command, parse_target
from backgammon.settings import GameSettings


def new_game():
    game = BackgammonGame(rng=random.Random(0))
    game.start_new_game(GameSettings(player2_is_ai=False))
    return game


def test_parse_target():
    assert parse_target("12") == 12
    assert parse_target(" BAR ") == "bar"
    assert parse_target("off") == "off"
    with pytest.raises(ValueError):
        parse_target("x")


def test_roll_command():
    game = new_game()
    assert human_command(game, "r")
    assert game.phase != GamePhase.ROLL_DICE


def test_move_command():
    game = new_game()
    game.load_position(game.board.occupancy(), turn=0, dice=(3, 1))
    assert human_command(game, "m 7 4")
    assert game.board.occupancy()[4] == 1
    assert human_command(game, "u")
    assert game.board.occupancy()[4] == 0


def test_bad_command_prints_help(capsys):
    game = new_game()
    assert human_command(game, "m 7 x")
    assert human_command(game, "e")
    assert HELP in capsys.readouterr().out


def test_quit():
    assert not human_command(new_game(), "q")
    assert human_command(new_game(), "")
