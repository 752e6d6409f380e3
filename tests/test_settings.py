import sys
import os
import pytest
from pydantic import ValidationError

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from backgammon.game import BackgammonGame
from backgammon.player import AIStrategy, HumanStrategy, PieceColor
from backgammon.settings import GameSettings


def test_defaults():
    settings = GameSettings()
    assert settings.target_score == 15
    assert settings.directions == (-1, 1)
    assert settings.colors == (PieceColor.BLACK, PieceColor.WHITE)


def test_target_score_must_be_positive():
    with pytest.raises(ValidationError):
        GameSettings(target_score=0)


def test_counter_clockwise_and_white():
    settings = GameSettings(player1_clockwise=False, player1_piece_color="white")
    assert settings.directions == (1, -1)
    assert settings.colors == (PieceColor.WHITE, PieceColor.BLACK)


def test_settings_fix_players_for_the_match():
    game = BackgammonGame()
    game.start_new_game(GameSettings(player1_name="Ana", player1_clockwise=False, player2_is_ai=True))
    p0, p1 = game.players
    assert (p0.name, p0.direction, p0.ai) == ("Ana", 1, False)
    assert (p1.direction, p1.ai) == (-1, True)
    assert isinstance(p0.strategy, HumanStrategy)
    assert isinstance(p1.strategy, AIStrategy)
    # Player 0 now starts from point 0
    assert game.board.occupancy()[0] == 2
    assert game.get_pip_counts() == (167, 167)
