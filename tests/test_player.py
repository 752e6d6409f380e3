import sys
import os
import random
import pytest
import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from backgammon.game import BackgammonGame, GamePhase
from backgammon.player import AIStrategy, HumanStrategy, accept_probability, double_probability
from backgammon.settings import GameSettings


class FixedRandom(random.Random):
    """random() always returns `value`; choice() still works."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def test_double_probability_grows_with_lead():
    leads = [-10, 0, 4, 5, 19, 20, 29, 30, 80]
    probs = [double_probability(x) for x in leads]
    assert probs == sorted(probs)
    assert double_probability(0) == 0.0
    assert double_probability(100) > double_probability(10)


def test_accept_probability_drops_when_behind():
    deficits = [-20, 0, 5, 20, 30, 60]
    probs = [accept_probability(x) for x in deficits]
    assert probs == sorted(probs, reverse=True)
    assert accept_probability(60) < accept_probability(0)


def test_ai_plays_whole_turn():
    game = BackgammonGame(rng=random.Random(3))
    game.start_new_game(GameSettings(player1_is_ai=True, player2_is_ai=True))
    assert game.awaiting_ai
    assert game.step_ai()
    # Equal pip counts: no double, the turn passes to the other AI
    assert game.turn == 1
    assert game.phase == GamePhase.ROLL_DICE
    assert any("rolled" in line for line in game.history)
    game.check_invariants()


def test_ai_turn_then_human_turn():
    game = BackgammonGame(rng=random.Random(5))
    game.start_new_game(GameSettings(player1_is_ai=False, player2_is_ai=True))
    game.roll_dice()
    while game.phase == GamePhase.MOVE_PIECES:
        game.move(game.movements[0])
    game.confirm_end_turn()
    assert game.awaiting_ai
    game.step_ai()
    assert game.turn == 0
    assert not game.awaiting_ai
    assert game.affordances.dice


def test_ai_doubles_with_big_lead_and_human_may_accept():
    game = BackgammonGame()
    ai = AIStrategy(rng=FixedRandom(0.0))
    game.start_new_game(GameSettings(player1_is_ai=True, player2_is_ai=False), strategies=[ai, None])
    occ = game.board.occupancy()
    occ[23] = 0   # Move player 0's back pieces home: a large pip lead
    occ[1] = 2
    game.load_position(occ, turn=0)
    pips = game.get_pip_counts()
    assert pips[1] - pips[0] >= 30

    game.step_ai()
    assert game.phase == GamePhase.RESPOND_TO_DOUBLE
    assert game.pending_stake == 2
    assert game.respond_double(True)
    assert game.players[0].double_points == 2
    # The AI continues its turn on the next step
    assert game.awaiting_ai
    game.step_ai()
    assert game.turn == 1


def test_ai_declines_when_far_behind():
    game = BackgammonGame()
    game.start_new_game(GameSettings(player2_is_ai=False),
                        strategies=[None, AIStrategy(rng=FixedRandom(0.5))])
    occ = game.board.occupancy()
    occ[23] = 0
    occ[1] = 2
    game.load_position(occ, turn=0)
    # Player 1 (the AI) is 44 pips behind: 0.5 >= 0.1 -> decline
    game.request_double()
    assert game.last_result.declined_double
    assert game.last_result.winner == 0


def test_ai_accepts_when_even():
    game = BackgammonGame()
    game.start_new_game(GameSettings(player2_is_ai=False),
                        strategies=[None, AIStrategy(rng=FixedRandom(0.5))])
    game.request_double()
    assert game.phase == GamePhase.ROLL_DICE
    assert game.players[0].double_points == 2


def test_human_strategy_never_moves():
    game = BackgammonGame()
    game.start_new_game(GameSettings(player2_is_ai=False))
    before = game.board.occupancy().copy()
    assert HumanStrategy().act(game, False)
    assert game.phase == GamePhase.ROLL_DICE
    assert (game.board.occupancy() == before).all()
