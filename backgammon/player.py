"""
Players and their behaviour.

Both strategies share one contract, act(game, is_double_request) -> bool:
- Human: only toggles what the UI may click, then waits for external calls.
- AI: plays a whole turn by itself (double?, roll, random legal moves, end turn).
"""

import enum
import random
from dataclasses import dataclass, field
from typing import Callable, Optional


class PieceColor(str, enum.Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def other(self) -> "PieceColor":
        return PieceColor.WHITE if self is PieceColor.BLACK else PieceColor.BLACK


@dataclass
class Affordances:
    """What a human is allowed to click right now."""
    dice: bool = False
    points: bool = False
    end_turn: bool = False
    double: bool = False
    undo: bool = False
    respond: bool = False  # Answer a pending double


class Strategy:
    answers_double_synchronously = True

    def act(self, game, is_double_request: bool = False) -> bool:
        raise NotImplementedError


class HumanStrategy(Strategy):
    def __init__(self, prompt: Optional[Callable[[str], bool]] = None):
        # prompt: yes/no question, e.g. a modal dialog. Without it the game
        # waits for respond_double().
        self.prompt = prompt

    @property
    def answers_double_synchronously(self):
        return self.prompt is not None

    def act(self, game, is_double_request=False):
        from .game import GamePhase

        if is_double_request:
            offerer = game.current_player
            return bool(self.prompt(f"{offerer.name} doubles to {game.pending_stake}. Accept?"))

        phase = game.phase
        game.affordances = Affordances(
            dice=phase == GamePhase.ROLL_DICE,
            points=phase == GamePhase.MOVE_PIECES,
            end_turn=phase == GamePhase.END_TURN,
            double=phase == GamePhase.ROLL_DICE and game.can_double(),
            undo=phase in (GamePhase.MOVE_PIECES, GamePhase.END_TURN) and game.undo_snapshot is not None,
        )
        return True


def double_probability(lead: int) -> float:
    """Chance of offering a double with a pip lead of `lead`."""
    if lead < 5: return 0.0
    if lead < 20: return 0.1
    if lead < 30: return 0.3
    return 0.6


def accept_probability(deficit: int) -> float:
    """Chance of taking a double when `deficit` pips behind."""
    if deficit < 5: return 0.95
    if deficit < 20: return 0.75
    if deficit < 30: return 0.4
    return 0.1


class AIStrategy(Strategy):
    """Uniform-random mover with pip-count based cube decisions."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def _rng(self, game):
        return self.rng or game.rng

    def act(self, game, is_double_request=False):
        from .game import GamePhase

        if is_double_request:
            return self.accept_double(game)

        me = game.turn
        game.affordances = Affordances()

        if game.phase == GamePhase.ROLL_DICE:
            if game.can_double() and self.wants_to_double(game):
                game.request_double()
                # Declined (round over) or waiting for a human answer
                if game.phase != GamePhase.ROLL_DICE:
                    return True
            game.roll_dice()

        while game.phase == GamePhase.MOVE_PIECES and game.turn == me:
            game.move(self._rng(game).choice(game.movements))

        if game.phase == GamePhase.END_TURN and game.turn == me:
            game.confirm_end_turn()
        return True

    def wants_to_double(self, game) -> bool:
        pips = game.get_pip_counts()
        me = game.turn
        lead = pips[1 - me] - pips[me]
        return self._rng(game).random() < double_probability(lead)

    def accept_double(self, game) -> bool:
        pips = game.get_pip_counts()
        offerer = game.turn
        deficit = pips[1 - offerer] - pips[offerer]
        return self._rng(game).random() < accept_probability(deficit)


@dataclass
class Player:
    name: str
    piece: PieceColor
    direction: int  # +1 or -1, fixed for the match
    strategy: Strategy = field(default_factory=HumanStrategy)
    ai: bool = False
    score: int = 0
    double_points: int = 1
