import enum
import random
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .board import PIECES_PER_SIDE, Board, home_range
from .dice import Dice
from .doubling import STAKES, can_offer_double, next_stake, offer_double, stake_product
from .errors import ContractViolation, IllegalMoveError
from .movement import Movement, apply_movement, sort_key
from .player import Affordances, AIStrategy, HumanStrategy, Player, Strategy
from .scanner import movements_from, scan_movements
from .settings import GameSettings
from .undo import Snapshot, backup, restore

HISTORY_LIMIT = 50
WIN_NAMES = {1: "single", 2: "gammon", 3: "backgammon"}


class GamePhase(enum.Enum):
    NOT_PLAYING = 0
    ROLL_DICE = 1
    MOVE_PIECES = 2
    END_TURN = 3
    RESPOND_TO_DOUBLE = 4


class GameEvent(enum.Enum):
    TURN_ADVANCED = "turn_advanced"
    MOVE_APPLIED = "move_applied"
    TURN_UNDONE = "turn_undone"
    ROUND_ENDED = "round_ended"
    DOUBLE_OFFERED = "double_offered"
    DOUBLE_RESOLVED = "double_resolved"


@dataclass
class RoundResult:
    winner: int
    points: int
    win_type: int  # 1 single, 2 gammon, 3 backgammon
    stake: int
    declined_double: bool = False
    match_over: bool = False

    @property
    def win_name(self) -> str:
        return WIN_NAMES[self.win_type]


class BackgammonGame:
    """
    Backgammon rules engine with doubling cube and one-level turn undo.

    Flow:
    NOT_PLAYING -> ROLL_DICE -> MOVE_PIECES (loop) -> END_TURN -> ROLL_DICE (other player) ...
    A round ends as soon as a goal holds 15 pieces; the phase goes back to NOT_PLAYING.

    Every inbound call returns True if it changed the state and False if it was
    ignored (wrong phase, invalid selection). Contract violations raise.
    """

    def __init__(self, settings: Optional[GameSettings] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.board = Board()
        self.dice = Dice(self.rng)
        self.listeners = defaultdict(list)
        self.history: List[str] = []
        self._setup(settings or GameSettings())

    def _setup(self, settings: GameSettings, strategies: Optional[Sequence[Strategy]] = None):
        self.settings = settings
        self.players = self._build_players(settings, strategies)
        self.turn = 0
        self.phase = GamePhase.NOT_PLAYING
        self.movements: List[Movement] = []
        self.undo_snapshot: Optional[Snapshot] = None
        self.pending_stake: Optional[int] = None
        self.last_result: Optional[RoundResult] = None
        self.round_number = 0
        self.affordances = Affordances()
        self.board.reset()
        self.dice.reset()

    @staticmethod
    def _build_players(settings, strategies=None) -> List[Player]:
        names = (settings.player1_name, settings.player2_name)
        ai_flags = (settings.player1_is_ai, settings.player2_is_ai)
        players = []
        for i in range(2):
            if strategies and strategies[i] is not None:
                strategy = strategies[i]
            else:
                strategy = AIStrategy() if ai_flags[i] else HumanStrategy()
            players.append(Player(
                name=names[i],
                piece=settings.colors[i],
                direction=settings.directions[i],
                strategy=strategy,
                ai=ai_flags[i],
            ))
        return players

    # --- Notifications / log ---

    def subscribe(self, event: GameEvent, callback: Callable):
        self.listeners[event].append(callback)

    def _notify(self, event: GameEvent, **payload):
        for callback in self.listeners[event]:
            callback(**payload)

    def log(self, msg: str):
        self.history.append(msg)
        if len(self.history) > HISTORY_LIMIT:
            self.history.pop(0)

    # --- Queries ---

    @property
    def current_player(self) -> Player:
        return self.players[self.turn]

    @property
    def opponent_player(self) -> Player:
        return self.players[1 - self.turn]

    @property
    def match_over(self) -> bool:
        return any(p.score >= self.settings.target_score for p in self.players)

    @property
    def awaiting_ai(self) -> bool:
        """True when the driver should call step_ai()."""
        active = (GamePhase.ROLL_DICE, GamePhase.MOVE_PIECES, GamePhase.END_TURN)
        return self.phase in active and self.current_player.ai

    def get_pip_counts(self) -> Tuple[int, int]:
        return tuple(self.board.pip_count(i, p.direction) for i, p in enumerate(self.players))

    def destinations(self) -> list:
        """Ends reachable from the selected source, including 'off'."""
        if self.board.selected is None:
            return []
        return sorted({m.end for m in movements_from(self.movements, self.board.selected)},
                      key=lambda e: 25 if e == 'off' else e)

    def can_double(self) -> bool:
        if self.phase != GamePhase.ROLL_DICE:
            return False
        return can_offer_double(self.current_player, self.opponent_player)

    def check_invariants(self):
        """Raises ContractViolation if piece conservation or the cube state is broken."""
        for side in range(2):
            total = self.board.piece_total(side)
            if total != PIECES_PER_SIDE:
                raise ContractViolation(f"Player {side} has {total} pieces")
        stakes = [p.double_points for p in self.players]
        if sum(1 for s in stakes if s > 1) > 1 or any(s not in STAKES for s in stakes):
            raise ContractViolation(f"Invalid stakes {stakes}")

    # --- Match / round ---

    def start_new_game(self, settings: Optional[GameSettings] = None,
                       strategies: Optional[Sequence[Strategy]] = None) -> bool:
        """New match: players, directions and colours are fixed here; scores start at 0."""
        self._setup(settings or self.settings, strategies)
        self.history = []
        self.log(f"New match to {self.settings.target_score}: "
                 f"{self.players[0].name} vs {self.players[1].name}")
        return self.new_round()

    def new_round(self, starting_player: Optional[int] = None) -> bool:
        if self.phase != GamePhase.NOT_PLAYING or self.match_over:
            return False

        self.board.initialize_standard_layout([p.direction for p in self.players])
        self.dice.reset()
        for p in self.players:
            p.double_points = 1
        self.undo_snapshot = None
        self.pending_stake = None
        self.last_result = None
        self.round_number += 1

        if starting_player is None:
            # Rounds alternate, player 1 opens the match
            starting_player = (self.round_number - 1) % 2
        self.log(f"Round {self.round_number}")
        self._start_turn(starting_player)
        return True

    def _start_turn(self, player: int):
        self.turn = player
        self.phase = GamePhase.ROLL_DICE
        self.dice.reset()
        self.movements = []
        self.undo_snapshot = None
        self.board.selected = None
        self.board.clear_marks()
        self.log(f"Turn: {self.current_player.name}")
        self._notify(GameEvent.TURN_ADVANCED, player=player)
        self._dispatch()

    def _dispatch(self):
        """Hands control to the current player's strategy. AI turns wait for step_ai()."""
        if self.phase == GamePhase.NOT_PLAYING:
            self.affordances = Affordances()
        elif self.current_player.ai:
            self.affordances = Affordances()
        else:
            self.current_player.strategy.act(self, False)

    def load_position(self, occupancy, bar=(0, 0), off=(0, 0), turn: Optional[int] = None,
                      dice: Optional[Tuple[int, int]] = None):
        """
        Forces a position (debugging / tests). With `dice` the turn starts
        directly in MOVE_PIECES, otherwise in ROLL_DICE.
        """
        self.board.load_occupancy(occupancy, bar, off)
        if turn is not None:
            self.turn = turn
        self.pending_stake = None
        self.last_result = None
        self.dice.reset()
        self.phase = GamePhase.ROLL_DICE
        self.undo_snapshot = None
        if dice is not None:
            self.dice.set_values(*dice)
            self._begin_moves()
        else:
            self.movements = []
            self._dispatch()

    # --- Turn ---

    def roll_dice(self) -> bool:
        if self.phase != GamePhase.ROLL_DICE:
            return False
        self.dice.roll()
        self.log(f"{self.current_player.name} rolled {list(self.dice.values)}")
        self._begin_moves()
        return True

    def _begin_moves(self):
        # Turn-start backup for undo
        self.undo_snapshot = backup(self.board)
        self.phase = GamePhase.MOVE_PIECES
        self._rescan()
        if not self.movements:
            self.log(f"{self.current_player.name}: no legal moves")
            self.phase = GamePhase.END_TURN
        self._dispatch()

    def _rescan(self):
        player = self.current_player
        moves = scan_movements(self.board, self.turn, player.direction, self.dice)
        self.movements = sorted(moves, key=sort_key)
        self.board.selected = None
        self.board.clear_marks()

    def select_source(self, start) -> bool:
        """Selects a point (or 'bar') and marks its legal destinations."""
        if self.phase != GamePhase.MOVE_PIECES:
            return False
        options = movements_from(self.movements, start)
        if not options:
            self.board.selected = None
            self.board.clear_marks()
            return False
        self.board.selected = start
        self.board.mark_destinations(options)
        return True

    def select_destination(self, end) -> bool:
        """Moves the selected piece to `end` (a point or 'off') if it is a legal destination."""
        if self.phase != GamePhase.MOVE_PIECES or self.board.selected is None:
            return False
        options = [m for m in movements_from(self.movements, self.board.selected) if m.end == end]
        if not options:
            self.board.selected = None
            self.board.clear_marks()
            return False
        # Several dice can bear off the same piece: burn the smallest sufficient one
        return self.move(min(options, key=lambda m: m.die))

    def move(self, movement: Movement) -> bool:
        if self.phase != GamePhase.MOVE_PIECES:
            return False
        if movement not in self.movements:
            raise IllegalMoveError(movement)

        player = self.current_player
        hit = apply_movement(self.board, self.dice, self.turn, movement)
        self.log(f"{player.name}: {movement}" + (" hit" if hit else ""))
        self._notify(GameEvent.MOVE_APPLIED, player=self.turn, movement=movement, hit=hit)

        if self.board.off[self.turn] >= PIECES_PER_SIDE:
            self._end_round(self.turn)
            return True

        self._rescan()
        if not self.movements:
            self.phase = GamePhase.END_TURN
        self._dispatch()
        return True

    def confirm_end_turn(self) -> bool:
        if self.phase != GamePhase.END_TURN:
            return False
        self._start_turn(1 - self.turn)
        return True

    def undo_turn(self) -> bool:
        """Takes back every move of the current turn. The dice stay, consumption is cleared."""
        if self.phase not in (GamePhase.MOVE_PIECES, GamePhase.END_TURN) or self.undo_snapshot is None:
            return False
        restore(self.board, self.undo_snapshot)
        self.dice.reset_consumption()
        self.phase = GamePhase.MOVE_PIECES
        self._rescan()
        if not self.movements:
            self.phase = GamePhase.END_TURN
        self.log(f"{self.current_player.name}: undo")
        self._notify(GameEvent.TURN_UNDONE, player=self.turn)
        self._dispatch()
        return True

    def step_ai(self) -> bool:
        """Runs the current AI player's turn. The caller decides the pacing between calls."""
        if not self.awaiting_ai:
            return False
        return self.current_player.strategy.act(self, False)

    # --- Doubling cube ---

    def request_double(self) -> bool:
        if not self.can_double():
            return False
        offerer, responder = self.current_player, self.opponent_player
        self.pending_stake = next_stake(offerer, responder)
        self.phase = GamePhase.RESPOND_TO_DOUBLE
        self.affordances = Affordances()
        self.log(f"{offerer.name} doubles to {self.pending_stake}")
        self._notify(GameEvent.DOUBLE_OFFERED, player=self.turn, stake=self.pending_stake)

        if responder.strategy.answers_double_synchronously:
            self.respond_double(responder.strategy.act(self, True))
        else:
            self.affordances = Affordances(respond=True)
        return True

    def respond_double(self, accept: bool) -> bool:
        if self.phase != GamePhase.RESPOND_TO_DOUBLE:
            return False
        offerer, responder = self.current_player, self.opponent_player
        self.pending_stake = None
        if accept:
            offer_double(offerer, responder)
            self.phase = GamePhase.ROLL_DICE
            self.log(f"{responder.name} accepts ({offerer.double_points})")
            self._notify(GameEvent.DOUBLE_RESOLVED, player=self.turn, accepted=True)
            self._dispatch()
        else:
            self.log(f"{responder.name} declines")
            self._notify(GameEvent.DOUBLE_RESOLVED, player=self.turn, accepted=False)
            self._end_round(self.turn, declined=True)
        return True

    # --- Scoring ---

    def get_win_type(self, winner: int) -> int:
        """
        1 (single), 2 (gammon: loser bore off nothing),
        3 (backgammon: gammon and loser still on the bar or in the winner's home).
        Does NOT include the stakes.
        """
        loser = 1 - winner
        if self.board.off[loser] > 0:
            return 1
        home = home_range(self.players[winner].direction)
        trapped = self.board.bar[loser] > 0 or any(self.board.owns(i, loser) for i in home)
        return 3 if trapped else 2

    def compute_winner_points(self, winner: int) -> int:
        return self.get_win_type(winner) * stake_product(self.players)

    def _end_round(self, winner: int, declined: bool = False):
        win_type = 1 if declined else self.get_win_type(winner)
        stake = stake_product(self.players)
        points = win_type * stake
        self.players[winner].score += points

        self.phase = GamePhase.NOT_PLAYING
        self.movements = []
        self.undo_snapshot = None
        self.board.selected = None
        self.board.clear_marks()
        self.affordances = Affordances()
        self.last_result = RoundResult(winner=winner, points=points, win_type=win_type, stake=stake,
                                       declined_double=declined, match_over=self.match_over)
        self.log(f"{self.players[winner].name} wins a {self.last_result.win_name} "
                 f"for {points} (score {self.players[0].score}-{self.players[1].score})")
        self._notify(GameEvent.ROUND_ENDED, result=self.last_result)

    # --- Display ---

    def render_ascii(self) -> str:
        p0, p1 = self.players
        lines = []
        lines.append(f"Score: {p0.name} {p0.score} - {p1.score} {p1.name} "
                     f"(target {self.settings.target_score}) | Stakes: {p0.double_points}/{p1.double_points}")
        pips = self.get_pip_counts()
        lines.append(f"Pips: {pips[0]} / {pips[1]} | Turn: {self.current_player.name} "
                     f"({self.phase.name}) | Dice: {self.dice.unconsumed_values()}")
        lines.append(self.board.render_ascii(names=(p0.name, p1.name)))
        return "\n".join(lines)
