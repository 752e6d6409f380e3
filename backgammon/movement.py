from typing import NamedTuple, Union

from .board import Board
from .dice import Dice
from .errors import BlockedDestinationError, EmptySourceError, NoMatchingDie

BAR = 'bar'
OFF = 'off'


class Movement(NamedTuple):
    """A single checker move: start (point or 'bar') -> end (point or 'off') using `die`."""
    start: Union[int, str]
    end: Union[int, str]
    die: int

    @property
    def from_bar(self) -> bool:
        return self.start == BAR

    @property
    def to_goal(self) -> bool:
        return self.end == OFF

    def __str__(self):
        return f"{self.start}->{self.end} ({self.die})"


def sort_key(m: Movement):
    # 'bar' before every point, 'off' after
    def clean_val(v):
        if v == BAR: return -1
        if v == OFF: return 25
        return v
    return (clean_val(m.start), clean_val(m.end), m.die)


def apply_movement(board: Board, dice: Dice, side: int, m: Movement) -> bool:
    """
    Applies one movement for `side`.
    Validates everything before mutating, so a contract violation leaves the state intact.
    Returns True if an opposing blot was hit.
    """
    # 1. Validate
    if m.from_bar:
        if board.bar[side] <= 0:
            raise EmptySourceError(m.start, side)
    elif not board.owns(m.start, side):
        raise EmptySourceError(m.start, side)

    if not dice.has(m.die):
        raise NoMatchingDie(m.die, dice.unconsumed_values())

    if not m.to_goal and board.is_blocked(m.end, side):
        raise BlockedDestinationError(m.end, side)

    # 2. Remove from start
    if m.from_bar:
        board.bar[side] -= 1
    else:
        board.remove_piece(m.start, side)

    dice.consume(m.die)

    # 3. Add to end
    if m.to_goal:
        board.off[side] += 1
        return False
    return board.add_piece(m.end, side)
