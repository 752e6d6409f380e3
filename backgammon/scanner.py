from typing import List, Optional

from .board import NUM_POINTS, Board, distance_to_off, entry_point, home_range
from .dice import Dice
from .movement import BAR, OFF, Movement


def all_pieces_home(board: Board, side: int, direction: int) -> bool:
    """Bar empty and every piece on the board sits in the home quadrant."""
    if board.bar[side] > 0:
        return False
    home = home_range(direction)
    for i in range(NUM_POINTS):
        if i not in home and board.owns(i, side):
            return False
    return True


def farthest_piece(board: Board, side: int, direction: int) -> Optional[int]:
    """Index of the piece farthest from home, or None if the side has no piece on the board."""
    # Direction +1 travels up, so its rearmost piece has the lowest index.
    points = range(NUM_POINTS) if direction == 1 else reversed(range(NUM_POINTS))
    for i in points:
        if board.owns(i, side):
            return i
    return None


def scan_movements(board: Board, side: int, direction: int, dice: Dice) -> List[Movement]:
    """
    Returns every legal single movement for `side` with the unconsumed dice.

    1. Pieces on the bar must enter first: only bar entries are returned.
    2. Normal moves land on empty, own or single-opponent points (hit).
    3. Bear-off only with all pieces home. Exact distance is always fine,
       a larger die only from the farthest piece.
    """
    values = sorted(set(dice.unconsumed_values()))
    if not values:
        return []

    # 1. Bar priority
    if board.bar[side] > 0:
        moves = []
        for die in values:
            dest = entry_point(die, direction)
            if not board.is_blocked(dest, side):
                moves.append(Movement(BAR, dest, die))
        return moves

    # 2. Normal moves
    can_bear_off = all_pieces_home(board, side, direction)
    rearmost = farthest_piece(board, side, direction) if can_bear_off else None

    moves = []
    for i in range(NUM_POINTS):
        if not board.owns(i, side):
            continue
        for die in values:
            dest = i + die * direction
            if 0 <= dest < NUM_POINTS:
                if not board.is_blocked(dest, side):
                    moves.append(Movement(i, dest, die))
            elif can_bear_off:
                # 3. Bearing off
                exact = distance_to_off(i, direction)
                if die == exact or (die > exact and i == rearmost):
                    moves.append(Movement(i, OFF, die))
    return moves


def movements_from(movements: List[Movement], start) -> List[Movement]:
    return [m for m in movements if m.start == start]
