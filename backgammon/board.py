import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import BlockedDestinationError, EmptySourceError

NUM_POINTS = 24
PIECES_PER_SIDE = 15
BAR_DISTANCE = 24

# (distance from the side's starting edge, pieces)
STANDARD_LAYOUT = [(0, 2), (11, 5), (16, 3), (18, 5)]


def opponent(side: int) -> int:
    return 1 - side


def entry_point(die: int, direction: int) -> int:
    """Point reached from the bar with `die`."""
    if direction == 1:
        return die - 1
    return NUM_POINTS - die


def home_range(direction: int) -> range:
    """The six points nearest the side's goal."""
    if direction == 1:
        return range(18, 24)
    return range(0, 6)


def distance_to_off(index: int, direction: int) -> int:
    # Direction +1: 23 is 1 pip from off. Direction -1: 0 is 1 pip from off.
    if direction == 1:
        return NUM_POINTS - index
    return index + 1


@dataclass
class Point:
    index: int
    owner: Optional[int] = None
    count: int = 0
    mark: bool = False

    def clear(self):
        self.owner = None
        self.count = 0


class Board:
    """
    Board state: 24 points, two bars ("prisons"), two goals ("off").

    - Each point stores its owner (player 0 / 1) and a piece count.
      A point never holds pieces of both players.
    - bar[side] / off[side] are plain counts indexed by player.
    - occupancy() gives the signed view: positive = player 0, negative = player 1.
    """

    def __init__(self):
        self.points = [Point(i) for i in range(NUM_POINTS)]
        self.bar = [0, 0]
        self.off = [0, 0]
        self.selected = None

    def reset(self):
        for p in self.points:
            p.clear()
            p.mark = False
        self.bar = [0, 0]
        self.off = [0, 0]
        self.selected = None

    def initialize_standard_layout(self, directions: Sequence[int]):
        """Places 15 pieces per side; directions[side] is +1 or -1."""
        self.reset()
        for side, direction in enumerate(directions):
            for offset, count in STANDARD_LAYOUT:
                idx = offset if direction == 1 else NUM_POINTS - 1 - offset
                self.points[idx].owner = side
                self.points[idx].count = count

    # --- Marks ---

    def clear_marks(self):
        for p in self.points:
            p.mark = False

    def mark_destinations(self, movements):
        self.clear_marks()
        for m in movements:
            if m.end != 'off':
                self.points[m.end].mark = True

    def marked(self) -> List[int]:
        return [p.index for p in self.points if p.mark]

    # --- Queries ---

    def owns(self, index: int, side: int) -> bool:
        p = self.points[index]
        return p.count > 0 and p.owner == side

    def is_blocked(self, index: int, side: int) -> bool:
        """Two or more opposing pieces."""
        p = self.points[index]
        return p.count >= 2 and p.owner == opponent(side)

    def is_blot(self, index: int, side: int) -> bool:
        """Exactly one opposing piece (a hit)."""
        p = self.points[index]
        return p.count == 1 and p.owner == opponent(side)

    def pieces_on_points(self, side: int) -> int:
        return sum(p.count for p in self.points if p.owner == side)

    def piece_total(self, side: int) -> int:
        return self.pieces_on_points(side) + self.bar[side] + self.off[side]

    def pip_count(self, side: int, direction: int) -> int:
        pips = sum(p.count * distance_to_off(p.index, direction)
                   for p in self.points if p.owner == side)
        return pips + self.bar[side] * BAR_DISTANCE

    # --- Mutation (single piece) ---

    def remove_piece(self, index: int, side: int):
        if not self.owns(index, side):
            raise EmptySourceError(index, side)
        p = self.points[index]
        p.count -= 1
        if p.count == 0:
            p.owner = None

    def add_piece(self, index: int, side: int) -> bool:
        """
        Lands one piece of `side` on `index`.
        Returns True if an opposing blot was hit and sent to its bar.
        """
        p = self.points[index]
        hit = False
        if p.count and p.owner != side:
            if p.count >= 2:
                raise BlockedDestinationError(index, side)
            # Capture: loser goes to 0 here before the mover lands
            p.clear()
            self.bar[opponent(side)] += 1
            hit = True
        p.owner = side
        p.count += 1
        return hit

    # --- Array view ---

    def occupancy(self) -> np.ndarray:
        arr = np.zeros(NUM_POINTS, dtype=int)
        for p in self.points:
            if p.count:
                arr[p.index] = p.count if p.owner == 0 else -p.count
        return arr

    def load_occupancy(self, occupancy, bar=(0, 0), off=(0, 0)):
        """Rebuilds the board from a signed array (positive = player 0)."""
        self.reset()
        for i, val in enumerate(np.asarray(occupancy, dtype=int)):
            if val > 0:
                self.points[i].owner = 0
                self.points[i].count = int(val)
            elif val < 0:
                self.points[i].owner = 1
                self.points[i].count = int(-val)
        self.bar = [int(x) for x in bar]
        self.off = [int(x) for x in off]

    def render_ascii(self, names=("P0", "P1")) -> str:
        """
        Indices 12..23 on top, 11..0 on the bottom.
        X = player 0, O = player 1.
        """
        lines = []
        lines.append(f"Bar: {names[0]} {self.bar[0]} / {names[1]} {self.bar[1]}")
        lines.append(f"Off: {names[0]} {self.off[0]} / {names[1]} {self.off[1]}")
        lines.append("-" * 77)

        def cell(i):
            p = self.points[i]
            sym = '.'
            if p.count:
                sym = f"{'X' if p.owner == 0 else 'O'}{p.count}"
            if p.mark:
                sym += '*'
            return f"{sym:^3}"

        top_indices = range(12, 24)
        lines.append("Idx: " + " | ".join([f"{i:^3}" for i in top_indices]))
        lines.append("Val: " + " | ".join([cell(i) for i in top_indices]))
        lines.append("-" * 77)
        bot_indices = range(11, -1, -1)
        lines.append("Val: " + " | ".join([cell(i) for i in bot_indices]))
        lines.append("Idx: " + " | ".join([f"{i:^3}" for i in bot_indices]))
        lines.append("-" * 77)
        return "\n".join(lines)
