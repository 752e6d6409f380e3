import numpy as np
from dataclasses import dataclass
from typing import List

from .board import Board


@dataclass
class Snapshot:
    """Board state at the start of a turn (signed occupancy, bars, goals)."""
    places: np.ndarray
    prison: List[int]
    goal: List[int]


def backup(board: Board) -> Snapshot:
    return Snapshot(places=board.occupancy().copy(), prison=board.bar.copy(), goal=board.off.copy())


def restore(board: Board, snapshot: Snapshot):
    board.load_occupancy(snapshot.places, snapshot.prison, snapshot.goal)
