import random
from typing import List, Optional, Tuple

from .errors import NoMatchingDie

SLOTS = 4


class Dice:
    """
    Two dice and four consumption slots.
    Slot i uses die i % 2; doubles open all four slots, otherwise only two.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.reset()

    def reset(self):
        """Neutral state: nothing rolled, nothing to consume."""
        self.values = (0, 0)
        self.consumed = [False] * SLOTS
        self.rolled = False

    def roll(self) -> Tuple[int, int]:
        self.set_values(self.rng.randint(1, 6), self.rng.randint(1, 6))
        return self.values

    def set_values(self, d1: int, d2: int):
        self.values = (d1, d2)
        self.rolled = True
        self.reset_consumption()

    def reset_consumption(self):
        self.consumed = [False] * SLOTS

    @property
    def is_double(self) -> bool:
        return self.values[0] == self.values[1]

    def available_slot_count(self) -> int:
        return 4 if self.is_double else 2

    def unconsumed_values(self) -> List[int]:
        if not self.rolled:
            return []
        return [self.values[i % 2] for i in range(self.available_slot_count())
                if not self.consumed[i]]

    def has(self, value: int) -> bool:
        return value in self.unconsumed_values()

    @property
    def exhausted(self) -> bool:
        return not self.unconsumed_values()

    def consume(self, value: int):
        if self.rolled:
            for i in range(self.available_slot_count()):
                if self.consumed[i]:
                    continue
                if self.values[i % 2] == value:
                    self.consumed[i] = True
                    return
        raise NoMatchingDie(value, self.unconsumed_values())

    def __repr__(self):
        return f"Dice({self.values}, consumed={self.consumed[:self.available_slot_count()]})"
