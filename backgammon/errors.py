class BackgammonError(Exception):
    """Base class for engine errors."""


class ContractViolation(BackgammonError, AssertionError):
    """
    The move generator and the move applier disagree.
    Never a user error: the generator's output is the applier's only legal input.
    """


class NoMatchingDie(ContractViolation):
    def __init__(self, value, remaining):
        super().__init__(f"No unconsumed die with value {value} (remaining: {remaining})")
        self.value = value
        self.remaining = remaining


class EmptySourceError(ContractViolation):
    def __init__(self, start, side):
        super().__init__(f"Player {side} has no piece at {start!r}")
        self.start = start
        self.side = side


class BlockedDestinationError(ContractViolation):
    def __init__(self, end, side):
        super().__init__(f"Point {end} is blocked for player {side}")
        self.end = end
        self.side = side


class IllegalMoveError(ContractViolation):
    def __init__(self, movement):
        super().__init__(f"Movement {movement} is not in the current legal set")
        self.movement = movement
