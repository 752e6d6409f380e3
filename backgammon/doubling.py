"""
Doubling cube.

Each player holds a stake (double_points). At most one of them is above 1:
offering takes the opponent's stake times two and resets the opponent to 1.
"""

MAX_STAKE = 64
STAKES = (1, 2, 4, 8, 16, 32, 64)


def next_stake(offerer, opponent):
    """Stake after a successful offer, or None when the offer must be refused."""
    if offerer.double_points != 1:
        return None  # Already holds the cube
    points = opponent.double_points * 2
    if points > MAX_STAKE:
        return None
    return points


def can_offer_double(offerer, opponent) -> bool:
    return next_stake(offerer, opponent) is not None


def offer_double(offerer, opponent) -> bool:
    """Applies an accepted double. Returns False (no-op) past the cap."""
    points = next_stake(offerer, opponent)
    if points is None:
        return False
    opponent.double_points = 1
    offerer.double_points = points
    return True


def stake_product(players) -> int:
    product = 1
    for p in players:
        product *= p.double_points
    return product
