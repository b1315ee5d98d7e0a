"""Seeded linear congruential sequence generator and its named sub-streams."""
import math
from typing import Sequence, TypeVar

from .errors import InvalidArgument

T = TypeVar("T")

MULTIPLIER = 9301
INCREMENT = 49297
MODULUS = 233280

# Sub-stream offsets. Each concern draws from its own stream so that adding
# draws in one place never shifts the sequence seen by another.
WORLD = 0
GOALS = 1000
DREAMS = 2000
FACTION_AMBITIONS = 5000
FACTION_RELATIONS = 6000
FACTION_TURN = 7000
OMENS = 8000
FAITH = 9000
DIPLOMACY = 10000


class SequenceGenerator:
    def __init__(self, seed: int):
        self.state = int(seed)

    def next(self) -> float:
        """Returns a float in [0, 1)."""
        self.state = (self.state * MULTIPLIER + INCREMENT) % MODULUS
        return self.state / MODULUS

    def next_int(self, low: int, high: int) -> int:
        """Returns an integer in [low, high], inclusive on both ends."""
        if high < low:
            raise InvalidArgument(f"next_int bounds are inverted: {low} > {high}")
        return math.floor(self.next() * (high - low + 1)) + low

    def choice(self, seq: Sequence[T]) -> T:
        if len(seq) == 0:
            raise InvalidArgument("Cannot choose from an empty sequence.")
        return seq[self.next_int(0, len(seq) - 1)]


def derive_seed(seed: int, offset: int, *salts: int) -> int:
    """Combines a session seed, a stream offset and optional salts (tick, region hash) into one seed."""
    value = int(seed) + int(offset)
    for salt in salts:
        value = (value * 31 + int(salt)) % (2 ** 31)
    return value


def sub_stream(seed: int, offset: int, *salts: int) -> SequenceGenerator:
    return SequenceGenerator(derive_seed(seed, offset, *salts))


def get_seeded_rng(seed: int) -> SequenceGenerator:
    """Returns a new SequenceGenerator seeded with the given integer."""
    return SequenceGenerator(seed)
