"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. A fixed seed (string or integer)
yields the same sequence on every platform, which makes generated maps
reproducible bit for bit. One instance is created per generation call and
passed to every stage that draws random numbers.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

TWO_POW_32 = 0x100000000
TWO_POW_NEG_32 = 2.3283064365386963e-10
MASH_SEED = 0xEFC8249D


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Stateful string hash used to derive the generator state from a seed."""

    def __init__(self):
        self.n = MASH_SEED

    def __call__(self, data) -> float:
        n = self.n
        for char in str(data):
            n += ord(char)
            h = 0.02519603282416938 * n
            n = _uint32(h)
            h = (h - n) * n
            n = _uint32(h)
            n += (h - n) * TWO_POW_32
        self.n = n
        return _uint32(n) * TWO_POW_NEG_32


class AleaPRNG:
    """Seedable generator producing floats in [0, 1)."""

    def __init__(self, seed="default"):
        self.seed = seed
        self.call_count = 0

        parts = list(seed) if hasattr(seed, "__iter__") and not isinstance(seed, str) else [seed]

        mash = _Mash()
        state = [mash(" "), mash(" "), mash(" ")]
        for part in parts:
            for i in range(3):
                state[i] -= mash(part)
                if state[i] < 0:
                    state[i] += 1

        self.s0, self.s1, self.s2 = state
        self.c = 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * TWO_POW_NEG_32
        self.s0, self.s1 = self.s1, self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + self.random() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """Random integer in [low, high], both ends inclusive."""
        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")
        return low + int(self.random() * (high - low + 1))

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def shuffle(self, seq: Sequence[T]) -> List[T]:
        """Return a shuffled copy of ``seq`` (Fisher-Yates)."""
        result = list(seq)
        for i in range(len(result) - 1, 0, -1):
            j = self.randint(0, i)
            result[i], result[j] = result[j], result[i]
        return result
