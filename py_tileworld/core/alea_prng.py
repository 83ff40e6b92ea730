"""
Alea pseudo-random generator used for every random draw of a world run.

Based on Johannes Baagøe's Alea algorithm. One instance is created per
generation run and passed explicitly to whatever needs randomness, so a
seed reproduces shuffle order, cluster counts, sizes and seed cells.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Seeded Alea generator with integer, float and shuffle helpers.

    Accepts a string or integer seed (or an iterable of them).
    """

    def __init__(self, seed):
        """Initialize with seed string or number."""
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def rand_int(self, min_val: int, max_val: int) -> int:
        """Uniform integer in [min_val, max_val], both ends inclusive."""
        if max_val < min_val:
            raise ValueError(f"Empty range [{min_val}, {max_val}]")
        return min_val + int(self.random() * (max_val - min_val + 1))

    def index(self, length: int) -> int:
        """Uniform index in [0, length)."""
        if length <= 0:
            raise IndexError("Cannot pick an index from an empty sequence")
        return int(self.random() * length)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.index(len(seq))]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy of ``items`` (Fisher-Yates)."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.index(i + 1)
            result[i], result[j] = result[j], result[i]
        return result
