"""
Alea pseudo random generator (Johannes Baagøe's algorithm).

Used wherever rendering needs repeatable randomness, such as the fill
colors of the triangulation pass and jittered demo point grids. The same
seed always yields the same sequence on every platform.
"""


def _uint32(n):
    """Truncate to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def _mash_factory():
    n = 0xEFC8249D

    def mash(data):
        nonlocal n
        for char in str(data):
            n = n + ord(char)
            h = 0.02519603282416938 * n
            n = _uint32(h)
            h -= n
            h *= n
            n = _uint32(h)
            h -= n
            n += h * 0x100000000  # 2^32
        return _uint32(n) * 2.3283064365386963e-10  # 2^-32

    return mash


class AleaPRNG:
    """Seeded generator of floats in [0, 1)."""

    def __init__(self, seed):
        mash = _mash_factory()

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        args = list(seed) if hasattr(seed, "__iter__") and not isinstance(seed, str) else [seed]
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
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def next_int(self, bound: int) -> int:
        """Uniform integer in [0, bound)."""
        if bound <= 0:
            raise ValueError("bound must be positive")
        return int(self.random() * bound)

    def uniform(self, low: float, high: float) -> float:
        return low + self.random() * (high - low)
