"""
Python implementation of the Alea PRNG.

Based on Johannes Baagøe's Alea algorithm. Every random decision in the
heightmap pipeline (seed selection, decay and stop rolls, drift vectors,
point sampling) draws from an explicit AleaPRNG handle so runs can be
replayed from a seed.
"""


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Seedable Alea generator.

    Accepts a single seed (string or number) or an iterable of seed parts,
    e.g. ``AleaPRNG(["world", 3])``.
    """

    def __init__(self, seed):
        """Initialize with seed string, number or iterable of parts."""
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]
        self.seed_parts = tuple(args)

        mash_n = 0xEFC8249D  # 4022871197

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

    def random(self):
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low, high):
        """Uniform float in [low, high)."""
        return low + (high - low) * self.random()

    def randrange(self, start, stop=None):
        """Uniform integer in [start, stop), or [0, start) with one argument."""
        if stop is None:
            start, stop = 0, start
        if stop <= start:
            raise ValueError(f"Empty range for randrange: [{start}, {stop})")
        return start + int(self.random() * (stop - start))

    def chance(self, probability):
        """Return True with the given probability."""
        if probability >= 1:
            return True
        if probability <= 0:
            return False
        return self.random() < probability

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def spawn(self, *parts):
        """
        Derive an independent child generator.

        The child is seeded from a fresh draw of this generator plus the
        given parts, so spawning advances the parent by exactly one call.
        """
        return AleaPRNG([self.random(), *parts])

    def state(self):
        """Snapshot of the internal state (s0, s1, s2, c)."""
        return (self.s0, self.s1, self.s2, self.c)
