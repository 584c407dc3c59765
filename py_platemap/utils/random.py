"""
Random number generation utilities.

The pipeline never keeps a module-level generator: callers pass either a
ready AleaPRNG or a seed, and these helpers turn that into a handle.
Python's random and NumPy's random are not used for generation decisions
so runs stay reproducible from a seed string.
"""

from typing import Optional, Union

from ..config import settings
from ..core.alea_prng import AleaPRNG

SeedLike = Union[str, int, float]


def make_prng(seed: Optional[SeedLike] = None) -> AleaPRNG:
    """
    Create a fresh Alea PRNG.

    Args:
        seed: Seed string or number. Falls back to the configured default seed.

    Returns:
        AleaPRNG instance
    """
    if seed is None:
        seed = settings.default_seed
    return AleaPRNG(seed)


def ensure_prng(prng: Optional[Union[AleaPRNG, SeedLike]] = None) -> AleaPRNG:
    """
    Return ``prng`` if it already is a generator, otherwise build one from it.

    Args:
        prng: AleaPRNG instance, seed, or None for the default seed

    Returns:
        AleaPRNG instance
    """
    if isinstance(prng, AleaPRNG):
        return prng
    return make_prng(prng)
