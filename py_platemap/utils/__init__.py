"""
Shared utilities.
"""

from .random import ensure_prng, make_prng

__all__ = ['ensure_prng', 'make_prng']
