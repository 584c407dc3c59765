"""Per-plate drift vectors."""

import numpy as np
import structlog

from .alea_prng import AleaPRNG

logger = structlog.get_logger()


def zero_plate_vectors(count: int) -> np.ndarray:
    """Placeholder drift vectors: one zero 3D vector per plate."""
    return np.zeros((count, 3), dtype=np.float64)


def random_plate_vectors(count: int, prng: AleaPRNG) -> np.ndarray:
    """Draw ``count`` drift vectors with every axis uniform in [-1.0, 1.0]."""
    vectors = np.empty((count, 3), dtype=np.float64)
    for i in range(count):
        for axis in range(3):
            vectors[i, axis] = prng.uniform(-1.0, 1.0)
    return vectors


def ensure_plate_vectors(plate_vectors: np.ndarray, prng: AleaPRNG) -> np.ndarray:
    """
    Fill in drift vectors that were never supplied.

    Vectors are regenerated only when every entry equals the zero vector;
    any other input is returned unchanged.
    """
    plate_vectors = np.asarray(plate_vectors, dtype=np.float64)
    if np.array_equal(plate_vectors, zero_plate_vectors(len(plate_vectors))):
        vectors = random_plate_vectors(len(plate_vectors), prng)
        logger.info("Generated plate vectors", plates=len(vectors))
        return vectors
    return plate_vectors
