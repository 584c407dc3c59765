"""End-to-end generation: sample points, build a diagram, grow heights."""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np
import structlog

from .config import settings as default_settings
from .core.heightmap import Heightmap
from .core.propagation import PropagationConfig
from .core.sampling import generate_points_poisson, get_jittered_grid
from .core.voronoi_graph import DIAGRAM_FLAVORS, build_diagram, relax_points
from .utils.random import SeedLike, make_prng

logger = structlog.get_logger()

SAMPLERS = ("poisson", "jittered")


@dataclass
class MapConfig:
    """Configuration for one generated map."""

    width: float
    height: float
    radius: float = 15.0  # Poisson radius, or grid spacing for the jittered sampler
    flavor: str = "centroid"
    sampler: str = "poisson"
    relax_iterations: int = 0

    def __post_init__(self):
        if self.flavor not in DIAGRAM_FLAVORS:
            raise ValueError(f"Unknown diagram flavor {self.flavor!r}, expected one of {DIAGRAM_FLAVORS}")
        if self.sampler not in SAMPLERS:
            raise ValueError(f"Unknown sampler {self.sampler!r}, expected one of {SAMPLERS}")


def generate_heightmap(config: MapConfig, seed: Optional[SeedLike] = None,
                       seed_points: Optional[Sequence] = None,
                       plate_vectors: Optional[Sequence] = None,
                       propagation: Optional[PropagationConfig] = None,
                       settings=None) -> Heightmap:
    """
    Generate a complete heightmap.

    Args:
        config: Map dimensions, sampling and diagram options
        seed: PRNG seed; the same seed reproduces the same map
        seed_points: Optional plate origins (must be sites of the diagram)
        plate_vectors: Optional drift vectors, one per seed
        propagation: Optional fill parameters
        settings: Settings instance, defaults to the module settings

    Returns:
        Heightmap with heights assigned
    """
    settings = settings or default_settings
    prng = make_prng(settings.default_seed if seed is None else seed)
    logger.info("Generating heightmap", width=config.width, height=config.height,
                radius=config.radius, flavor=config.flavor, sampler=config.sampler, seed=seed)

    if config.sampler == "poisson":
        points = generate_points_poisson(config.width, config.height, config.radius, prng)
    else:
        points = get_jittered_grid(config.width, config.height, config.radius, prng)

    if config.relax_iterations:
        points = relax_points(points, config.width, config.height, config.relax_iterations)

    diagram = build_diagram(points, config.flavor, config.width, config.height)
    heightmap = Heightmap(diagram, seed_points, plate_vectors, prng=prng, settings=settings)
    heightmap.generate_heights(config=propagation)

    logger.info("Heightmap generated", **summarize_heights(heightmap))
    return heightmap


def summarize_heights(heightmap: Heightmap) -> Dict[str, float]:
    """Basic statistics of a heightmap's heights."""
    heights = heightmap.heights
    if len(heights) == 0:
        return {"cells": 0, "assigned": 0, "min": 0.0, "max": 0.0, "mean": 0.0}
    return {
        "cells": int(len(heights)),
        "assigned": int(np.count_nonzero(heightmap.assigned)),
        "min": float(np.min(heights)),
        "max": float(np.max(heights)),
        "mean": float(np.mean(heights)),
    }
