"""Point scatter generation for diagram sites."""

import math

import numpy as np
import structlog

from .alea_prng import AleaPRNG

logger = structlog.get_logger()


def generate_points_poisson(width: float, height: float, radius: float,
                            prng: AleaPRNG, max_attempts: int = 30) -> np.ndarray:
    """
    Bridson's Poisson-disc sampling in ``[0, width) x [0, height)``.

    Args:
        width: Domain width
        height: Domain height
        radius: Minimum distance between any two samples
        prng: Random source
        max_attempts: Candidates tried around an active sample before retiring it

    Returns:
        Array of [x, y] point coordinates
    """
    if radius <= 0:
        raise ValueError(f"Poisson radius must be positive, got {radius}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Domain must have positive size, got {width}x{height}")

    cell_size = radius / math.sqrt(2.0)
    grid_w = int(math.ceil(width / cell_size))
    grid_h = int(math.ceil(height / cell_size))
    grid = {}  # (gx, gy) -> point index
    radius2 = radius * radius

    points = []
    active = []

    def fits(px, py):
        gx = int(px / cell_size)
        gy = int(py / cell_size)
        for nx in range(max(gx - 2, 0), min(gx + 3, grid_w)):
            for ny in range(max(gy - 2, 0), min(gy + 3, grid_h)):
                idx = grid.get((nx, ny))
                if idx is None:
                    continue
                qx, qy = points[idx]
                if (px - qx) ** 2 + (py - qy) ** 2 < radius2:
                    return False
        return True

    def place(px, py):
        points.append((px, py))
        active.append(len(points) - 1)
        grid[(int(px / cell_size), int(py / cell_size))] = len(points) - 1

    place(prng.uniform(0, width), prng.uniform(0, height))

    while active:
        slot = prng.randrange(len(active))
        px, py = points[active[slot]]
        found = False

        for _ in range(max_attempts):
            angle = prng.uniform(0, 2 * math.pi)
            dist = prng.uniform(radius, 2 * radius)
            cx = px + dist * math.cos(angle)
            cy = py + dist * math.sin(angle)
            if 0 <= cx < width and 0 <= cy < height and fits(cx, cy):
                place(cx, cy)
                found = True
                break

        if not found:
            active[slot] = active[-1]
            active.pop()

    logger.debug("Poisson-disc sampling complete", points=len(points), radius=radius)
    return np.array(points, dtype=np.float64).reshape(-1, 2)


def get_jittered_grid(width: float, height: float, spacing: float,
                      prng: AleaPRNG) -> np.ndarray:
    """
    Generate jittered square grid points.

    Creates a regular grid with randomized positions to prevent artificial
    patterns. Each point moves at most 45% of the spacing from its node.

    Args:
        width: Grid width
        height: Grid height
        spacing: Distance between grid points
        prng: Random source

    Returns:
        Array of [x, y] point coordinates
    """
    if spacing <= 0:
        raise ValueError(f"Grid spacing must be positive, got {spacing}")

    radius = spacing / 2  # square radius
    jittering = radius * 0.9  # max deviation
    double_jittering = jittering * 2

    def jitter():
        return prng.random() * double_jittering - jittering

    points = []
    y = radius
    while y < height:
        x = radius
        while x < width:
            xj = min(round(x + jitter(), 2), width)
            yj = min(round(y + jitter(), 2), height)
            points.append([xj, yj])
            x += spacing
        y += spacing

    return np.array(points, dtype=np.float64).reshape(-1, 2)
