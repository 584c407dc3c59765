"""
Height propagation over the cell adjacency graph.

Each plate seed starts a breadth-first flood fill: the seed cell and its
neighbors are queued, every popped cell receives the fill's current height,
the height decays at random, and the fill stops expanding once a stop roll
succeeds or the height drops under the floor. Cells already queued when a
fill stops are still assigned, so every fill drains in finite time.

Overlaps are settled by first claim. Every seed origin is reserved for its
own seed, and seeds run in order against one shared claimed set: a fill
neither writes nor expands through a cell an earlier seed already claimed.
With several workers the fills run independently and are merged in seed
order, an earlier seed keeping every cell it wrote.

With ``dedupe_visits`` off nothing is claimed: every queued occurrence is
reassigned and later seeds overwrite earlier ones.
"""

import multiprocessing
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from ..config import settings as default_settings

logger = structlog.get_logger()


@dataclass
class PropagationConfig:
    """Parameters of the flood fill."""

    initial_height: float = 0.9
    height_decay_probability: float = 0.75
    height_decay_min: float = 0.01
    height_decay_max: float = 0.1
    stop_probability: float = 0.01
    height_floor: float = 0.1
    # False replays the unguarded fill where every queued occurrence is reassigned
    dedupe_visits: bool = True
    workers: int = 1

    def __post_init__(self):
        if self.height_decay_min > self.height_decay_max:
            raise ValueError(
                f"height_decay_min ({self.height_decay_min}) exceeds height_decay_max ({self.height_decay_max})"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        reaches_floor = (self.height_decay_probability > 0 and self.height_decay_max > 0
                         and self.height_floor > 0)
        if not self.dedupe_visits and not reaches_floor and self.stop_probability <= 0:
            raise ValueError("Fills without visit de-duplication need decay or a stop probability to terminate")

    @classmethod
    def from_settings(cls, settings=None) -> "PropagationConfig":
        """Build from a Settings instance, defaulting to the module settings."""
        settings = settings or default_settings
        return cls(
            initial_height=settings.initial_height,
            height_decay_probability=settings.height_decay_probability,
            height_decay_min=settings.height_decay_min,
            height_decay_max=settings.height_decay_max,
            stop_probability=settings.stop_probability,
            height_floor=settings.height_floor,
            dedupe_visits=settings.dedupe_visits,
            workers=settings.workers,
        )


@dataclass
class SeedFill:
    """Ordered height writes produced by one seed's fill."""

    seed_index: int
    writes: List[Tuple[int, float]] = field(default_factory=list)
    pops: int = 0
    stopped: bool = False

    @property
    def cells(self) -> List[int]:
        """Distinct cells written, in first-write order."""
        return list(dict.fromkeys(cell for cell, _ in self.writes))


def fill_from_seed(neighbors: Sequence[Sequence[int]], seed_index: int,
                   prng: AleaPRNG, config: PropagationConfig,
                   claimed: Optional[Set[int]] = None,
                   reserved: Iterable[int] = ()) -> SeedFill:
    """
    Run one seed's flood fill.

    Args:
        neighbors: Adjacency list, one index sequence per cell
        seed_index: Cell the fill starts from
        prng: Random source for this fill only
        config: Fill parameters
        claimed: Cells already owned by earlier seeds; updated in place with
            the cells this fill writes. A private set is used when omitted.
        reserved: Origins of the other seeds, never entered by this fill

    Returns:
        SeedFill with the writes in the order they happened
    """
    result = SeedFill(seed_index=seed_index)
    visited = set() if claimed is None else claimed
    blocked = set(reserved)
    blocked.discard(seed_index)
    height = config.initial_height
    stopped = False

    queue = deque([seed_index])
    queue.extend(neighbors[seed_index])

    while queue:
        current = queue.popleft()
        result.pops += 1

        if config.dedupe_visits:
            if current in visited or current in blocked:
                continue
            visited.add(current)

        result.writes.append((current, height))

        if prng.chance(config.height_decay_probability):
            drop = prng.uniform(config.height_decay_min, config.height_decay_max)
            height = max(height - drop, 0.0)

        if not stopped:
            stopped = prng.random() < config.stop_probability or height < config.height_floor

        if not stopped:
            queue.extend(neighbors[current])

    result.stopped = stopped
    return result


def apply_fill(heights: np.ndarray, fill: SeedFill, claimed: Optional[Set[int]] = None) -> None:
    """
    Replay a fill's writes onto the heights array.

    With ``claimed`` given, cells in it are left alone and the cells written
    here are added to it.
    """
    if claimed is None:
        for cell, value in fill.writes:
            heights[cell] = value
        return

    owned = claimed.copy()
    for cell, value in fill.writes:
        if cell not in owned:
            heights[cell] = value
            claimed.add(cell)


_worker_neighbors = None
_worker_config = None
_worker_origins = ()


def _init_worker(neighbors, config, origins):
    global _worker_neighbors, _worker_config, _worker_origins
    _worker_neighbors = neighbors
    _worker_config = config
    _worker_origins = origins


def _fill_worker(task: Tuple[int, AleaPRNG]) -> SeedFill:
    seed_index, prng = task
    return fill_from_seed(_worker_neighbors, seed_index, prng, _worker_config,
                          reserved=_worker_origins)


def propagate_heights(heights: np.ndarray, neighbors: Sequence[Sequence[int]],
                      seed_indices: Sequence[int], prng: AleaPRNG,
                      config: Optional[PropagationConfig] = None,
                      workers: Optional[int] = None) -> List[SeedFill]:
    """
    Flood-fill heights from every seed and write them into ``heights``.

    One child generator per seed is spawned from ``prng`` before any fill
    runs. Sequential runs share one claimed set across seeds; parallel runs
    fill independently and keep the earliest seed's write for each cell, so
    their result is reproducible but can differ from a sequential run.

    Args:
        heights: Per-cell heights, modified in place
        neighbors: Adjacency list, index aligned with ``heights``
        seed_indices: Starting cells, in priority order
        prng: Random source
        config: Fill parameters, defaults to the configured settings
        workers: Process count, defaults to ``config.workers``

    Returns:
        The SeedFill of every seed, in seed order

    Raises:
        ValueError: if ``workers`` is less than 1
    """
    if config is None:
        config = PropagationConfig.from_settings()
    if workers is None:
        workers = config.workers
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    tasks = [(seed_index, prng.spawn("plate", k)) for k, seed_index in enumerate(seed_indices)]
    origins = frozenset(seed_indices) if config.dedupe_visits else frozenset()

    logger.info("Propagating heights", seeds=len(tasks), cells=len(heights),
                workers=workers, dedupe_visits=config.dedupe_visits)

    if workers > 1 and len(tasks) > 1:
        with multiprocessing.Pool(processes=min(workers, len(tasks)), initializer=_init_worker,
                                  initargs=(neighbors, config, origins)) as pool:
            fills = pool.map(_fill_worker, tasks)
    else:
        shared = set() if config.dedupe_visits else None
        fills = [fill_from_seed(neighbors, seed_index, child, config, claimed=shared, reserved=origins)
                 for seed_index, child in tasks]

    merged = set() if config.dedupe_visits else None
    for fill in fills:
        apply_fill(heights, fill, merged)
        logger.debug("Seed fill merged", seed=fill.seed_index, pops=fill.pops,
                     cells=len(fill.cells), stopped=fill.stopped)

    return fills
