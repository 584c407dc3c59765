"""
Heightmap aggregate.

Owns a diagram's cells, sites and adjacency together with the per-cell
heights, the plate seed points and their drift vectors. Structure is fixed
at construction; only ``heights`` and ``plate_vectors`` change afterwards.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .coordinate import Coordinate
from .errors import InsufficientSitesError, PlateVectorMismatchError, SeedNotFoundError
from .partition import Cell, CellPartition
from .plate_vectors import ensure_plate_vectors, zero_plate_vectors
from .propagation import PropagationConfig, SeedFill, propagate_heights
from ..config import settings as default_settings
from ..utils.random import ensure_prng

logger = structlog.get_logger()


def select_seed_indices(n_sites: int, plate_count: int, prng: AleaPRNG) -> List[int]:
    """
    Pick one site index per plate from equal-width index bands.

    Band ``i`` covers ``[i * band, (i + 1) * band)`` with
    ``band = n_sites // plate_count``; bands never overlap, so the picks are
    distinct.

    Raises:
        InsufficientSitesError: if there are fewer sites than plates
    """
    if plate_count < 1:
        raise ValueError(f"plate_count must be at least 1, got {plate_count}")
    if n_sites < plate_count:
        raise InsufficientSitesError(n_sites, plate_count)

    band = n_sites // plate_count
    return [prng.randrange(i * band, (i + 1) * band) for i in range(plate_count)]


class Heightmap:
    """
    Per-cell elevation over a cell partition.

    Args:
        diagram: Diagram exposing ``sites``, ``cells()``, ``neighbors`` and
            ``delaunay``, or a ready CellPartition
        seed_points: Plate origins; chosen at random from the sites if omitted
        plate_vectors: One 3D drift vector per seed; zeros if omitted
        prng: Random source or seed for every random decision of this map
        settings: Settings instance, defaults to the module settings
        validate: Check adjacency symmetry and index bounds
    """

    def __init__(self, diagram, seed_points: Optional[Sequence] = None,
                 plate_vectors: Optional[Sequence] = None, *, prng=None,
                 settings=None, validate: bool = True):
        self.settings = settings = settings or default_settings
        self.prng = ensure_prng(settings.default_seed if prng is None else prng)

        partition = diagram if isinstance(diagram, CellPartition) else CellPartition.from_diagram(diagram)
        if validate:
            partition.validate()
        self.partition = partition

        self.triangulation = partition.triangulation
        self.cells: Tuple[Cell, ...] = partition.cells
        self.sites: Tuple[Coordinate, ...] = partition.sites
        self.cell_neighbors: Tuple[Tuple[int, ...], ...] = partition.neighbors
        self.heights = np.zeros(len(self.cells), dtype=np.float64)
        self.assigned = np.zeros(len(self.cells), dtype=bool)

        self.cells_index: Dict[Cell, int] = {cell: i for i, cell in enumerate(self.cells)}
        self.sites_index: Dict[Coordinate, int] = {site: i for i, site in enumerate(self.sites)}

        if seed_points is None:
            indices = select_seed_indices(len(self.sites), settings.plate_count, self.prng)
            self.seed_points: List[Coordinate] = [self.sites[i] for i in indices]
            logger.info("Selected plate seeds", plates=len(indices), seed_indices=indices)
        else:
            self.seed_points = [Coordinate.coerce(p) for p in seed_points]
            # resolve now so a bad seed fails construction
            self.seed_indices()

        if plate_vectors is None:
            self.plate_vectors = zero_plate_vectors(len(self.seed_points))
        else:
            vectors = np.asarray(plate_vectors, dtype=np.float64)
            if vectors.shape != (len(self.seed_points), 3):
                raise PlateVectorMismatchError(
                    f"Expected plate vectors of shape ({len(self.seed_points)}, 3), got {vectors.shape}"
                )
            self.plate_vectors = vectors.copy()

        logger.info("Heightmap created", cells=len(self.cells), plates=len(self.seed_points))

    def __len__(self) -> int:
        return len(self.cells)

    def index_of_site(self, point) -> int:
        """
        Cell index of a site coordinate.

        Raises:
            SeedNotFoundError: if the point is not a site
        """
        point = Coordinate.coerce(point)
        try:
            return self.sites_index[point]
        except KeyError:
            raise SeedNotFoundError(point) from None

    def index_of_cell(self, cell) -> int:
        """Index of a cell polygon; raises KeyError for unknown polygons."""
        if not isinstance(cell, Cell):
            cell = Cell.from_points(cell)
        return self.cells_index[cell]

    def seed_indices(self) -> List[int]:
        """Cell indices of the seed points, in seed order."""
        return [self.index_of_site(p) for p in self.seed_points]

    def neighbors_of(self, index: int) -> Tuple[int, ...]:
        return self.cell_neighbors[index]

    def reset_heights(self) -> None:
        self.heights[:] = 0.0
        self.assigned[:] = False

    def generate_plate_vectors(self) -> np.ndarray:
        """Draw drift vectors unless some were already supplied or generated."""
        self.plate_vectors = ensure_plate_vectors(self.plate_vectors, self.prng)
        return self.plate_vectors

    def generate_heights(self, plate_vectors: Optional[Sequence] = None,
                         config: Optional[PropagationConfig] = None,
                         workers: Optional[int] = None) -> List[SeedFill]:
        """
        Assign heights by flood-filling from every plate seed.

        Drift vectors are filled in first (and replaced by ``plate_vectors``
        when given); they do not influence the heights yet.

        Args:
            plate_vectors: Optional replacement drift vectors
            config: Fill parameters, defaults to this map's settings
            workers: Process count override

        Returns:
            The SeedFill of every seed, in seed order
        """
        if plate_vectors is not None:
            vectors = np.asarray(plate_vectors, dtype=np.float64)
            if vectors.shape != self.plate_vectors.shape:
                raise PlateVectorMismatchError(
                    f"Expected plate vectors of shape {self.plate_vectors.shape}, got {vectors.shape}"
                )
            self.plate_vectors = vectors.copy()
        self.generate_plate_vectors()

        if config is None:
            config = PropagationConfig.from_settings(self.settings)

        fills = propagate_heights(self.heights, self.cell_neighbors, self.seed_indices(),
                                  self.prng, config, workers=workers)
        for fill in fills:
            self.assigned[fill.cells] = True
        return fills
