"""
Core heightmap generation functionality.
"""

from .alea_prng import AleaPRNG
from .coordinate import Coordinate, EPSILON
from .errors import (
    HeightmapError, SeedNotFoundError, InsufficientSitesError,
    PlateVectorMismatchError, DiagramValidationError, DiagramBuildError,
)
from .partition import Cell, CellPartition
from .voronoi_graph import VoronoiDiagram, CentroidDiagram, build_diagram, relax_points
from .sampling import generate_points_poisson, get_jittered_grid
from .propagation import PropagationConfig, SeedFill, fill_from_seed, propagate_heights
from .plate_vectors import ensure_plate_vectors
from .heightmap import Heightmap, select_seed_indices

__all__ = ['AleaPRNG', 'Coordinate', 'EPSILON',
           'HeightmapError', 'SeedNotFoundError', 'InsufficientSitesError',
           'PlateVectorMismatchError', 'DiagramValidationError', 'DiagramBuildError',
           'Cell', 'CellPartition', 'VoronoiDiagram', 'CentroidDiagram', 'build_diagram',
           'relax_points', 'generate_points_poisson', 'get_jittered_grid',
           'PropagationConfig', 'SeedFill', 'fill_from_seed', 'propagate_heights',
           'ensure_plate_vectors', 'Heightmap', 'select_seed_indices']
