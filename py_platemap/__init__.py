"""
py-platemap: plate-seeded heightmaps on Voronoi cell partitions.
"""

from .core import Coordinate, Heightmap, CellPartition, PropagationConfig
from .generation import MapConfig, generate_heightmap, summarize_heights

__version__ = "0.1.0"

__all__ = ['Coordinate', 'Heightmap', 'CellPartition', 'PropagationConfig',
           'MapConfig', 'generate_heightmap', 'summarize_heights']
