"""
Cell partition adapter.

Wraps a diagram produced elsewhere (the builders in voronoi_graph.py, or any
object with the same surface) into the index-aligned form the heightmap
works on. Nothing here changes topology: ``sites[i]``, ``cells[i]`` and
``neighbors[i]`` always describe the same cell.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .coordinate import Coordinate
from .errors import DiagramValidationError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Cell:
    """Closed polygon boundary of one cell, vertices in drawing order."""

    points: Tuple[Coordinate, ...]

    @classmethod
    def from_points(cls, points: Iterable) -> "Cell":
        return cls(tuple(Coordinate.coerce(p) for p in points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def as_array(self) -> np.ndarray:
        return np.array([p.to_tuple() for p in self.points], dtype=np.float64).reshape(-1, 2)

    def area(self) -> float:
        """Unsigned polygon area (shoelace formula)."""
        if len(self.points) < 3:
            return 0.0
        vertices = self.as_array()
        x, y = vertices[:, 0], vertices[:, 1]
        return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)

    def centroid(self) -> Coordinate:
        """Area centroid, falling back to the vertex mean for degenerate polygons."""
        vertices = self.as_array()
        if len(vertices) == 0:
            raise ValueError("Cannot compute the centroid of an empty cell")
        if len(vertices) < 3:
            cx, cy = vertices.mean(axis=0)
            return Coordinate(cx, cy)

        area = 0.0
        cx = 0.0
        cy = 0.0
        n = len(vertices)
        for i in range(n):
            j = (i + 1) % n
            a = vertices[i][0] * vertices[j][1] - vertices[j][0] * vertices[i][1]
            area += a
            cx += (vertices[i][0] + vertices[j][0]) * a
            cy += (vertices[i][1] + vertices[j][1]) * a

        if abs(area) < 1e-10:
            mx, my = vertices.mean(axis=0)
            return Coordinate(mx, my)

        area *= 0.5
        return Coordinate(cx / (6.0 * area), cy / (6.0 * area))


def _cells_of(diagram) -> Sequence:
    cells = diagram.cells
    return cells() if callable(cells) else cells


def _triangulation_of(diagram) -> Optional[Any]:
    for name in ("delaunay", "triangulation"):
        handle = getattr(diagram, name, None)
        if handle is not None:
            return handle
    return None


@dataclass(frozen=True)
class CellPartition:
    """
    Index-aligned sites, cells and adjacency of a diagram.

    ``triangulation`` is carried through untouched for hosts that need it.
    """

    sites: Tuple[Coordinate, ...]
    cells: Tuple[Cell, ...]
    neighbors: Tuple[Tuple[int, ...], ...]
    triangulation: Any = None

    @classmethod
    def from_diagram(cls, diagram) -> "CellPartition":
        """
        Copy a diagram exposing ``sites``, ``cells()``, ``neighbors`` and
        ``delaunay`` into a partition.

        No correctness checks happen here; call ``validate`` for that.
        """
        sites = tuple(Coordinate.coerce(s) for s in diagram.sites)
        cells = tuple(
            c if isinstance(c, Cell) else Cell.from_points(c) for c in _cells_of(diagram)
        )
        neighbors = tuple(
            tuple(sorted(set(int(j) for j in cell_neighbors)))
            for cell_neighbors in diagram.neighbors
        )
        return cls(sites=sites, cells=cells, neighbors=neighbors,
                   triangulation=_triangulation_of(diagram))

    @classmethod
    def from_adjacency(cls, neighbors: Sequence[Iterable[int]],
                       sites: Optional[Sequence] = None) -> "CellPartition":
        """
        Build a partition from a bare adjacency list.

        Without explicit sites, cell ``i`` sits at ``(i, 0)`` with a unit
        square around it. Handy for synthetic graphs.
        """
        n = len(neighbors)
        if sites is None:
            site_points = [Coordinate(float(i), 0.0) for i in range(n)]
        else:
            site_points = [Coordinate.coerce(s) for s in sites]

        cells = []
        for site in site_points:
            cells.append(Cell.from_points([
                (site.x - 0.5, site.y - 0.5),
                (site.x + 0.5, site.y - 0.5),
                (site.x + 0.5, site.y + 0.5),
                (site.x - 0.5, site.y + 0.5),
            ]))

        return cls(
            sites=tuple(site_points),
            cells=tuple(cells),
            neighbors=tuple(tuple(sorted(set(int(j) for j in nbrs))) for nbrs in neighbors),
        )

    def __len__(self) -> int:
        return len(self.sites)

    def problems(self) -> List[str]:
        """Describe every inconsistency found; empty when the partition is sound."""
        issues = []
        n_sites, n_cells, n_neighbors = len(self.sites), len(self.cells), len(self.neighbors)
        if not (n_sites == n_cells == n_neighbors):
            issues.append(
                f"Length mismatch: {n_sites} sites, {n_cells} cells, {n_neighbors} neighbor lists"
            )
            return issues

        first_index = {}
        for i, site in enumerate(self.sites):
            if site in first_index:
                issues.append(f"Sites {first_index[site]} and {i} share coordinate {site.to_tuple()}")
            else:
                first_index[site] = i

        for i, cell_neighbors in enumerate(self.neighbors):
            for j in cell_neighbors:
                if j < 0 or j >= n_sites:
                    issues.append(f"Cell {i} lists out-of-range neighbor {j} (cells: {n_sites})")
                elif j == i:
                    issues.append(f"Cell {i} lists itself as a neighbor")
                elif i not in self.neighbors[j]:
                    issues.append(f"Cell {i} lists {j} as neighbor, but not vice versa")
        return issues

    def validate(self) -> "CellPartition":
        """
        Check lengths, neighbor bounds and adjacency symmetry.

        Raises:
            DiagramValidationError: describing the first problem found
        """
        issues = self.problems()
        if issues:
            logger.error("Diagram validation failed", problems=len(issues), first=issues[0])
            raise DiagramValidationError(issues[0])
        return self
