"""Voronoi and centroidal diagram construction on top of scipy.spatial."""

from typing import List, Sequence

import numpy as np
import structlog
from scipy.spatial import Delaunay, QhullError, Voronoi

from .coordinate import Coordinate, coordinates_from_array
from .errors import DiagramBuildError
from .partition import Cell

logger = structlog.get_logger()

DIAGRAM_FLAVORS = ("centroid", "voronoi")


def _as_points(points) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise DiagramBuildError(f"Expected an (N, 2) array of points, got shape {arr.shape}")
    if len(arr) < 3:
        raise DiagramBuildError(f"Need at least 3 points to build a diagram, got {len(arr)}")
    if len(np.unique(arr, axis=0)) != len(arr):
        raise DiagramBuildError("Points contain duplicates")
    return arr


def _order_around(center: np.ndarray, vertices: np.ndarray) -> np.ndarray:
    """Sort polygon vertices counter-clockwise around ``center``."""
    angles = np.arctan2(vertices[:, 1] - center[1], vertices[:, 0] - center[0])
    return vertices[np.argsort(angles, kind="stable")]


def get_mirrored_points(points: np.ndarray, min_corner: np.ndarray,
                        max_corner: np.ndarray) -> np.ndarray:
    """
    Reflect points across the four box edges.

    Adding the reflections closes every input cell exactly on the box
    boundary, so no Voronoi region of an input point is infinite.
    """
    left = points.copy()
    left[:, 0] = 2 * min_corner[0] - left[:, 0]
    right = points.copy()
    right[:, 0] = 2 * max_corner[0] - right[:, 0]
    bottom = points.copy()
    bottom[:, 1] = 2 * min_corner[1] - bottom[:, 1]
    top = points.copy()
    top[:, 1] = 2 * max_corner[1] - top[:, 1]
    return np.vstack([left, right, bottom, top])


def build_cell_connectivity(vor: Voronoi, n_grid_points: int) -> List[List[int]]:
    """
    Build cell adjacency from scipy Voronoi ridges.

    Only ridges between input points count; ridges to mirrored points are
    the box boundary.

    Args:
        vor: scipy Voronoi diagram
        n_grid_points: Number of input points (excluding mirrors)

    Returns:
        Sorted neighbor index lists, one per input point
    """
    cell_neighbors = [set() for _ in range(n_grid_points)]

    for p1, p2 in vor.ridge_points:
        if p1 < n_grid_points and p2 < n_grid_points:
            cell_neighbors[p1].add(int(p2))
            cell_neighbors[p2].add(int(p1))

    return [sorted(neighbors) for neighbors in cell_neighbors]


class VoronoiDiagram:
    """
    Voronoi diagram bounded by an axis-aligned box.

    Exposes ``sites``, ``cells()``, ``neighbors`` and ``delaunay``.
    """

    def __init__(self, points, min_corner: Sequence[float], max_corner: Sequence[float]):
        pts = _as_points(points)
        lo = np.asarray(min_corner, dtype=np.float64)
        hi = np.asarray(max_corner, dtype=np.float64)
        if np.any(hi <= lo):
            raise DiagramBuildError(f"Empty bounding box {tuple(lo)} - {tuple(hi)}")
        if np.any(pts < lo) or np.any(pts > hi):
            raise DiagramBuildError("All points must lie inside the bounding box")

        n = len(pts)
        # mirror across a slightly larger box so points on the edge never coincide with their reflection
        pad = 1e-6 * float(np.max(hi - lo))
        try:
            vor = Voronoi(np.vstack([pts, get_mirrored_points(pts, lo - pad, hi + pad)]))
            self.delaunay = Delaunay(pts)
        except QhullError as exc:
            raise DiagramBuildError(f"Qhull failed to build the diagram: {exc}") from exc

        self.min_corner = Coordinate(lo[0], lo[1])
        self.max_corner = Coordinate(hi[0], hi[1])
        self.sites = coordinates_from_array(pts)
        self.neighbors = build_cell_connectivity(vor, n)

        self._cells = []
        for i in range(n):
            region = vor.regions[vor.point_region[i]]
            if not region or -1 in region:
                raise DiagramBuildError(f"Cell {i} is unbounded")
            vertices = np.clip(vor.vertices[region], lo, hi)
            self._cells.append(Cell.from_points(_order_around(pts[i], vertices)))

        logger.info("Voronoi diagram built", cells=n, vertices=len(vor.vertices))

    def cells(self) -> List[Cell]:
        return self._cells


class CentroidDiagram:
    """
    Centroidal dual of a Delaunay triangulation.

    Each site's cell joins the centroids of the triangles around it, so hull
    sites get cells that stop at the hull. Neighbors are Delaunay edges.
    """

    def __init__(self, points):
        pts = _as_points(points)
        n = len(pts)
        try:
            tri = Delaunay(pts)
        except QhullError as exc:
            raise DiagramBuildError(f"Qhull failed to triangulate points: {exc}") from exc

        if len(tri.coplanar):
            raise DiagramBuildError(
                f"{len(tri.coplanar)} points were left out of the triangulation"
            )

        self.delaunay = tri
        self.sites = coordinates_from_array(pts)

        indptr, indices = tri.vertex_neighbor_vertices
        self.neighbors = [sorted(int(j) for j in indices[indptr[k]:indptr[k + 1]]) for k in range(n)]

        centroids = pts[tri.simplices].mean(axis=1)
        incident = [[] for _ in range(n)]
        for t, simplex in enumerate(tri.simplices):
            for v in simplex:
                incident[v].append(t)

        self._cells = []
        for i in range(n):
            vertices = centroids[incident[i]]
            self._cells.append(Cell.from_points(_order_around(pts[i], vertices)))

        logger.info("Centroid diagram built", cells=n, triangles=len(tri.simplices))

    def cells(self) -> List[Cell]:
        return self._cells


def relax_points(points: np.ndarray, width: float, height: float,
                 n_iterations: int = 1) -> np.ndarray:
    """Apply Lloyd's relaxation to improve point distribution.

    Moves each point to the centroid of its bounded Voronoi cell.

    Args:
        points: Points to relax
        width: Map width
        height: Map height
        n_iterations: Number of relaxation iterations

    Returns:
        Relaxed point coordinates
    """
    points = np.asarray(points, dtype=np.float64).copy()

    for iteration in range(n_iterations):
        diagram = VoronoiDiagram(points, (0.0, 0.0), (width, height))
        for i, cell in enumerate(diagram.cells()):
            centroid = cell.centroid()
            points[i][0] = np.clip(centroid.x, 0, width)
            points[i][1] = np.clip(centroid.y, 0, height)
        logger.debug("Relaxation iteration complete", iteration=iteration + 1)

    return points


def build_diagram(points, flavor: str, width: float, height: float):
    """Build a diagram of the given flavor ("centroid" or "voronoi")."""
    if flavor == "centroid":
        return CentroidDiagram(points)
    if flavor == "voronoi":
        return VoronoiDiagram(points, (0.0, 0.0), (width, height))
    raise ValueError(f"Unknown diagram flavor {flavor!r}, expected one of {DIAGRAM_FLAVORS}")
