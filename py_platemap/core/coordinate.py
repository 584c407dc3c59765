"""2D coordinates used as sites, polygon vertices and dictionary keys."""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable, Iterator, Sequence, Tuple, Union

import numpy as np

EPSILON = 1e-10
COORDINATE_PRECISION = 10  # decimal places kept by the snapped key


def snap(value: float, precision: int = COORDINATE_PRECISION) -> float:
    """Round a component onto the coordinate grid, folding -0.0 into 0.0."""
    return round(float(value), precision) + 0.0


@total_ordering
@dataclass(frozen=True, eq=False)
class Coordinate:
    """
    Point in the plane with tolerance-aware identity.

    Equality, hashing and ordering all use the snapped key (both axes
    rounded to COORDINATE_PRECISION decimals), so two coordinates that are
    equal always hash alike. Points within EPSILON of each other that fall
    on opposite sides of a rounding boundary compare unequal; use
    ``approx_equal`` for the raw tolerance test.
    """

    x: float
    y: float
    _key: Tuple[float, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "_key", (snap(self.x), snap(self.y)))

    @classmethod
    def from_xy(cls, x: float, y: float) -> "Coordinate":
        return cls(x, y)

    @classmethod
    def coerce(cls, value: Union["Coordinate", Sequence[float], np.ndarray]) -> "Coordinate":
        """Build a Coordinate from a Coordinate, an (x, y) pair or a numpy row."""
        if isinstance(value, Coordinate):
            return value
        x, y = value[0], value[1]
        return cls(x, y)

    @property
    def key(self) -> Tuple[float, float]:
        return self._key

    def __eq__(self, other):
        if not isinstance(other, Coordinate):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other):
        if not isinstance(other, Coordinate):
            return NotImplemented
        return self._key < other._key

    def __hash__(self):
        return hash(self._key)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def approx_equal(self, other: "Coordinate", eps: float = EPSILON) -> bool:
        """True when both axis deltas are strictly below ``eps``."""
        return abs(self.x - other.x) < eps and abs(self.y - other.y) < eps

    def coarse_cmp(self, other: "Coordinate", eps: float = EPSILON) -> int:
        """
        Tolerance comparison on axis deltas.

        Returns 0 when both deltas are below ``eps``, -1 when ``|dx| < |dy|``
        and 1 otherwise. This is not a total order and is never used for
        sorting or hashing.
        """
        dx = abs(self.x - other.x)
        dy = abs(self.y - other.y)
        if dx < eps and dy < eps:
            return 0
        if dx < dy:
            return -1
        return 1

    # Vector helpers

    def vector_to(self, other: "Coordinate") -> "Coordinate":
        """Vector from this point to ``other``."""
        return Coordinate(other.x - self.x, other.y - self.y)

    def determinant(self, other: "Coordinate") -> float:
        return self.x * other.y - self.y * other.x

    def dist2(self, other: "Coordinate") -> float:
        """Squared euclidean distance."""
        d = self.vector_to(other)
        return d.x * d.x + d.y * d.y

    def equals_with_span(self, other: "Coordinate", span: float) -> bool:
        """Scale-relative equality: squared distance over ``span`` below 1e-20."""
        return self.dist2(other) / span < 1e-20

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


def coordinates_from_array(points: Union[np.ndarray, Iterable]) -> list:
    """Convert an (N, 2) array or iterable of pairs into Coordinates."""
    return [Coordinate.coerce(p) for p in points]


def coordinates_to_array(points: Iterable[Coordinate]) -> np.ndarray:
    """Stack Coordinates into an (N, 2) float64 array."""
    arr = np.array([p.to_tuple() for p in points], dtype=np.float64)
    return arr.reshape(-1, 2)
