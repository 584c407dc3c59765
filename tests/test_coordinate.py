"""Tests for coordinates."""

import pytest
import numpy as np
from py_platemap.core.coordinate import (
    Coordinate, EPSILON, coordinates_from_array, coordinates_to_array
)


class TestCoordinateIdentity:
    """Test equality, hashing and ordering."""

    def test_equal_within_epsilon_hash_alike(self):
        """Coordinates differing only in float noise are one dictionary key."""
        a = Coordinate(0.1 + 0.2, 1.0)
        b = Coordinate(0.3, 1.0)

        assert a.x != b.x  # different bit patterns
        assert a == b
        assert hash(a) == hash(b)
        assert {a: 1}[b] == 1

    def test_equal_implies_same_hash(self):
        """Equality and hashing agree for values around the rounding grid."""
        base = 12.345678901
        for delta in (0.0, 1e-13, 3e-12, 4e-11):
            a = Coordinate(base, -base)
            b = Coordinate(base + delta, -base - delta)
            if a == b:
                assert hash(a) == hash(b)

    def test_straddling_rounding_boundary_is_unequal(self):
        """Points within epsilon on opposite sides of the grid compare unequal."""
        a = Coordinate(0.0, 0.0)
        b = Coordinate(0.6e-10, 0.0)

        assert a.approx_equal(b)
        assert a != b

    def test_negative_zero(self):
        """-0.0 and 0.0 are the same coordinate."""
        assert Coordinate(-0.0, 0.0) == Coordinate(0.0, -0.0)
        assert hash(Coordinate(-0.0, 0.0)) == hash(Coordinate(0.0, -0.0))

    def test_sorting_is_lexicographic(self):
        """Sorting orders by x then y."""
        points = [Coordinate(2, 1), Coordinate(1, 5), Coordinate(1, 2)]
        assert sorted(points) == [Coordinate(1, 2), Coordinate(1, 5), Coordinate(2, 1)]
        assert Coordinate(1, 2) <= Coordinate(1, 2)
        assert Coordinate(3, 0) > Coordinate(1, 9)

    def test_not_equal_to_tuple(self):
        """Comparison with other types is not supported."""
        assert Coordinate(1, 2) != (1, 2)


class TestCoarseComparison:
    """Test the tolerance comparison on axis deltas."""

    def test_within_epsilon(self):
        assert Coordinate(1, 1).coarse_cmp(Coordinate(1 + EPSILON / 2, 1)) == 0

    def test_smaller_dx_sorts_first(self):
        assert Coordinate(0, 0).coarse_cmp(Coordinate(1, 5)) == -1

    def test_larger_dx_sorts_last(self):
        assert Coordinate(0, 0).coarse_cmp(Coordinate(5, 1)) == 1


class TestVectorHelpers:
    """Test vector helpers."""

    def test_vector_and_distance(self):
        p = Coordinate(1, 1)
        q = Coordinate(4, 5)

        assert p.vector_to(q) == Coordinate(3, 4)
        assert p.dist2(q) == 25
        assert p.determinant(q) == 1 * 5 - 1 * 4

    def test_equals_with_span(self):
        p = Coordinate(1, 1)
        assert p.equals_with_span(Coordinate(1, 1), span=1.0)
        assert not p.equals_with_span(Coordinate(1.1, 1), span=1.0)

    def test_coerce(self):
        assert Coordinate.coerce((1, 2)) == Coordinate(1, 2)
        assert Coordinate.coerce(np.array([1.0, 2.0])) == Coordinate(1, 2)
        c = Coordinate(3, 4)
        assert Coordinate.coerce(c) is c

    def test_array_conversion(self):
        arr = np.array([[0.0, 1.0], [2.0, 3.0]])
        points = coordinates_from_array(arr)

        assert points == [Coordinate(0, 1), Coordinate(2, 3)]
        np.testing.assert_array_equal(coordinates_to_array(points), arr)
        assert coordinates_to_array([]).shape == (0, 2)
