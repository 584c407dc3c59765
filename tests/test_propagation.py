"""Tests for the height propagation engine."""

import pytest
import numpy as np
from py_platemap.core.alea_prng import AleaPRNG
from py_platemap.core.propagation import (
    PropagationConfig, apply_fill, fill_from_seed, propagate_heights
)


def ring(n):
    return [[(i - 1) % n, (i + 1) % n] for i in range(n)]


def chain(n):
    return [[j for j in (i - 1, i + 1) if 0 <= j < n] for i in range(n)]


@pytest.fixture
def config():
    return PropagationConfig()


@pytest.fixture
def fixed_decay():
    """Every assignment lowers the height by exactly 0.05 and no stop roll succeeds."""
    return PropagationConfig(height_decay_probability=1.0, height_decay_min=0.05,
                             height_decay_max=0.05, stop_probability=0.0)


class TestSingleSeedFill:
    """Test one seed's flood fill."""

    def test_single_cell(self, config):
        """A lone cell gets the initial height and the queue drains after one pop."""
        fill = fill_from_seed([[]], 0, AleaPRNG("single"), config)

        assert fill.writes == [(0, 0.9)]
        assert fill.pops == 1

        heights = np.zeros(1)
        apply_fill(heights, fill)
        assert heights[0] == 0.9

    def test_ring_terminates_within_bounds(self, config):
        """A 7-cell ring halts and every written height lies in [0, 0.9]."""
        for seed in range(20):
            fill = fill_from_seed(ring(7), 3, AleaPRNG(f"ring-{seed}"), config)

            assert fill.writes[0] == (3, 0.9)
            assert len(fill.writes) <= 7
            assert all(0.0 <= h <= 0.9 for _, h in fill.writes)

    def test_chain_heights_do_not_increase(self, config):
        """Heights along a 4-cell chain never increase away from the seed."""
        for seed in range(50):
            heights = np.zeros(4)
            apply_fill(heights, fill_from_seed(chain(4), 0, AleaPRNG(f"chain-{seed}"), config))

            assert heights[0] == 0.9
            assert np.all(np.diff(heights) <= 0)

    def test_seed_and_neighbors_queued_first(self, config):
        """The seed's direct neighbors are always assigned, even if the fill stops at once."""
        always_stop = PropagationConfig(stop_probability=1.0)
        star = [[1, 2, 3], [0], [0], [0]]
        fill = fill_from_seed(star, 0, AleaPRNG("star"), always_stop)

        assert fill.stopped
        assert fill.cells == [0, 1, 2, 3]

    def test_stop_is_sticky(self):
        """Once stopped, no new frontier is added."""
        always_stop = PropagationConfig(stop_probability=1.0)
        fill = fill_from_seed(chain(10), 0, AleaPRNG("sticky"), always_stop)

        assert fill.cells == [0, 1]

    def test_height_floor_stops_expansion(self):
        """Starting under the floor assigns only the first round."""
        low = PropagationConfig(initial_height=0.05, stop_probability=0.0)
        fill = fill_from_seed(chain(10), 5, AleaPRNG("floor"), low)

        assert sorted(fill.cells) == [4, 5, 6]

    def test_no_decay_fills_connected_graph(self):
        """Without decay or stop rolls the fill covers every reachable cell at full height."""
        flat = PropagationConfig(height_decay_probability=0.0, stop_probability=0.0)
        fill = fill_from_seed(ring(12), 0, AleaPRNG("flat"), flat)

        assert sorted(fill.cells) == list(range(12))
        assert all(h == 0.9 for _, h in fill.writes)

    def test_breadth_first_order(self):
        """Cells are first written in breadth-first order."""
        flat = PropagationConfig(height_decay_probability=0.0, stop_probability=0.0)
        fill = fill_from_seed(chain(6), 2, AleaPRNG("bfs"), flat)

        assert fill.cells == [2, 1, 3, 0, 4, 5]

    def test_heights_never_negative(self):
        """Decay is floored at zero even for long drains."""
        steep = PropagationConfig(height_decay_probability=1.0, height_decay_min=0.09,
                                  height_decay_max=0.1, stop_probability=0.0)
        complete = [[j for j in range(30) if j != i] for i in range(30)]
        fill = fill_from_seed(complete, 0, AleaPRNG("steep"), steep)

        assert len(fill.cells) == 30
        assert min(h for _, h in fill.writes) >= 0.0


class TestRevisitMode:
    """Test the fill without visit de-duplication."""

    def test_revisits_terminate(self):
        legacy = PropagationConfig(dedupe_visits=False)
        fill = fill_from_seed(ring(7), 0, AleaPRNG("legacy"), legacy)

        assert fill.pops == len(fill.writes)
        assert all(0.0 <= h <= 0.9 for _, h in fill.writes)

    def test_revisits_overwrite_cells(self):
        """Every queued occurrence is assigned, so cells can be written more than once."""
        legacy = PropagationConfig(dedupe_visits=False, stop_probability=0.0)
        fill = fill_from_seed(chain(3), 1, AleaPRNG("legacy-overwrite"), legacy)

        assert len(fill.writes) > len(fill.cells)

    def test_non_terminating_config_rejected(self):
        with pytest.raises(ValueError):
            PropagationConfig(dedupe_visits=False, height_decay_probability=0.0,
                              stop_probability=0.0)


class TestPropagateHeights:
    """Test multi-seed propagation."""

    def test_deterministic_replay(self, config):
        """The same PRNG seed reproduces the same heights."""
        neighbors = ring(40)
        a = np.zeros(40)
        b = np.zeros(40)
        propagate_heights(a, neighbors, [0, 10, 20], AleaPRNG("replay"), config)
        propagate_heights(b, neighbors, [0, 10, 20], AleaPRNG("replay"), config)

        np.testing.assert_array_equal(a, b)

    def test_plate_origins_keep_initial_height(self, fixed_decay):
        """A fill reaching another seed's origin leaves its peak alone."""
        heights = np.zeros(10)
        fills = propagate_heights(heights, chain(10), [0, 9], AleaPRNG("origins"), fixed_decay)

        assert heights[0] == 0.9
        assert heights[9] == 0.9
        assert fills[0].cells == list(range(9))
        assert np.all(np.diff(heights[:9]) < 0)

    def test_claimed_cells_block_later_fills(self):
        """A later seed neither overwrites nor expands through claimed cells."""
        flat = PropagationConfig(height_decay_probability=0.0, stop_probability=0.0)
        heights = np.zeros(10)
        fills = propagate_heights(heights, chain(10), [0, 9], AleaPRNG("claimed"), flat)

        assert fills[0].cells == list(range(9))
        assert fills[1].writes == [(9, 0.9)]

        heights = np.zeros(10)
        fills = propagate_heights(heights, chain(10), [0, 5], AleaPRNG("claimed"), flat)
        assert fills[0].cells == [0, 1, 2, 3, 4]
        assert fills[1].cells == [5, 6, 7, 8, 9]

    def test_fills_are_disjoint(self, config):
        neighbors = ring(60)
        fills = propagate_heights(np.zeros(60), neighbors, [0, 20, 40], AleaPRNG("disjoint"), config)

        claimed = [cell for fill in fills for cell in fill.cells]
        assert len(claimed) == len(set(claimed))

    def test_heights_bounded(self, config):
        heights = np.zeros(100)
        grid = [[j for j in (i - 10, i + 10, i - 1, i + 1)
                 if 0 <= j < 100 and (abs(j - i) == 10 or j // 10 == i // 10)]
                for i in range(100)]
        propagate_heights(heights, grid, [0, 55, 99], AleaPRNG("grid"), config)

        assert heights.min() >= 0.0
        assert heights.max() == pytest.approx(0.9)

    def test_parallel_merge_keeps_earlier_seed(self, fixed_decay):
        """Independent fills are merged so the first seed to write a cell keeps it."""
        sequential = np.zeros(10)
        parallel = np.zeros(10)
        propagate_heights(sequential, chain(10), [0, 9], AleaPRNG("par"), fixed_decay, workers=1)
        fills = propagate_heights(parallel, chain(10), [0, 9], AleaPRNG("par"), fixed_decay, workers=2)

        assert parallel[0] == parallel[9] == 0.9
        assert fills[1].cells == [9, 8, 7, 6, 5, 4, 3, 2, 1]
        np.testing.assert_array_equal(sequential, parallel)

    def test_parallel_is_reproducible(self, config):
        a = np.zeros(60)
        b = np.zeros(60)
        propagate_heights(a, ring(60), [0, 20, 40], AleaPRNG("par"), config, workers=2)
        propagate_heights(b, ring(60), [0, 20, 40], AleaPRNG("par"), config, workers=2)

        np.testing.assert_array_equal(a, b)
        assert np.all(a[[0, 20, 40]] == 0.9)

    def test_revisit_mode_worker_count_does_not_change_result(self):
        """Without claims later seeds overwrite, in any worker count."""
        legacy = PropagationConfig(dedupe_visits=False)
        sequential = np.zeros(60)
        parallel = np.zeros(60)
        fills = propagate_heights(sequential, ring(60), [0, 20, 40], AleaPRNG("legacy-par"),
                                  legacy, workers=1)
        propagate_heights(parallel, ring(60), [0, 20, 40], AleaPRNG("legacy-par"), legacy, workers=2)

        np.testing.assert_array_equal(sequential, parallel)
        expected = np.zeros(60)
        for fill in fills:
            for cell, value in fill.writes:
                expected[cell] = value
        np.testing.assert_array_equal(sequential, expected)

    @pytest.mark.parametrize("workers", [0, -1])
    def test_invalid_worker_count(self, config, workers):
        with pytest.raises(ValueError, match="workers"):
            propagate_heights(np.zeros(5), chain(5), [0], AleaPRNG("workers"), config, workers=workers)

    def test_no_seeds(self, config):
        heights = np.zeros(5)
        assert propagate_heights(heights, chain(5), [], AleaPRNG("none"), config) == []
        assert np.all(heights == 0)


class TestPropagationConfig:
    """Test configuration validation."""

    def test_defaults(self, config):
        assert config.initial_height == 0.9
        assert config.height_decay_probability == 0.75
        assert config.stop_probability == 0.01
        assert config.height_floor == 0.1
        assert config.dedupe_visits

    def test_inverted_decay_range(self):
        with pytest.raises(ValueError):
            PropagationConfig(height_decay_min=0.2, height_decay_max=0.1)
