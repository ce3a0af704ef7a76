# -*- coding: utf-8 -*-
"""
Window Average Engine Tests - Masked, no-data aware window average and count.

Dependencies
------------
pytest
scipy

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

import numpy as np
import pytest

from winavg.data_prep import Region, Tiler
from winavg.exceptions import ValidationError
from winavg.image_processing.masks import ConstantMask, MaskProvider
from winavg.image_processing.window_average import WindowAverage, WindowResult
from winavg.IO.base import ArraySource


class _CountingSource(ArraySource):
    """ArraySource that records every region read."""

    def __init__(self, data):
        super().__init__(data)
        self.reads = []

    def read_region(self, region):
        self.reads.append(region)
        return super().read_region(region)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestWindowAverageInit:
    """Window size validation happens at construction."""

    @pytest.mark.parametrize("size", [4, 10, 124])
    def test_even_window_rejected(self, grid, size):
        with pytest.raises(ValidationError, match="odd"):
            WindowAverage(grid, window_size=size)

    @pytest.mark.parametrize("size", [3, 5, 7, 125])
    def test_odd_window_accepted(self, grid, size):
        engine = WindowAverage(grid, window_size=size)
        assert engine.half_width == (size - 1) // 2

    @pytest.mark.parametrize("size", [1, 2])
    def test_window_below_three_rejected(self, grid, size):
        with pytest.raises(ValidationError, match=">= 3"):
            WindowAverage(grid, window_size=size)

    def test_non_int_window_rejected(self, grid):
        with pytest.raises(ValidationError, match="integer"):
            WindowAverage(grid, window_size=3.0)

    def test_bool_window_rejected(self, grid):
        with pytest.raises(ValidationError, match="integer"):
            WindowAverage(grid, window_size=True)

    @pytest.mark.parametrize("size", [np.int64(5), np.int32(3), np.uint8(7)])
    def test_numpy_integer_window_accepted(self, grid, size):
        engine = WindowAverage(grid, window_size=size)
        assert engine.window_size == int(size)
        assert type(engine.window_size) is int
        assert engine.half_width == (int(size) - 1) // 2

    def test_numpy_even_window_rejected(self, grid):
        with pytest.raises(ValidationError, match="odd"):
            WindowAverage(grid, window_size=np.int64(4))

    def test_mask_shape_mismatch_rejected(self, grid):
        with pytest.raises(ValidationError, match="does not match"):
            WindowAverage(grid, mask=np.ones((3, 4)))

    def test_default_mask_is_all_ones(self, grid):
        engine = WindowAverage(grid)
        assert isinstance(engine.mask, ConstantMask)
        assert engine.mask.shape == (4, 4)


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------

class TestScenarioUnmasked:
    """4x4 grid, no mask, window 3."""

    @pytest.mark.parametrize("x, y, average, count", [
        (0, 0, 10.0, 4),
        (1, 0, 13.0, 5),
        (2, 0, 19.0, 5),
        (3, 0, 27.0, 3),
        (0, 1, 10.0, 4),
        (1, 2, 14.0, 5),
    ])
    def test_pixel(self, grid, x, y, average, count):
        result = WindowAverage(grid, window_size=3).compute_full()
        assert result.average[y, x] == pytest.approx(average)
        assert result.count[y, x] == count

    def test_no_valid_samples(self, grid):
        result = WindowAverage(grid, window_size=3).compute_full()
        assert np.isnan(result.average[3, 0])
        assert result.count[3, 0] == 0

    def test_output_dtypes(self, grid):
        result = WindowAverage(grid).compute_full()
        assert result.average.dtype == np.float64
        assert result.count.dtype == np.float32
        assert result.average.shape == result.count.shape == (4, 4)


class TestScenarioMasked:
    """4x4 grid with a mask, window 3."""

    def test_upper_left(self, grid, grid_mask):
        result = WindowAverage(grid, grid_mask, 3).compute_full()
        assert result.average[0, 0] == pytest.approx(9.0)
        assert result.count[0, 0] == 3

    def test_interior(self, grid, grid_mask):
        result = WindowAverage(grid, grid_mask, 3).compute_full()
        assert result.average[1, 2] == pytest.approx(32.0 / 3.0)
        assert result.count[1, 2] == 3

    @pytest.mark.parametrize("x, y", [(2, 2), (3, 3)])
    def test_masked_center(self, grid, grid_mask, x, y):
        result = WindowAverage(grid, grid_mask, 3).compute_full()
        assert np.isnan(result.average[y, x])
        assert np.isnan(result.count[y, x])
        assert np.nan_to_num(result.count[y, x]) == 0

    def test_count_nodata_override(self, grid, grid_mask):
        engine = WindowAverage(grid, grid_mask, 3, count_nodata=0)
        result = engine.compute_full()
        assert result.count[2, 2] == 0
        assert np.isnan(result.average[2, 2])


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestWindowAverageProperties:
    """General behaviour over random rasters."""

    def test_matches_brute_force(self, rng, brute_force):
        data = rng.normal(100.0, 20.0, (23, 31))
        data[rng.random(data.shape) < 0.15] = np.nan
        mask = (rng.random(data.shape) < 0.7).astype(np.uint8)
        expected_avg, expected_cnt = brute_force(data, mask, 5)

        result = WindowAverage(data, mask, 5).compute_full()
        np.testing.assert_allclose(result.average, expected_avg, rtol=1e-12)
        np.testing.assert_array_equal(result.count, expected_cnt)

    def test_no_mask_equals_all_ones_mask(self, rng):
        data = rng.random((17, 13))
        data[3, 4] = np.nan
        implicit = WindowAverage(data, window_size=7).compute_full()
        explicit = WindowAverage(
            data, np.ones(data.shape, dtype=np.uint8), window_size=7
        ).compute_full()
        np.testing.assert_array_equal(implicit.average, explicit.average)
        np.testing.assert_array_equal(implicit.count, explicit.count)

    def test_masked_center_ignores_values(self, rng):
        data = rng.random((9, 9))
        mask = np.ones((9, 9), dtype=np.uint8)
        mask[4, 4] = 0
        result = WindowAverage(data, mask, 3).compute_full()
        assert np.isnan(result.average[4, 4])
        assert np.isnan(result.count[4, 4])
        # Neighbours still see every other sample
        assert result.count[4, 3] == 8

    def test_nodata_never_contributes(self):
        data = np.full((5, 5), 2.0)
        data[2, 2] = np.nan
        result = WindowAverage(data, window_size=3).compute_full()
        assert result.count[2, 2] == 8
        assert result.average[2, 2] == pytest.approx(2.0)
        assert result.count[1, 1] == 8

    def test_mask_value_above_one_included(self):
        data = np.arange(9.0).reshape(3, 3)
        result = WindowAverage(data, np.full((3, 3), 255), 3).compute_full()
        assert result.count[1, 1] == 9
        assert result.average[1, 1] == pytest.approx(4.0)

    def test_negative_centre_not_gated(self):
        data = np.arange(9.0).reshape(3, 3)
        mask = np.ones((3, 3), dtype=np.int8)
        mask[1, 1] = -1
        result = WindowAverage(data, mask, 3).compute_full()
        # Computed, but the centre sample itself does not contribute
        assert result.count[1, 1] == 8
        assert result.average[1, 1] == pytest.approx(32.0 / 8.0)
        assert result.count[0, 0] == 3
        assert result.average[0, 0] == pytest.approx(4.0 / 3.0)

    def test_matches_brute_force_signed_mask(self, rng, brute_force):
        data = rng.normal(0.0, 1.0, (15, 12))
        data[rng.random(data.shape) < 0.1] = np.nan
        mask = rng.integers(-1, 2, data.shape).astype(np.int16)
        expected_avg, expected_cnt = brute_force(data, mask, 3)

        result = WindowAverage(data, mask, 3).compute_full()
        np.testing.assert_allclose(result.average, expected_avg, rtol=1e-12)
        np.testing.assert_array_equal(result.count, expected_cnt)

    def test_edge_count_bounded_by_clipped_window(self, rng):
        data = rng.random((6, 8))
        engine = WindowAverage(data, window_size=5)
        result = engine.compute_full()
        for y in range(6):
            for x in range(8):
                assert result.count[y, x] == engine.effective_window(x, y).size

    def test_effective_window(self, grid):
        engine = WindowAverage(grid, window_size=3)
        assert engine.effective_window(0, 0) == Region(0, 0, 2, 2)
        assert engine.effective_window(1, 1) == Region(0, 0, 3, 3)
        assert engine.effective_window(3, 2) == Region(2, 1, 2, 3)

    def test_integer_source(self):
        data = np.arange(16, dtype=np.int16).reshape(4, 4)
        result = WindowAverage(data, window_size=3).compute_full()
        assert result.average[0, 0] == pytest.approx((0 + 1 + 4 + 5) / 4)
        assert result.count[0, 0] == 4


# ---------------------------------------------------------------------------
# Region requests
# ---------------------------------------------------------------------------

class TestComputeRegion:
    """Region-scoped, repeatable, order-independent computation."""

    def test_region_matches_full(self, rng):
        data = rng.random((40, 30))
        mask = (rng.random(data.shape) < 0.8).astype(np.uint8)
        engine = WindowAverage(data, mask, 7)
        full = engine.compute_full()
        region = Region(5, 11, 17, 9)
        part = engine.compute_region(region)
        assert part.region == region
        np.testing.assert_array_equal(part.average, full.average[region.slices])
        np.testing.assert_array_equal(part.count, full.count[region.slices])

    def test_overlapping_regions_agree(self, rng):
        data = rng.normal(0.0, 1e6, (25, 25))
        engine = WindowAverage(data, window_size=9)
        a = engine.compute_region(Region(0, 0, 15, 15))
        b = engine.compute_region(Region(8, 8, 17, 17))
        np.testing.assert_array_equal(a.average[8:15, 8:15], b.average[:7, :7])
        np.testing.assert_array_equal(a.count[8:15, 8:15], b.count[:7, :7])

    def test_repeated_requests_identical(self, grid, grid_mask):
        engine = WindowAverage(grid, grid_mask, 3)
        first = engine.compute_region(Region(1, 0, 3, 2))
        second = engine.compute_region(Region(1, 0, 3, 2))
        np.testing.assert_array_equal(first.average, second.average)
        np.testing.assert_array_equal(first.count, second.count)

    def test_single_pixel_region(self, grid):
        result = WindowAverage(grid).compute_region(Region(2, 0, 1, 1))
        assert result.average.shape == (1, 1)
        assert result.average[0, 0] == pytest.approx(19.0)

    def test_source_reads_clipped_halo(self, grid):
        source = _CountingSource(grid)
        WindowAverage(source, window_size=3).compute_region(Region(0, 0, 2, 2))
        assert source.reads == [Region(0, 0, 3, 3)]

    def test_fully_masked_region_skips_source(self, grid, grid_mask):
        source = _CountingSource(grid)
        engine = WindowAverage(source, grid_mask, 3)
        result = engine.compute_region(Region(0, 2, 4, 2))
        assert source.reads == []
        assert np.all(np.isnan(result.average))
        assert np.all(np.isnan(result.count))

    @pytest.mark.parametrize("region", [
        Region(0, 0, 5, 4),
        Region(-1, 0, 2, 2),
        Region(0, 0, 0, 3),
    ])
    def test_out_of_bounds_region_rejected(self, grid, region):
        with pytest.raises(ValueError, match="outside raster bounds"):
            WindowAverage(grid).compute_region(region)

    def test_stack(self, grid):
        stacked = WindowAverage(grid).compute_full().stack()
        assert stacked.shape == (2, 4, 4)
        assert stacked.dtype == np.float64
        assert stacked[1, 0, 0] == 4.0

    def test_shared_mask_provider(self, rng):
        calls = []

        class RecordingMask(MaskProvider):
            shape = (12, 12)

            def fetch(self, region):
                calls.append(region)
                return np.ones(region.shape, dtype=np.uint8)

        mask = RecordingMask()
        a = WindowAverage(rng.random((12, 12)), mask, 3)
        b = WindowAverage(rng.random((12, 12)), mask, 3)
        a.compute_full()
        b.compute_full()
        assert len(calls) == 2


class TestComputeRegions:
    """Thread-pool region execution."""

    def test_parallel_tiles_assemble_full_result(self, rng):
        data = rng.random((70, 45))
        data[rng.random(data.shape) < 0.1] = np.nan
        mask = (rng.random(data.shape) < 0.9).astype(np.uint8)
        engine = WindowAverage(data, mask, 5)
        regions = Tiler(70, 45, tile_size=16).tile_positions()

        average = np.empty(data.shape)
        count = np.empty(data.shape, dtype=np.float32)
        results = list(engine.compute_regions(regions, max_workers=4))
        for region, result in zip(regions, results):
            assert isinstance(result, WindowResult)
            assert result.region == region
            average[region.slices] = result.average
            count[region.slices] = result.count

        full = engine.compute_full()
        np.testing.assert_array_equal(average, full.average)
        np.testing.assert_array_equal(count, full.count)
