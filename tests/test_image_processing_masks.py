# -*- coding: utf-8 -*-
"""
Mask Provider Tests - Array, constant and expression masks.

Dependencies
------------
pytest
numexpr

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

from winavg.data_prep import Region
from winavg.exceptions import ValidationError
from winavg.image_processing.masks import (
    ArrayMask,
    ConstantMask,
    ExpressionMask,
    as_mask_provider,
)
from winavg.IO.base import ArraySource


class TestConstantMask:
    """All-ones default mask."""

    def test_fetch_fills_region(self):
        mask = ConstantMask((100, 200))
        chip = mask.fetch(Region(10, 20, 30, 5))
        assert chip.shape == (5, 30)
        assert chip.dtype == np.uint8
        assert np.all(chip == 1)

    def test_custom_value(self):
        chip = ConstantMask((4, 4), value=0).fetch(Region(0, 0, 4, 4))
        assert not chip.any()

    def test_fetch_returns_fresh_buffer(self):
        mask = ConstantMask((4, 4))
        first = mask.fetch(Region(0, 0, 2, 2))
        first[:] = 0
        assert np.all(mask.fetch(Region(0, 0, 2, 2)) == 1)


class TestArrayMask:
    """Pass-through mask over an array."""

    def test_fetch_is_region_read(self, grid_mask):
        mask = ArrayMask(grid_mask)
        assert mask.shape == (4, 4)
        np.testing.assert_array_equal(
            mask.fetch(Region(1, 0, 3, 2)), grid_mask[0:2, 1:4]
        )

    def test_accepts_raster_source(self, grid_mask):
        mask = ArrayMask(ArraySource(grid_mask))
        assert mask.bounds == Region(0, 0, 4, 4)


class TestAsMaskProvider:
    """Normalising mask arguments."""

    def test_none_gives_constant(self):
        provider = as_mask_provider(None, (3, 5))
        assert isinstance(provider, ConstantMask)
        assert provider.shape == (3, 5)

    def test_array_gives_array_mask(self, grid_mask):
        assert isinstance(as_mask_provider(grid_mask, (4, 4)), ArrayMask)

    def test_provider_passes_through(self):
        provider = ConstantMask((2, 2))
        assert as_mask_provider(provider, (2, 2)) is provider

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValidationError, match="does not match"):
            as_mask_provider(np.ones((2, 3)), (3, 2))


class TestExpressionMask:
    """numexpr band-maths masks."""

    @pytest.fixture
    def sources(self, grid):
        b2 = np.arange(16, dtype=np.uint8).reshape(4, 4)
        return {'B1': ArraySource(grid), 'B2': ArraySource(b2)}

    def test_comparison(self, sources, grid):
        mask = ExpressionMask('B1 > 12', sources)
        chip = mask.fetch(Region(0, 0, 4, 4))
        assert chip.dtype == np.uint8
        expected = np.nan_to_num(grid, nan=-np.inf) > 12
        np.testing.assert_array_equal(chip, expected.astype(np.uint8))

    def test_nan_is_excluded(self, sources):
        chip = ExpressionMask('B1 > -1000', sources).fetch(Region(0, 2, 2, 2))
        assert not chip.any()

    def test_combined_expression_on_integer_band(self, sources):
        mask = ExpressionMask('(B1 >= 13) & (B2 < 8)', sources)
        chip = mask.fetch(Region(0, 0, 4, 2))
        np.testing.assert_array_equal(chip, [[0, 1, 0, 0], [1, 0, 1, 1]])

    def test_numeric_result_thresholded(self, sources):
        chip = ExpressionMask('B2 - 5', sources).fetch(Region(0, 1, 4, 1))
        np.testing.assert_array_equal(chip, [[0, 0, 1, 1]])

    def test_subregion_fetch(self, sources):
        mask = ExpressionMask('B2 > 9', sources)
        np.testing.assert_array_equal(
            mask.fetch(Region(1, 2, 2, 2)), [[0, 1], [1, 1]]
        )

    def test_referenced_names_exclude_functions(self, sources):
        mask = ExpressionMask('where(B2 > 3, 1, 0)', sources)
        assert mask.band_names == ['B2']
        assert mask.shape == (4, 4)

    def test_empty_expression_raises(self, sources):
        with pytest.raises(ValidationError, match="empty"):
            ExpressionMask('   ', sources)

    def test_syntax_error_raises(self, sources):
        with pytest.raises(ValidationError, match="not valid"):
            ExpressionMask('B1 >', sources)

    def test_unknown_band_raises(self, sources):
        with pytest.raises(ValidationError, match="unknown band"):
            ExpressionMask('B3 > 0', sources)

    def test_differing_sizes_raise(self, grid):
        sources = {
            'B1': ArraySource(grid),
            'B2': ArraySource(np.zeros((2, 2))),
        }
        with pytest.raises(ValidationError, match="differ in size"):
            ExpressionMask('(B1 > 0) & (B2 > 0)', sources)

    def test_only_referenced_bands_read(self, grid):
        class Exploding(ArraySource):
            def read_region(self, region):
                raise AssertionError("unreferenced band was read")

        sources = {'B1': ArraySource(grid), 'B9': Exploding(grid)}
        chip = ExpressionMask('B1 > 0', sources).fetch(Region(0, 0, 2, 2))
        np.testing.assert_array_equal(chip, [[1, 1], [1, 1]])
