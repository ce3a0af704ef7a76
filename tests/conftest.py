# -*- coding: utf-8 -*-
"""
Shared test fixtures.

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


@pytest.fixture
def grid():
    """4x4 band with NaN no-data samples, indexed ``grid[y, x]``."""
    nan = np.nan
    return np.array([
        [12.0, 13.0, nan, 6.0],
        [14.0, 1.0, 25.0, 50.0],
        [nan, nan, 17.0, 7.0],
        [nan, nan, 13.0, 21.0],
    ])


@pytest.fixture
def grid_mask():
    """Mask for ``grid``: upper-left area included, bottom half excluded."""
    return np.array([
        [1, 0, 1, 1],
        [1, 1, 1, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ], dtype=np.uint8)


@pytest.fixture
def rng():
    return np.random.default_rng(20261019)


def brute_force_window_average(data, mask, window_size):
    """Pixel-by-pixel reference implementation."""
    rows, cols = data.shape
    hw = (window_size - 1) // 2
    average = np.full(data.shape, np.nan)
    count = np.full(data.shape, np.nan)
    for y in range(rows):
        for x in range(cols):
            if mask[y, x] == 0:
                continue
            y0, y1 = max(y - hw, 0), min(y + hw + 1, rows)
            x0, x1 = max(x - hw, 0), min(x + hw + 1, cols)
            values = data[y0:y1, x0:x1]
            valid = (mask[y0:y1, x0:x1] > 0) & ~np.isnan(values)
            n = int(valid.sum())
            count[y, x] = n
            if n:
                average[y, x] = values[valid].sum() / n
    return average, count


@pytest.fixture
def brute_force():
    return brute_force_window_average
