# -*- coding: utf-8 -*-
"""
Data Preparation Module - Region geometry and tile planning.

Provides the ``Region`` rectangle used as the unit of every compute request
and clipping operation, and the ``Tiler`` that plans the non-overlapping
tiles a caller can use to cover a whole raster. These classes return index
bounds, never pixel data.

Key Classes
-----------
- Region: Named tuple ``(x, y, width, height)`` with clipping helpers
- RegionBase: Raster dimension management and region clipping
- Tiler: Row-major, non-overlapping tile plan with clipped edge tiles

Usage
-----
Clip a nominal window to the raster:

    >>> from winavg.data_prep import Region, RegionBase
    >>> base = RegionBase(nrows=4, ncols=4)
    >>> base.clip(Region.window_around(0, 0, 1))
    Region(x=0, y=0, width=2, height=2)

Plan tiles:

    >>> from winavg.data_prep import Tiler
    >>> regions = Tiler(nrows=1000, ncols=2000, tile_size=512).tile_positions()

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

from winavg.data_prep.base import Region, RegionBase
from winavg.data_prep.tiler import Tiler

__all__ = [
    'Region',
    'RegionBase',
    'Tiler',
]
