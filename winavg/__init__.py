# -*- coding: utf-8 -*-
"""
WinAvg - Masked moving-window averaging for large rasters.

Computes, for every pixel of a raster band, the average and the number
of valid samples inside an odd square window, restricted to samples that
are not no-data and whose mask is set. Results are produced on demand
for any rectangular region so arbitrarily large scenes can be processed
tile by tile.

Dependencies
------------
numpy
scipy
numexpr
rasterio

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

__version__ = "0.2.0"
__author__ = "Duane Smalley"

from winavg.exceptions import (
    WinAvgError,
    ValidationError,
    ProcessorError,
    DependencyError,
)
from winavg.vocabulary import (
    ProcessorCategory,
    OutputFormat,
)
from winavg.data_prep import Region, Tiler
from winavg.image_processing import (
    ConstantMask,
    ExpressionMask,
    WindowAverage,
    WindowAverageFilter,
    WindowResult,
)
from winavg.product import Band, Product
from winavg.operator import WindowAverageOperator

__all__ = [
    'WinAvgError',
    'ValidationError',
    'ProcessorError',
    'DependencyError',
    'ProcessorCategory',
    'OutputFormat',
    'Region',
    'Tiler',
    'ConstantMask',
    'ExpressionMask',
    'WindowAverage',
    'WindowAverageFilter',
    'WindowResult',
    'Band',
    'Product',
    'WindowAverageOperator',
]
