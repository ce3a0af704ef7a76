# -*- coding: utf-8 -*-
"""
Image Processing Module - Window averaging engine, masks and processors.

Provides the masked moving-window average engine, the mask providers it
reads from, and the processor framework used to expose it as a
transform and as a product operator.

Sub-modules
-----------
window_average.py
    ``WindowAverage`` engine and ``WindowResult``.
masks.py
    ``MaskProvider`` ABC, ``ArrayMask``, ``ConstantMask``,
    ``ExpressionMask``.
filters.py
    ``WindowAverageFilter`` in-memory transform.
base.py
    ``ImageProcessor``, ``ImageTransform``, ``BandwiseTransformMixin``.
versioning.py
    ``@processor_version`` and ``@processor_tags`` decorators.
params.py
    ``Range`` and ``Desc`` markers for ``Annotated`` parameters.

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

from winavg.image_processing.base import (
    BandwiseTransformMixin,
    ImageProcessor,
    ImageTransform,
)
from winavg.image_processing.params import Desc, ParamSpec, Range
from winavg.image_processing.versioning import processor_tags, processor_version
from winavg.image_processing.masks import (
    ArrayMask,
    ConstantMask,
    ExpressionMask,
    MaskProvider,
    as_mask_provider,
)
from winavg.image_processing.window_average import WindowAverage, WindowResult
from winavg.image_processing.filters import WindowAverageFilter

__all__ = [
    'ImageProcessor',
    'ImageTransform',
    'BandwiseTransformMixin',
    'Range',
    'Desc',
    'ParamSpec',
    'processor_version',
    'processor_tags',
    'MaskProvider',
    'ArrayMask',
    'ConstantMask',
    'ExpressionMask',
    'as_mask_provider',
    'WindowAverage',
    'WindowResult',
    'WindowAverageFilter',
]
