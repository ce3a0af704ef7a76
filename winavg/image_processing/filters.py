# -*- coding: utf-8 -*-
"""
Window Average Filter - In-memory masked window average as an image transform.

Wraps the ``WindowAverage`` engine in the ``ImageTransform`` interface so
whole arrays can be processed in one call. A ``(rows, cols)`` input
yields a ``(2, rows, cols)`` stack of ``[average, count]``; a
``(bands, rows, cols)`` input yields ``(bands, 2, rows, cols)`` with the
same mask applied to every band.

Dependencies
------------
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

# Standard library
from typing import Annotated, Any

# Third-party
import numpy as np

# WinAvg internal
from winavg.image_processing.base import BandwiseTransformMixin, ImageTransform
from winavg.image_processing.params import Desc, Range
from winavg.image_processing.versioning import processor_tags, processor_version
from winavg.image_processing._validation import validate_window_size
from winavg.image_processing.window_average import WindowAverage
from winavg.vocabulary import ProcessorCategory


@processor_version('1.0.0')
@processor_tags(
    category=ProcessorCategory.FILTERS,
    description='Masked moving-window average and valid-sample count',
)
class WindowAverageFilter(BandwiseTransformMixin, ImageTransform):
    """Masked window average and count of an in-memory array.

    NaN samples never contribute. Pass ``mask=`` to ``apply`` to restrict
    both the pixels that are computed (centre gating) and the samples
    that contribute to each window.

    Parameters
    ----------
    window_size : int
        Square window side length in pixels. Must be odd, in [3, 125].
        Default is 3.

    Examples
    --------
    >>> from winavg.image_processing import WindowAverageFilter
    >>> f = WindowAverageFilter(window_size=5)
    >>> average, count = f.apply(band, mask=roi)
    """

    window_size: Annotated[int, Range(min=3, max=125),
                           Desc('Window side length (odd)')] = 3

    def __post_init__(self) -> None:
        validate_window_size(self.window_size)

    def _apply_2d(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Average a single 2D band.

        Parameters
        ----------
        source : np.ndarray
            2D image array, shape ``(rows, cols)``.
        mask : np.ndarray, optional
            Keyword-only. Same-shape mask; ``> 0`` is included.

        Returns
        -------
        np.ndarray
            ``(2, rows, cols)`` float64 ``[average, count]``. Masked-out
            pixels are NaN in both components.
        """
        params = self._resolve_params(kwargs)
        engine = WindowAverage(
            source,
            mask=kwargs.get('mask'),
            window_size=params['window_size'],
        )
        return engine.compute_full().stack()
