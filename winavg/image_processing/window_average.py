# -*- coding: utf-8 -*-
"""
Window Average - Masked, no-data aware moving-window average and count.

For every pixel the engine averages the samples of a square window of odd
side length centred on it. The window is clipped at the raster edges
(no padding, no wraparound). A sample contributes only when its value is
not NaN and its mask value is greater than zero. The mask value of the
centre pixel gates the whole window: when it is zero the pixel's average
and count are both no-data.

Results are computed on demand for any rectangular region. A request
reads the source and mask over the region grown by the window
half-width and clipped to the raster, then forms the window sums with
two separable ``correlate1d`` passes of a ones kernel. Zero-filled
boundaries give out-of-raster positions zero weight, which is the same
as clipping each window. When no centre pixel of the region is
included, the source is not read at all.

Each request allocates its own buffers and the engine holds no mutable
state, so regions may be computed repeatedly, in any order, or
concurrently.

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
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, NamedTuple, Optional, Union

# Third-party
import numpy as np
from scipy.ndimage import correlate1d

# WinAvg internal
from winavg.data_prep.base import Region
from winavg.image_processing._validation import validate_window_size
from winavg.image_processing.masks import MaskProvider, as_mask_provider
from winavg.IO.base import ArraySource, RasterSource

logger = logging.getLogger(__name__)


class WindowResult(NamedTuple):
    """Average and count rasters for one requested region.

    Attributes
    ----------
    region : Region
        The region the arrays cover.
    average : np.ndarray
        float64 window averages; NaN where gated or without valid samples.
    count : np.ndarray
        float32 number of contributing samples; the engine's
        ``count_nodata`` where the centre pixel is masked out.
    """

    region: Region
    average: np.ndarray
    count: np.ndarray

    def stack(self) -> np.ndarray:
        """Two-component ``(2, rows, cols)`` float64 buffer ``[average, count]``."""
        return np.stack([self.average, self.count.astype(np.float64)])


def _window_sum(data: np.ndarray, half_width: int) -> np.ndarray:
    """Sum over a ``(2*hw+1)`` square window with zero-filled boundaries."""
    kernel = np.ones(2 * half_width + 1, dtype=data.dtype)
    summed = correlate1d(data, kernel, axis=0, mode='constant', cval=0)
    return correlate1d(summed, kernel, axis=1, mode='constant', cval=0)


class WindowAverage:
    """Masked window average and valid-sample count over a raster band.

    Only a centre mask value of exactly zero gates a pixel. Samples
    inside the window contribute only where their mask value is greater
    than zero, so a negative centre value computes the pixel without
    counting the centre sample.

    Parameters
    ----------
    source : RasterSource or np.ndarray
        Band to average. Arrays are wrapped in an ``ArraySource``.
        Floating-point NaN samples are no-data.
    mask : MaskProvider, RasterSource, np.ndarray, optional
        Inclusion mask with the same dimensions as ``source``. ``None``
        includes every pixel.
    window_size : int
        Odd window side length, at least 3. Default 3.
    count_nodata : float
        Count written for pixels whose centre mask value is zero.
        Default NaN.

    Raises
    ------
    ValidationError
        If ``window_size`` is not an odd integer >= 3, or the mask
        dimensions differ from the source.

    Examples
    --------
    >>> engine = WindowAverage(band, mask=roi, window_size=5)
    >>> result = engine.compute_region(Region(0, 0, 512, 512))
    >>> result.average.shape
    (512, 512)
    """

    def __init__(
        self,
        source: Union[RasterSource, np.ndarray],
        mask: Optional[Union[MaskProvider, RasterSource, np.ndarray]] = None,
        window_size: int = 3,
        count_nodata: float = np.nan,
    ) -> None:
        validate_window_size(window_size)
        if not isinstance(source, RasterSource):
            source = ArraySource(source)
        self._source = source
        self._mask = as_mask_provider(mask, source.shape)
        self._window_size = int(window_size)
        self._half_width = (self._window_size - 1) // 2
        self._count_nodata = count_nodata

    @property
    def source(self) -> RasterSource:
        return self._source

    @property
    def mask(self) -> MaskProvider:
        return self._mask

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def half_width(self) -> int:
        return self._half_width

    @property
    def count_nodata(self) -> float:
        return self._count_nodata

    @property
    def shape(self):
        return self._source.shape

    @property
    def bounds(self) -> Region:
        return self._source.bounds

    def effective_window(self, x: int, y: int) -> Region:
        """Window of pixel ``(x, y)`` clipped to the raster bounds."""
        nominal = Region.window_around(x, y, self._half_width)
        return self.bounds.intersection(nominal)

    def compute_region(self, region: Region) -> WindowResult:
        """Compute average and count for every pixel of ``region``.

        Parameters
        ----------
        region : Region
            Requested rectangle; must lie inside ``bounds``.

        Returns
        -------
        WindowResult
            Arrays of shape ``region.shape``.

        Raises
        ------
        ValueError
            If the region is empty or extends past the raster.
        """
        region = Region(*region)
        if region.is_empty or not self.bounds.contains(region):
            raise ValueError(
                f"Region {tuple(region)} is outside raster bounds "
                f"{tuple(self.bounds)}"
            )

        average = np.full(region.shape, np.nan, dtype=np.float64)
        count = np.full(region.shape, self._count_nodata, dtype=np.float32)

        block = self.bounds.intersection(region.expand(self._half_width))
        inner = region.relative_to(block).slices
        mask = np.asarray(self._mask.fetch(block))
        center = mask[inner] != 0
        if not center.any():
            logger.debug("Region %s fully masked, source not read", tuple(region))
            return WindowResult(region, average, count)

        values = np.asarray(self._source.read_region(block), dtype=np.float64)
        valid = (mask > 0) & ~np.isnan(values)

        sums = _window_sum(np.where(valid, values, 0.0), self._half_width)[inner]
        counts = _window_sum(valid.astype(np.int32), self._half_width)[inner]

        with np.errstate(invalid='ignore', divide='ignore'):
            means = sums / counts
        average[center] = means[center]
        count[center] = counts[center]
        logger.debug(
            "Computed region %s from block %s", tuple(region), tuple(block)
        )
        return WindowResult(region, average, count)

    def compute_full(self) -> WindowResult:
        """Compute the whole raster in a single request."""
        return self.compute_region(self.bounds)

    def compute_regions(
        self,
        regions: Iterable[Region],
        max_workers: Optional[int] = None,
    ) -> Iterator[WindowResult]:
        """Compute independent regions on a thread pool.

        Parameters
        ----------
        regions : Iterable[Region]
            Regions to compute. They may overlap.
        max_workers : int, optional
            Thread count; ``None`` lets ``ThreadPoolExecutor`` choose.

        Yields
        ------
        WindowResult
            One result per region, in request order.
        """
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            yield from pool.map(self.compute_region, regions)

    def __repr__(self) -> str:
        return (
            f"WindowAverage(shape={self.shape}, "
            f"window_size={self._window_size})"
        )
