# -*- coding: utf-8 -*-
"""
Window Average Operator - Masked window averaging of product bands.

``WindowAverageOperator`` validates its parameters against a source
product, then builds a target product named ``<source>_avg`` holding two
lazily computed bands per input band: ``<band>_avg`` (float64 window
average) and ``<band>_cnt`` (float32 valid-sample count). Both are NaN
where the mask expression excludes the centre pixel. One
``ExpressionMask`` is shared by all bands.

Nothing is computed until a region is requested. ``run`` assembles full
arrays tile by tile; ``write`` streams tiles to GeoTIFF or collects them
into a NumPy archive. Tiles are computed on a thread pool.

Dependencies
------------
scipy
numexpr
rasterio (GeoTIFF output only)

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
import itertools
import logging
import os
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from pathlib import Path
from typing import Annotated, Callable, Dict, List, Optional, Tuple, Union

# Third-party
import numpy as np

# WinAvg internal
from winavg.data_prep import Region, Tiler
from winavg.exceptions import ProcessorError, ValidationError
from winavg.image_processing.base import ImageProcessor
from winavg.image_processing.masks import ExpressionMask
from winavg.image_processing.params import Desc, Range
from winavg.image_processing.versioning import processor_tags, processor_version
from winavg.image_processing.window_average import WindowAverage
from winavg.IO import format_from_path, get_writer
from winavg.IO.base import RasterSource
from winavg.product import Band, Product
from winavg.vocabulary import OutputFormat, ProcessorCategory

logger = logging.getLogger(__name__)

AVG_SUFFIX = '_avg'
CNT_SUFFIX = '_cnt'


class _WindowResultSource(RasterSource):
    """One component of an engine's output, read region by region."""

    def __init__(self, engine: WindowAverage, component: str) -> None:
        self._engine = engine
        self._component = component

    @property
    def shape(self) -> Tuple[int, int]:
        return self._engine.shape

    @property
    def dtype(self) -> np.dtype:
        if self._component == 'average':
            return np.dtype(np.float64)
        return np.dtype(np.float32)

    def read_region(self, region: Region) -> np.ndarray:
        self._check_region(region)
        return getattr(self._engine.compute_region(region), self._component)


@processor_version('0.2.0')
@processor_tags(
    category=ProcessorCategory.STATISTICS,
    description='Averages pixels of a masked area within a defined window',
)
class WindowAverageOperator(ImageProcessor):
    """Masked window average and count for selected product bands.

    Parameters
    ----------
    band_names : list of str
        Names of the source bands to process. All must share one size.
    window_size : int
        Odd window side length in [3, 125]. Default 3.
    mask_expression : str
        numexpr expression over product band names selecting the pixels
        to compute and the samples allowed to contribute,
        e.g. ``'(B8 > 0) & (SCL != 9)'``.

    Raises
    ------
    ValidationError
        If band names or the mask expression are missing, or the window
        size is even or out of range.

    Examples
    --------
    >>> op = WindowAverageOperator(
    ...     band_names=['B4', 'B8'], window_size=5,
    ...     mask_expression='B8 > 0.1')
    >>> with Product.from_geotiff('scene.tif') as product:
    ...     op.write(product, 'scene_avg.tif', tile_size=512)
    """

    band_names: Annotated[list, Desc('Names of the bands to be processed')] = None
    window_size: Annotated[int, Range(min=3, max=125),
                           Desc('Window side length in both directions')] = 3
    mask_expression: Annotated[str, Desc('Expression defining the masked area')] = None

    def __post_init__(self) -> None:
        if not self.band_names:
            raise ValidationError("Names of input bands are not provided")
        if self.window_size % 2 == 0:
            raise ValidationError("Window size must be odd")
        if not self.mask_expression or not self.mask_expression.strip():
            raise ValidationError("No mask expression provided")
        self._engines: Dict[str, WindowAverage] = {}

    # -----------------------------------------------------------------
    # Validation against a source product
    # -----------------------------------------------------------------
    def _validate_product(self, product: Product) -> Tuple[int, int]:
        """Check the bands and mask expression against ``product``.

        Returns
        -------
        Tuple[int, int]
            The common ``(rows, cols)`` of the selected bands.
        """
        sizes = [product.get_band(name).shape for name in self.band_names]
        ref = sizes[0]
        for size in sizes[1:]:
            if size != ref:
                raise ValidationError(
                    f"Size of bands must be equal. But found "
                    f"[{ref[1]},{ref[0]}] and [{size[1]},{size[0]}]."
                )
        return ref

    def _build_mask(self, product: Product, shape: Tuple[int, int]) -> ExpressionMask:
        try:
            mask = ExpressionMask(self.mask_expression, product.bands)
        except ValidationError as e:
            raise ValidationError(
                "The masked expression is not compatible with the source product"
            ) from e
        if tuple(mask.shape) != tuple(shape):
            raise ValidationError(
                "The masked expression is not compatible with the source product"
            )
        return mask

    # -----------------------------------------------------------------
    # Target product
    # -----------------------------------------------------------------
    def _build(
        self, source_product: Product
    ) -> Tuple[Product, Dict[str, WindowAverage]]:
        """Validate ``source_product`` and build the target and its engines."""
        rows, cols = self._validate_product(source_product)
        mask = self._build_mask(source_product, (rows, cols))

        target = Product(
            name=source_product.name + AVG_SUFFIX,
            product_type='Avg',
            width=cols,
            height=rows,
            geolocation=source_product.geolocation,
            start_time=source_product.start_time,
            end_time=source_product.end_time,
            metadata={
                'source_product': source_product.name,
                'window_size': self.window_size,
                'mask_expression': self.mask_expression,
                'processor_version': self.__processor_version__,
            },
        )

        engines: Dict[str, WindowAverage] = {}
        for name in self.band_names:
            source_band = source_product.get_band(name)
            engine = WindowAverage(
                source_band.source, mask=mask, window_size=self.window_size,
            )
            engines[name] = engine
            target.add_band(Band(
                name + AVG_SUFFIX,
                _WindowResultSource(engine, 'average'),
                unit=source_band.unit,
                description=f"Window average of {name}",
            ))
            target.add_band(Band(
                name + CNT_SUFFIX,
                _WindowResultSource(engine, 'count'),
                description=f"Valid sample count of {name}",
            ))
        logger.info(
            "Prepared %s: %d x %d, window %d, mask %r",
            target.name, cols, rows, self.window_size, self.mask_expression,
        )
        return target, engines

    def apply(self, source_product: Product) -> Product:
        """Build the lazily computed target product.

        Parameters
        ----------
        source_product : Product
            Product holding the bands named in ``band_names`` and any
            band the mask expression references.

        Returns
        -------
        Product
            ``<name>_avg`` of type ``'Avg'`` with ``<band>_avg`` and
            ``<band>_cnt`` for every input band, in input order.

        Raises
        ------
        ValidationError
            If a band is missing, the bands differ in size, or the mask
            expression does not fit the product.
        """
        target, self._engines = self._build(source_product)
        return target

    def compute_tile(self, target_band_name: str, region: Region) -> np.ndarray:
        """Samples of one target band over ``region``.

        Uses the engines of the most recent ``apply`` call.

        Raises
        ------
        ProcessorError
            If ``apply`` has not been called or the band name does not
            end in ``_avg`` or ``_cnt`` of a processed band.
        """
        if not self._engines:
            raise ProcessorError("apply() must be called before compute_tile()")
        source_name = target_band_name[:-len(AVG_SUFFIX)]
        engine = self._engines.get(source_name)
        if engine is not None and target_band_name.endswith(AVG_SUFFIX):
            return engine.compute_region(region).average
        if engine is not None and target_band_name.endswith(CNT_SUFFIX):
            return engine.compute_region(region).count
        raise ProcessorError(
            f"Unknown target band with name '{target_band_name}'"
        )

    # -----------------------------------------------------------------
    # Execution
    # -----------------------------------------------------------------
    def _tile_chips(
        self,
        engines: List[WindowAverage],
        regions: List[Region],
        max_workers: Optional[int],
        progress_callback: Optional[Callable[[float], None]],
    ):
        """Yield ``(region, [avg, cnt, avg, cnt, ...])`` per tile in order.

        At most ``2 * max_workers`` tiles are queued or held ahead of the
        consumer. Tiles still queued when the generator is closed are
        cancelled.
        """
        def compute(region: Region) -> List[np.ndarray]:
            chips = []
            for engine in engines:
                result = engine.compute_region(region)
                chips.extend((result.average, result.count))
            return chips

        if max_workers is None:
            max_workers = min(32, (os.cpu_count() or 1) + 4)
        kwargs = {'progress_callback': progress_callback}
        remaining = iter(regions)
        in_flight = deque()
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            try:
                for region in itertools.islice(remaining, 2 * max_workers):
                    in_flight.append((region, pool.submit(compute, region)))
                done = 0
                while in_flight:
                    region, future = in_flight.popleft()
                    chips = future.result()
                    for nxt in itertools.islice(remaining, 1):
                        in_flight.append((nxt, pool.submit(compute, nxt)))
                    done += 1
                    yield region, chips
                    self._report_progress(kwargs, done / len(regions))
            finally:
                for _, future in in_flight:
                    future.cancel()

    def run(
        self,
        source_product: Product,
        tile_size: Union[int, Tuple[int, int]] = 512,
        max_workers: Optional[int] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> Dict[str, np.ndarray]:
        """Compute every target band in full.

        Parameters
        ----------
        source_product : Product
            Input product.
        tile_size : int or Tuple[int, int]
            Tile dimensions used to split the work. Default 512.
        max_workers : int, optional
            Thread count for tile computation.
        progress_callback : Callable[[float], None], optional
            Called with the completed fraction after each tile.

        Returns
        -------
        Dict[str, np.ndarray]
            Target band name to full array, in target band order.
        """
        target, engines = self._build(source_product)
        return self._assemble(
            target, engines, tile_size, max_workers, progress_callback
        )

    def _assemble(
        self,
        target: Product,
        engines: Dict[str, WindowAverage],
        tile_size: Union[int, Tuple[int, int]],
        max_workers: Optional[int],
        progress_callback: Optional[Callable[[float], None]],
    ) -> Dict[str, np.ndarray]:
        arrays = {
            band.name: np.empty(band.shape, dtype=band.dtype)
            for band in target.bands.values()
        }
        names = target.band_names
        regions = Tiler(target.height, target.width, tile_size).tile_positions()
        logger.debug("Computing %d tile(s) for %s", len(regions), names)
        tiles = self._tile_chips(
            [engines[name] for name in self.band_names],
            regions, max_workers, progress_callback,
        )
        with closing(tiles):
            for region, chips in tiles:
                for name, chip in zip(names, chips):
                    arrays[name][region.slices] = chip
        return arrays

    def write(
        self,
        source_product: Product,
        path: Union[str, Path],
        format: Optional[Union[str, OutputFormat]] = None,
        tile_size: Union[int, Tuple[int, int]] = 512,
        max_workers: Optional[int] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> Product:
        """Compute the target product and write it to ``path``.

        GeoTIFF output is streamed tile by tile with one band per target
        band (float64, band descriptions set to the target band names).
        NumPy output is an ``.npz`` archive keyed by target band name with
        a JSON sidecar.

        Parameters
        ----------
        source_product : Product
            Input product.
        path : str or Path
            Output file.
        format : str or OutputFormat, optional
            ``'geotiff'`` or ``'numpy'``; inferred from the extension
            when omitted.
        tile_size, max_workers, progress_callback
            As for ``run``.

        Returns
        -------
        Product
            The target product that was written.
        """
        path = Path(path)
        if format is None:
            format = format_from_path(path)
        format = OutputFormat(format)

        target, engines = self._build(source_product)
        names = target.band_names
        meta = {
            'rows': target.height,
            'cols': target.width,
            'bands': len(names),
            'dtype': np.result_type(*[b.dtype for b in target.bands.values()]).name,
            'nodata': float('nan'),
            'band_names': names,
            'tags': {k: v for k, v in (('START_TIME', target.start_time),
                                       ('END_TIME', target.end_time)) if v},
        }

        if format is OutputFormat.NUMPY:
            arrays = self._assemble(
                target, engines, tile_size, max_workers, progress_callback
            )
            meta.pop('tags')
            meta.update(target.metadata)
            with get_writer(format.value, path, metadata=meta) as writer:
                writer.write_npz(arrays, geolocation=target.geolocation)
        else:
            regions = Tiler(target.height, target.width, tile_size).tile_positions()
            tiles = self._tile_chips(
                [engines[name] for name in self.band_names],
                regions, max_workers, progress_callback,
            )
            with get_writer(format.value, path, metadata=meta) as writer, \
                    closing(tiles):
                for region, chips in tiles:
                    writer.write_chip(
                        np.stack(chips), region.row_start, region.col_start,
                        geolocation=target.geolocation,
                    )
        logger.info("Wrote %s (%s)", path, format.value)
        return target
