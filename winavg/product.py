# -*- coding: utf-8 -*-
"""
Product - Named collection of co-registered raster bands.

A ``Product`` groups bands with scene-level metadata: product type,
scene size, geolocation (CRS and affine transform) and acquisition start
and end time. Band data is never held by the product itself; each
``Band`` wraps a ``RasterSource`` that reads regions on demand, so the
same container describes an opened GeoTIFF, in-memory arrays, or the
lazily computed output of an operator.

Bands may differ in size (multi-resolution scenes); operators check the
sizes they need.

Author
------
Steven Siebert

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
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# Third-party
import numpy as np

# WinAvg internal
from winavg.data_prep.base import Region
from winavg.exceptions import ValidationError
from winavg.IO.base import ArraySource, RasterSource
from winavg.IO.geotiff import GeoTIFFReader

logger = logging.getLogger(__name__)


@dataclass
class Band:
    """A named raster band backed by a ``RasterSource``.

    Attributes
    ----------
    name : str
        Band name, unique within its product.
    source : RasterSource
        Region reader for the band samples.
    unit : str, optional
        Physical unit of the samples.
    description : str, optional
        Free-text description.
    """

    name: str
    source: RasterSource
    unit: Optional[str] = None
    description: Optional[str] = None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.source.shape

    @property
    def width(self) -> int:
        return self.source.shape[1]

    @property
    def height(self) -> int:
        return self.source.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self.source.dtype

    @property
    def nodata(self) -> Optional[float]:
        return self.source.nodata

    def read_region(self, region: Region) -> np.ndarray:
        return self.source.read_region(region)

    def read_full(self) -> np.ndarray:
        return self.source.read_full()


@dataclass
class Product:
    """Scene container holding bands and their shared metadata.

    Attributes
    ----------
    name : str
        Product name.
    product_type : str
        Product type label (``'GeoTIFF'``, ``'Avg'``, ...).
    width : int
        Scene raster width in pixels.
    height : int
        Scene raster height in pixels.
    bands : Dict[str, Band]
        Bands in insertion order.
    geolocation : Dict[str, Any], optional
        ``crs`` and ``transform`` of the scene raster.
    start_time, end_time : str, optional
        Acquisition period, ISO 8601.
    metadata : Dict[str, Any]
        Additional descriptive metadata.

    Examples
    --------
    >>> product = Product.from_arrays('scene', {'B1': b1, 'B2': b2})
    >>> product.band_names
    ['B1', 'B2']
    """

    name: str
    product_type: str
    width: int
    height: int
    bands: Dict[str, Band] = field(default_factory=dict)
    geolocation: Optional[Dict[str, Any]] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    _resources: List[Any] = field(default_factory=list, repr=False)

    @property
    def band_names(self) -> List[str]:
        return list(self.bands)

    @property
    def shape(self) -> Tuple[int, int]:
        """Scene raster ``(rows, cols)``."""
        return (self.height, self.width)

    def add_band(self, band: Band) -> Band:
        """Add a band.

        Raises
        ------
        ValidationError
            If a band with the same name already exists.
        """
        if band.name in self.bands:
            raise ValidationError(
                f"Product '{self.name}' already contains a band with the "
                f"name '{band.name}'"
            )
        self.bands[band.name] = band
        return band

    def contains_band(self, name: str) -> bool:
        return name in self.bands

    def get_band(self, name: str) -> Band:
        """Band by name.

        Raises
        ------
        ValidationError
            If the product has no band with that name.
        """
        try:
            return self.bands[name]
        except KeyError:
            raise ValidationError(
                f"Source product does not contain a band with the name "
                f"'{name}'"
            ) from None

    @classmethod
    def from_arrays(
        cls,
        name: str,
        arrays: Dict[str, np.ndarray],
        product_type: str = 'Array',
        nodata: Optional[float] = None,
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> 'Product':
        """Build a product from in-memory 2D arrays.

        Parameters
        ----------
        name : str
            Product name.
        arrays : Dict[str, np.ndarray]
            Band name to 2D array. The first array sets the scene size.
        product_type : str
            Product type label. Default ``'Array'``.
        nodata : float, optional
            Sentinel converted to NaN when floating-point bands are read.
        geolocation : Dict[str, Any], optional
            ``crs`` and ``transform``.

        Raises
        ------
        ValidationError
            If ``arrays`` is empty.
        """
        if not arrays:
            raise ValidationError("A product needs at least one band")
        sources = {k: ArraySource(v, nodata=nodata) for k, v in arrays.items()}
        rows, cols = next(iter(sources.values())).shape
        product = cls(name, product_type, cols, rows, geolocation=geolocation)
        for band_name, source in sources.items():
            product.add_band(Band(band_name, source))
        return product

    @classmethod
    def from_geotiff(cls, filepath: Union[str, Path]) -> 'Product':
        """Open a GeoTIFF as a product with one band per file band.

        Band names come from the band descriptions, falling back to
        ``band_<n>``. Samples are the geophysical values (scale and
        offset applied, no-data as NaN). ``START_TIME``/``END_TIME``
        dataset tags become the product's acquisition period.

        The underlying file stays open until ``close()``.
        """
        reader = GeoTIFFReader(filepath)
        meta = reader.metadata
        product = cls(
            name=reader.filepath.stem,
            product_type=meta['format'],
            width=meta['cols'],
            height=meta['rows'],
            geolocation=reader.get_geolocation(),
            start_time=meta.get('start_time'),
            end_time=meta.get('end_time'),
            metadata={'source_file': str(reader.filepath)},
        )
        product._resources.append(reader)
        for index, band_name in enumerate(reader.band_names):
            product.add_band(Band(band_name, reader.band_source(index)))
        logger.info(
            "Opened product %s with bands %s",
            product.name, product.band_names,
        )
        return product

    def close(self) -> None:
        """Close readers opened by this product."""
        while self._resources:
            self._resources.pop().close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
