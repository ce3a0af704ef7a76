# -*- coding: utf-8 -*-
"""
GeoTIFF IO - Read and write GeoTIFF products band by band.

``GeoTIFFReader`` opens any GeoTIFF (including COGs and multi-band files)
through rasterio and exposes windowed chip reads. ``GeoTIFFBandSource``
wraps one band of a reader as a ``RasterSource`` returning geophysical
float64 samples with the band's no-data value converted to NaN.
``GeoTIFFWriter`` writes full arrays or streams chips into a new file,
carrying CRS, transform, band descriptions and the no-data value.

Dependencies
------------
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

# Standard library
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# Third-party
import numpy as np

try:
    import rasterio
    from rasterio.transform import Affine
    from rasterio.windows import Window
    _HAS_RASTERIO = True
except ImportError:
    _HAS_RASTERIO = False

# WinAvg internal
from winavg.data_prep.base import Region
from winavg.exceptions import DependencyError
from winavg.IO.base import ImageWriter, RasterSource

logger = logging.getLogger(__name__)


def _require_rasterio(purpose: str) -> None:
    if not _HAS_RASTERIO:
        raise DependencyError(
            f"rasterio is required for GeoTIFF {purpose}. "
            "Install with: pip install rasterio"
        )


class GeoTIFFReader:
    """Read GeoTIFF and Cloud-Optimized GeoTIFF imagery.

    Chip reads share one rasterio dataset handle and are serialised by a
    lock, so a single reader may back band sources that are read from
    several threads at once.

    Parameters
    ----------
    filepath : str or Path
        Path to the GeoTIFF file.

    Attributes
    ----------
    filepath : Path
        Path to the image file.
    metadata : Dict[str, Any]
        Standardized metadata dictionary.
    dataset : rasterio.DatasetReader
        Rasterio dataset object for direct access.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be opened as a GeoTIFF.

    Examples
    --------
    >>> from winavg.IO.geotiff import GeoTIFFReader
    >>> with GeoTIFFReader('scene.tif') as reader:
    ...     chip = reader.read_chip(0, 512, 0, 512, bands=[0])
    ...     print(reader.band_names)
    """

    def __init__(self, filepath: Union[str, Path]) -> None:
        _require_rasterio('reading')
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"File not found: {self.filepath}")
        self._lock = threading.Lock()
        self.dataset = None
        self.metadata: Dict[str, Any] = {}
        self._load_metadata()

    def _load_metadata(self) -> None:
        """Load GeoTIFF metadata using rasterio."""
        try:
            self.dataset = rasterio.open(str(self.filepath))
        except rasterio.errors.RasterioIOError as e:
            raise ValueError(f"Failed to open GeoTIFF: {e}") from e

        ds = self.dataset
        band_names = [
            desc if desc else f"band_{i + 1}"
            for i, desc in enumerate(ds.descriptions)
        ]
        tags = ds.tags()
        self.metadata = {
            'format': 'GeoTIFF',
            'rows': ds.height,
            'cols': ds.width,
            'bands': ds.count,
            'dtype': str(ds.dtypes[0]),
            'crs': ds.crs.to_string() if ds.crs else None,
            'transform': ds.transform,
            'bounds': ds.bounds,
            'resolution': ds.res,
            'nodata': ds.nodata,
            'nodatavals': tuple(ds.nodatavals),
            'scales': tuple(ds.scales),
            'offsets': tuple(ds.offsets),
            'band_names': band_names,
            'start_time': tags.get('START_TIME'),
            'end_time': tags.get('END_TIME'),
        }
        if 'TIFFTAG_IMAGEDESCRIPTION' in tags:
            self.metadata['description'] = tags['TIFFTAG_IMAGEDESCRIPTION']
        logger.debug(
            "Opened %s: %d x %d, %d band(s)",
            self.filepath.name, ds.width, ds.height, ds.count,
        )

    @property
    def band_names(self) -> List[str]:
        """Band descriptions, or ``band_<n>`` where a band has none."""
        return list(self.metadata['band_names'])

    def read_chip(
        self,
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        bands: Optional[List[int]] = None,
    ) -> np.ndarray:
        """Read a spatial chip from the GeoTIFF.

        Parameters
        ----------
        row_start : int
            Starting row index (inclusive).
        row_end : int
            Ending row index (exclusive).
        col_start : int
            Starting column index (inclusive).
        col_end : int
            Ending column index (exclusive).
        bands : Optional[List[int]]
            Band indices to read (0-based). If None, read all bands.

        Returns
        -------
        np.ndarray
            Image chip with shape ``(rows, cols)`` for single band or
            ``(bands, rows, cols)`` for multi-band.

        Raises
        ------
        ValueError
            If indices are out of bounds.
        """
        if row_start < 0 or col_start < 0:
            raise ValueError("Start indices must be non-negative")
        if row_end > self.metadata['rows'] or col_end > self.metadata['cols']:
            raise ValueError("End indices exceed image dimensions")

        window = Window(
            col_start, row_start,
            col_end - col_start, row_end - row_start,
        )

        with self._lock:
            if bands is None:
                data = self.dataset.read(window=window)
            else:
                data = self.dataset.read([b + 1 for b in bands], window=window)

        if data.shape[0] == 1:
            return data[0]
        return data

    def read_full(self, bands: Optional[List[int]] = None) -> np.ndarray:
        """Read the entire GeoTIFF image.

        Parameters
        ----------
        bands : Optional[List[int]]
            Band indices to read (0-based). If None, read all bands.

        Returns
        -------
        np.ndarray
            Full image data.
        """
        return self.read_chip(
            0, self.metadata['rows'], 0, self.metadata['cols'], bands=bands
        )

    def get_shape(self) -> Tuple[int, ...]:
        """Get image dimensions.

        Returns
        -------
        Tuple[int, ...]
            ``(rows, cols)`` for single band or
            ``(rows, cols, bands)`` for multi-band.
        """
        if self.metadata['bands'] == 1:
            return (self.metadata['rows'], self.metadata['cols'])
        return (
            self.metadata['rows'],
            self.metadata['cols'],
            self.metadata['bands'],
        )

    def get_dtype(self) -> np.dtype:
        """Get the data type of the image.

        Returns
        -------
        np.dtype
        """
        return np.dtype(self.metadata['dtype'])

    def get_geolocation(self) -> Optional[Dict[str, Any]]:
        """Get geolocation information.

        Returns
        -------
        Dict[str, Any]
            CRS, affine transform, geographic bounds, and resolution.
        """
        return {
            'crs': self.metadata['crs'],
            'transform': self.metadata['transform'],
            'bounds': self.metadata['bounds'],
            'resolution': self.metadata['resolution'],
        }

    def band_source(self, band: Union[int, str]) -> 'GeoTIFFBandSource':
        """Geophysical ``RasterSource`` for one band, by index or name."""
        if isinstance(band, str):
            try:
                band = self.metadata['band_names'].index(band)
            except ValueError:
                raise KeyError(f"No band named {band!r} in {self.filepath.name}")
        return GeoTIFFBandSource(self, band)

    def close(self) -> None:
        """Close the rasterio dataset."""
        if self.dataset is not None:
            self.dataset.close()
            self.dataset = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


class GeoTIFFBandSource(RasterSource):
    """Geophysical view of one GeoTIFF band.

    Samples are returned as float64 with ``value * scale + offset``
    applied and the band's no-data value replaced by NaN.

    Parameters
    ----------
    reader : GeoTIFFReader
        Open reader owning the dataset. The reader is not closed by this
        source.
    band_index : int
        0-based band index.
    """

    def __init__(self, reader: GeoTIFFReader, band_index: int) -> None:
        n_bands = reader.metadata['bands']
        if not 0 <= band_index < n_bands:
            raise IndexError(
                f"band_index {band_index} out of range for {n_bands} band(s)"
            )
        self._reader = reader
        self._band_index = band_index
        self._nodata = reader.metadata['nodatavals'][band_index]
        self._scale = reader.metadata['scales'][band_index]
        self._offset = reader.metadata['offsets'][band_index]

    @property
    def name(self) -> str:
        return self._reader.metadata['band_names'][self._band_index]

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._reader.metadata['rows'], self._reader.metadata['cols'])

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.float64)

    def read_region(self, region: Region) -> np.ndarray:
        self._check_region(region)
        raw = self._reader.read_chip(
            region.row_start, region.row_end,
            region.col_start, region.col_end,
            bands=[self._band_index],
        )
        data = raw.astype(np.float64)
        if self._nodata is not None:
            if np.isnan(self._nodata):
                invalid = np.isnan(data)
            else:
                invalid = raw == self._nodata
        else:
            invalid = None
        if self._scale != 1.0 or self._offset != 0.0:
            data = data * self._scale + self._offset
        if invalid is not None:
            data[invalid] = np.nan
        return data

    def __repr__(self) -> str:
        return (
            f"GeoTIFFBandSource({self._reader.filepath.name!r}, "
            f"band={self._band_index})"
        )


class GeoTIFFWriter(ImageWriter):
    """Write arrays to a GeoTIFF file.

    ``write()`` creates the file from a complete ``(rows, cols)`` or
    ``(bands, rows, cols)`` array. ``write_chip()`` streams tiles into a
    file created on the first call from the ``rows``, ``cols``, ``bands``
    and ``dtype`` metadata keys, so full outputs never need to be held in
    memory.

    Recognised metadata keys: ``rows``, ``cols``, ``bands``, ``dtype``,
    ``nodata``, ``band_names``, ``tags``.

    Parameters
    ----------
    filepath : str or Path
        Output GeoTIFF path.
    metadata : Dict[str, Any], optional
        Output layout and descriptive metadata.

    Raises
    ------
    DependencyError
        If rasterio is not installed.

    Examples
    --------
    >>> meta = {'rows': 1024, 'cols': 1024, 'bands': 2, 'dtype': 'float64'}
    >>> with GeoTIFFWriter('out.tif', metadata=meta) as writer:
    ...     writer.write_chip(tile, row_start=0, col_start=512)
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        _require_rasterio('writing')
        super().__init__(filepath, metadata)
        self._dataset = None

    def _open(
        self,
        rows: int,
        cols: int,
        bands: int,
        dtype: Any,
        geolocation: Optional[Dict[str, Any]],
    ) -> None:
        profile: Dict[str, Any] = {
            'driver': 'GTiff',
            'height': rows,
            'width': cols,
            'count': bands,
            'dtype': np.dtype(dtype).name,
        }
        nodata = self.metadata.get('nodata')
        if nodata is not None:
            profile['nodata'] = nodata
        if geolocation:
            if geolocation.get('crs') is not None:
                profile['crs'] = geolocation['crs']
            transform = geolocation.get('transform')
            if transform is not None:
                if not isinstance(transform, Affine):
                    transform = Affine(*tuple(transform)[:6])
                profile['transform'] = transform

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Creating %s with profile %s", self.filepath, profile)
        try:
            self._dataset = rasterio.open(str(self.filepath), 'w', **profile)
        except rasterio.errors.RasterioError as e:
            raise IOError(f"Failed to create GeoTIFF {self.filepath}: {e}") from e

        for i, name in enumerate(self.metadata.get('band_names') or [], 1):
            if i <= bands:
                self._dataset.set_band_description(i, name)
        tags = self.metadata.get('tags')
        if tags:
            self._dataset.update_tags(**tags)

    def write(
        self,
        data: np.ndarray,
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write a complete array and close the file.

        Parameters
        ----------
        data : np.ndarray
            ``(rows, cols)`` or ``(bands, rows, cols)`` array.
        geolocation : Dict[str, Any], optional
            ``crs`` and ``transform`` for the output.

        Raises
        ------
        ValueError
            If ``data`` is not 2D or 3D.
        """
        cube = _as_cube(data)
        self._open(cube.shape[1], cube.shape[2], cube.shape[0],
                   cube.dtype, geolocation)
        self._dataset.write(cube)
        self.close()

    def write_chip(
        self,
        data: np.ndarray,
        row_start: int,
        col_start: int,
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write a chip into the output, creating the file on first use.

        Parameters
        ----------
        data : np.ndarray
            ``(rows, cols)`` or ``(bands, rows, cols)`` chip.
        row_start : int
            Starting row index in the output file.
        col_start : int
            Starting column index in the output file.
        geolocation : Dict[str, Any], optional
            ``crs`` and ``transform`` for the full output; only used when
            the file is created.

        Raises
        ------
        ValueError
            If the output dimensions are unknown or the chip falls
            outside them.
        """
        cube = _as_cube(data)
        if self._dataset is None:
            if 'rows' not in self.metadata or 'cols' not in self.metadata:
                raise ValueError(
                    "Chip writes require 'rows' and 'cols' in metadata"
                )
            self._open(
                self.metadata['rows'],
                self.metadata['cols'],
                self.metadata.get('bands', cube.shape[0]),
                self.metadata.get('dtype', cube.dtype),
                geolocation,
            )

        ds = self._dataset
        if (
            row_start < 0 or col_start < 0
            or row_start + cube.shape[1] > ds.height
            or col_start + cube.shape[2] > ds.width
        ):
            raise ValueError(
                f"Chip at ({row_start}, {col_start}) with shape "
                f"{cube.shape[1:]} exceeds output {ds.height} x {ds.width}"
            )
        if cube.shape[0] != ds.count:
            raise ValueError(
                f"Chip has {cube.shape[0]} band(s), output has {ds.count}"
            )
        window = Window(col_start, row_start, cube.shape[2], cube.shape[1])
        ds.write(cube.astype(ds.dtypes[0], copy=False), window=window)

    def close(self) -> None:
        """Flush and close the output dataset."""
        if self._dataset is not None:
            self._dataset.close()
            self._dataset = None


def _as_cube(data: np.ndarray) -> np.ndarray:
    """View a 2D or 3D array as ``(bands, rows, cols)``."""
    if data.ndim == 2:
        return data[np.newaxis]
    if data.ndim == 3:
        return data
    raise ValueError(f"data must be 2D or 3D, got {data.ndim}D")
