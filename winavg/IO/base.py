# -*- coding: utf-8 -*-
"""
IO Base Classes - Abstract interfaces for raster sources and writers.

Defines ``RasterSource``, the region-fetch contract every input band
satisfies (in-memory arrays, GeoTIFF bands, lazily computed result bands),
and ``ImageWriter``, the interface for serialising output products.

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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from winavg.data_prep.base import Region


class RasterSource(ABC):
    """
    Abstract base class for single-band raster sources.

    A source has fixed dimensions and returns the samples of any
    rectangle inside those dimensions on request. Floating-point sources
    mark missing samples with NaN.

    Notes
    -----
    Implementations must be safe for concurrent ``read_region`` calls from
    multiple threads; the window-average engine relies on it when regions
    are computed in parallel. Returned arrays must not alias internal
    state the caller could mutate.
    """

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        """
        Raster dimensions.

        Returns
        -------
        Tuple[int, int]
            ``(rows, cols)``
        """
        pass

    @property
    @abstractmethod
    def dtype(self) -> np.dtype:
        """
        Sample data type of the arrays returned by ``read_region``.

        Returns
        -------
        np.dtype
        """
        pass

    @property
    def nodata(self) -> Optional[float]:
        """No-data sentinel of the returned samples, if any."""
        if np.issubdtype(self.dtype, np.floating):
            return float('nan')
        return None

    @property
    def bounds(self) -> Region:
        """Region covering the whole raster."""
        return Region.from_shape(self.shape)

    @abstractmethod
    def read_region(self, region: Region) -> np.ndarray:
        """
        Read the samples of a rectangle.

        Parameters
        ----------
        region : Region
            Rectangle to read. Must lie inside ``bounds``.

        Returns
        -------
        np.ndarray
            2D array of shape ``region.shape``.

        Raises
        ------
        ValueError
            If the region is outside the raster.
        """
        pass

    def read_full(self) -> np.ndarray:
        """
        Read the entire raster.

        Returns
        -------
        np.ndarray
            Full raster data

        Notes
        -----
        Use with caution for large rasters as this loads the whole band
        into memory.
        """
        return self.read_region(self.bounds)

    def _check_region(self, region: Region) -> None:
        if region.is_empty or not self.bounds.contains(region):
            raise ValueError(
                f"Region {tuple(region)} is outside raster bounds "
                f"{tuple(self.bounds)}"
            )

    def close(self) -> None:
        """
        Release resources held by the source.

        Default implementation does nothing.
        """
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


class ArraySource(RasterSource):
    """In-memory 2D raster source.

    Parameters
    ----------
    data : np.ndarray
        2D array ``(rows, cols)``.
    nodata : float, optional
        Sentinel to convert to NaN on read. Only honoured for
        floating-point data; integer data is returned unchanged.

    Raises
    ------
    ValueError
        If ``data`` is not 2D.

    Examples
    --------
    >>> src = ArraySource(np.arange(16, dtype=np.float32).reshape(4, 4))
    >>> src.read_region(Region(1, 1, 2, 2))
    array([[ 5.,  6.],
           [ 9., 10.]], dtype=float32)
    """

    def __init__(
        self, data: np.ndarray, nodata: Optional[float] = None
    ) -> None:
        data = np.asarray(data)
        if data.ndim != 2:
            raise ValueError(f"data must be 2D, got {data.ndim}D")
        self._data = data
        self._sentinel = nodata

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._data.shape[0], self._data.shape[1])

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def read_region(self, region: Region) -> np.ndarray:
        self._check_region(region)
        chip = self._data[region.slices].copy()
        if (
            self._sentinel is not None
            and np.issubdtype(chip.dtype, np.floating)
            and not np.isnan(self._sentinel)
        ):
            chip[chip == self._sentinel] = np.nan
        return chip

    def __repr__(self) -> str:
        return f"ArraySource(shape={self.shape}, dtype={self.dtype})"


class ImageWriter(ABC):
    """
    Abstract base class for all imagery writers.

    Attributes
    ----------
    filepath : Path
        Path where the image will be written
    metadata : Dict[str, Any]
        Image metadata to be written (band names, no-data value, and for
        chip writes the full output dimensions)
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the image writer.

        Parameters
        ----------
        filepath : Union[str, Path]
            Path where the image will be written
        metadata : Optional[Dict[str, Any]], default=None
            Metadata to include in the output file
        """
        self.filepath = Path(filepath)
        self.metadata = dict(metadata) if metadata else {}

    @abstractmethod
    def write(
        self,
        data: np.ndarray,
        geolocation: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Write image data to file.

        Parameters
        ----------
        data : np.ndarray
            Image data to write
        geolocation : Optional[Dict[str, Any]], default=None
            Geolocation information to include in the output

        Raises
        ------
        ValueError
            If data format is incompatible with the output format
        IOError
            If writing fails
        """
        pass

    @abstractmethod
    def write_chip(
        self,
        data: np.ndarray,
        row_start: int,
        col_start: int,
        geolocation: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Write a spatial subset to the output file.

        Parameters
        ----------
        data : np.ndarray
            Image chip data, ``(rows, cols)`` or ``(bands, rows, cols)``
        row_start : int
            Starting row index in the output file
        col_start : int
            Starting column index in the output file
        geolocation : Optional[Dict[str, Any]], default=None
            Geolocation information for the full output

        Raises
        ------
        ValueError
            If chip location is out of bounds
        IOError
            If writing fails
        """
        pass

    def close(self) -> None:
        """
        Close the writer and release resources.

        Default implementation does nothing. Override if the writer
        maintains open file handles or other resources.
        """
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
