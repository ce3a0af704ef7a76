# -*- coding: utf-8 -*-
"""
IO Module - Raster sources, GeoTIFF reading and result writers.

Input bands are exposed as ``RasterSource`` objects that return any
rectangle on request. GeoTIFF files are read through rasterio; results
are written either to GeoTIFF (streamed tile by tile) or to NumPy
``.npy``/``.npz`` archives.

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
import importlib
from pathlib import Path
from typing import Any, Dict, Optional, Union

# WinAvg internal
from winavg.IO.base import ArraySource, ImageWriter, RasterSource
from winavg.IO.geotiff import GeoTIFFBandSource, GeoTIFFReader, GeoTIFFWriter
from winavg.IO.numpy_io import NumpyWriter


# Writer registry: maps format strings to (module_path, class_name)
_WRITER_REGISTRY: Dict[str, tuple] = {
    'geotiff': ('winavg.IO.geotiff', 'GeoTIFFWriter'),
    'numpy': ('winavg.IO.numpy_io', 'NumpyWriter'),
}

# Extension-to-format mapping for auto-detection
_EXTENSION_MAP: Dict[str, str] = {
    '.tif': 'geotiff',
    '.tiff': 'geotiff',
    '.geotiff': 'geotiff',
    '.npy': 'numpy',
    '.npz': 'numpy',
}


def get_writer(
    format: str,
    filepath: Union[str, Path],
    metadata: Optional[Dict[str, Any]] = None,
) -> ImageWriter:
    """Create an ImageWriter for the given format.

    Writer modules are imported lazily so optional dependencies are only
    required when the corresponding writer is requested.

    Parameters
    ----------
    format : str
        Output format. One of ``'geotiff'``, ``'numpy'``.
    filepath : str or Path
        Output file path.
    metadata : Dict[str, Any], optional
        Passed to the writer constructor.

    Returns
    -------
    ImageWriter

    Raises
    ------
    ValueError
        If *format* is not a recognized format string.
    """
    key = format.lower()
    if key not in _WRITER_REGISTRY:
        raise ValueError(
            f"Unknown writer format: {format!r}. "
            f"Supported formats: {sorted(_WRITER_REGISTRY.keys())}"
        )
    module_path, class_name = _WRITER_REGISTRY[key]
    module = importlib.import_module(module_path)
    writer_cls = getattr(module, class_name)
    return writer_cls(filepath, metadata=metadata)


def format_from_path(path: Union[str, Path]) -> str:
    """Writer format implied by a file extension.

    Raises
    ------
    ValueError
        If the extension is not recognized.
    """
    ext = Path(path).suffix.lower()
    if ext not in _EXTENSION_MAP:
        raise ValueError(
            f"Cannot determine writer format from extension '{ext}'. "
            f"Supported extensions: {sorted(_EXTENSION_MAP.keys())}. "
            f"Provide an explicit format= argument."
        )
    return _EXTENSION_MAP[ext]


def open_image(filepath: Union[str, Path]) -> GeoTIFFReader:
    """Open a supported raster image file.

    Parameters
    ----------
    filepath : str or Path
        Path to a GeoTIFF image.

    Returns
    -------
    GeoTIFFReader

    Raises
    ------
    ValueError
        If the format is unsupported.
    """
    filepath = Path(filepath)
    if filepath.suffix.lower() in ('.tif', '.tiff', '.geotiff'):
        return GeoTIFFReader(filepath)
    raise ValueError(
        f"Unsupported raster format: {filepath.suffix!r}. "
        "Supported: .tif, .tiff, .geotiff"
    )


__all__ = [
    'RasterSource',
    'ArraySource',
    'ImageWriter',
    'GeoTIFFReader',
    'GeoTIFFBandSource',
    'GeoTIFFWriter',
    'NumpyWriter',
    'get_writer',
    'format_from_path',
    'open_image',
]
