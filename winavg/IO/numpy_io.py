# -*- coding: utf-8 -*-
"""
NumPy Writer - Write result bands to NumPy .npy and .npz files.

A single band goes to ``.npy`` through ``write()``; a product's named
bands go to one ``.npz`` archive through ``write_npz()``. A JSON sidecar
next to the array file records shape, dtype, band names and whatever
descriptive metadata the writer was given.

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
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

# Third-party
import numpy as np

# WinAvg internal
from winavg.IO.base import ImageWriter

logger = logging.getLogger(__name__)


class NumpyWriter(ImageWriter):
    """Write arrays to NumPy .npy and .npz formats.

    Parameters
    ----------
    filepath : str or Path
        Output file path (``.npy`` or ``.npz``).
    metadata : Dict[str, Any], optional
        Extra keys merged into the JSON sidecar. ``shape`` and ``dtype``
        are populated automatically.

    Examples
    --------
    >>> from winavg.IO.numpy_io import NumpyWriter
    >>> with NumpyWriter('scene_avg.npz') as writer:
    ...     writer.write_npz({'B1_avg': avg, 'B1_cnt': cnt})
    """

    def write(
        self,
        data: np.ndarray,
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write a single array to a .npy file.

        Parameters
        ----------
        data : np.ndarray
            Array data to write.
        geolocation : Dict[str, Any], optional
            Geolocation information included in the sidecar metadata.
        """
        np.save(str(self.filepath), data)
        self._write_sidecar({
            'shape': list(data.shape),
            'dtype': str(data.dtype),
        }, geolocation, '.npy')

    def write_npz(
        self,
        arrays: Dict[str, np.ndarray],
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write multiple named arrays to a .npz archive.

        Parameters
        ----------
        arrays : Dict[str, np.ndarray]
            Band name to array data. Insertion order is preserved in the
            sidecar's ``array_names``.
        geolocation : Dict[str, Any], optional
            Geolocation information included in the sidecar metadata.

        Raises
        ------
        ValueError
            If ``arrays`` is empty.
        """
        if not arrays:
            raise ValueError("write_npz requires at least one array")
        np.savez(str(self.filepath), **arrays)
        first = next(iter(arrays.values()))
        self._write_sidecar({
            'shape': list(first.shape),
            'dtype': {name: str(a.dtype) for name, a in arrays.items()},
            'array_names': list(arrays.keys()),
        }, geolocation, '.npz')

    def write_chip(
        self,
        data: np.ndarray,
        row_start: int,
        col_start: int,
        geolocation: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Not supported for NumPy format.

        Raises
        ------
        NotImplementedError
            Always raised; NumPy files do not support partial writes.
        """
        raise NotImplementedError(
            "NumPy .npy format does not support partial (chip) writes."
        )

    def _write_sidecar(
        self,
        sidecar: Dict[str, Any],
        geolocation: Optional[Dict[str, Any]],
        extension: str,
    ) -> None:
        if self.metadata:
            sidecar.update(self.metadata)
        if geolocation:
            sidecar['geolocation'] = geolocation

        # np.save/np.savez append the extension when it is missing
        array_path = Path(str(self.filepath))
        if self.filepath.suffix != extension:
            array_path = Path(str(self.filepath) + extension)
        sidecar_path = Path(str(array_path) + '.json')
        with open(sidecar_path, 'w') as f:
            json.dump(sidecar, f, indent=2, default=str)
        logger.debug("Wrote sidecar %s", sidecar_path)
