# -*- coding: utf-8 -*-
"""
Tiler - Plan non-overlapping tile regions over a raster.

Computes the row-major grid of ``Region`` tiles that covers a raster
exactly once. Edge tiles are clipped to the raster rather than padded, so
every planned region is a legal compute request. The tiler plans index
bounds only and never touches pixel data.

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
from typing import List, Tuple, Union

# Third-party
import numpy as np

# WinAvg internal
from winavg.data_prep.base import Region, RegionBase, _normalize_pair


class Tiler(RegionBase):
    """Row-major, non-overlapping tile plan for a bounded raster.

    Parameters
    ----------
    nrows : int
        Number of raster rows.
    ncols : int
        Number of raster columns.
    tile_size : int or Tuple[int, int]
        (tile_rows, tile_cols). If int, square tiles.

    Raises
    ------
    TypeError
        If dimensions or tile_size have the wrong type.
    ValueError
        If dimensions or tile_size are not positive.

    Examples
    --------
    >>> from winavg.data_prep import Tiler
    >>> tiler = Tiler(nrows=100, ncols=250, tile_size=128)
    >>> tiler.n_tiles
    2
    >>> tiler.tile_positions()[1]
    Region(x=128, y=0, width=122, height=100)
    """

    def __init__(
        self,
        nrows: int,
        ncols: int,
        tile_size: Union[int, Tuple[int, int]],
    ) -> None:
        super().__init__(nrows, ncols)
        self._tile_size = _normalize_pair(tile_size, 'tile_size')

    @property
    def tile_size(self) -> Tuple[int, int]:
        """The (tile_rows, tile_cols) dimensions.

        Returns
        -------
        Tuple[int, int]
            Tile dimensions.
        """
        return self._tile_size

    @property
    def grid_shape(self) -> Tuple[int, int]:
        """Number of tiles along rows and columns."""
        tr, tc = self._tile_size
        return (-(-self._nrows // tr), -(-self._ncols // tc))

    @property
    def n_tiles(self) -> int:
        n_row, n_col = self.grid_shape
        return n_row * n_col

    def tile_positions(self) -> List[Region]:
        """All tile regions in row-major order.

        Returns
        -------
        List[Region]
            Tiles covering the raster exactly once. The last tile in a
            row or column is narrower when the raster size is not a
            multiple of the tile size.
        """
        tr, tc = self._tile_size
        row_starts = np.arange(0, self._nrows, tr)
        col_starts = np.arange(0, self._ncols, tc)

        rr, cc = np.meshgrid(row_starts, col_starts, indexing='ij')
        return [
            self.clip(Region(int(c), int(r), tc, tr))
            for r, c in zip(rr.ravel(), cc.ravel())
        ]

    def __repr__(self) -> str:
        return (
            f"Tiler(nrows={self._nrows}, ncols={self._ncols}, "
            f"tile_size={self._tile_size})"
        )
