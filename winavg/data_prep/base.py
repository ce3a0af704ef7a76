# -*- coding: utf-8 -*-
"""
Data Preparation Base - Region geometry and shared raster-dimension handling.

Defines the ``Region`` named tuple, the axis-aligned rectangle used both as
the unit of a compute request and as the unit of clipping, and the
``RegionBase`` class that owns raster dimensions and clips regions to them.

Regions are expressed in pixel coordinates as ``(x, y, width, height)``
where ``x`` is the column and ``y`` the row of the upper-left corner.

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
from typing import NamedTuple, Tuple, Union


class Region(NamedTuple):
    """Axis-aligned pixel rectangle ``(x, y, width, height)``.

    ``x``/``y`` address the first column/row (inclusive). A region with a
    non-positive width or height is empty. Use ``slices`` for numpy
    indexing::

        chip = image[region.slices]

    Attributes
    ----------
    x : int
        First column (inclusive).
    y : int
        First row (inclusive).
    width : int
        Number of columns.
    height : int
        Number of rows.
    """

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_shape(cls, shape: Tuple[int, ...]) -> 'Region':
        """Region covering an array of ``(rows, cols)`` anchored at 0, 0."""
        return cls(0, 0, int(shape[1]), int(shape[0]))

    @classmethod
    def window_around(cls, x: int, y: int, half_width: int) -> 'Region':
        """Nominal square window ``[x-hw, x+hw] x [y-hw, y+hw]``.

        Parameters
        ----------
        x : int
            Center column.
        y : int
            Center row.
        half_width : int
            Half-width of the window; the side length is
            ``2 * half_width + 1``.

        Returns
        -------
        Region
            Unclipped window; may extend past any raster bounds.
        """
        side = 2 * half_width + 1
        return cls(x - half_width, y - half_width, side, side)

    @property
    def col_start(self) -> int:
        return self.x

    @property
    def col_end(self) -> int:
        """Last column (exclusive)."""
        return self.x + self.width

    @property
    def row_start(self) -> int:
        return self.y

    @property
    def row_end(self) -> int:
        """Last row (exclusive)."""
        return self.y + self.height

    @property
    def shape(self) -> Tuple[int, int]:
        """Array shape ``(rows, cols)`` of the region."""
        return (max(self.height, 0), max(self.width, 0))

    @property
    def size(self) -> int:
        """Number of pixels in the region."""
        rows, cols = self.shape
        return rows * cols

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def slices(self) -> Tuple[slice, slice]:
        """``(row_slice, col_slice)`` for numpy indexing."""
        return (slice(self.row_start, self.row_end),
                slice(self.col_start, self.col_end))

    def intersection(self, other: 'Region') -> 'Region':
        """Overlap of two regions.

        Parameters
        ----------
        other : Region
            Region to intersect with.

        Returns
        -------
        Region
            The common rectangle. When the regions do not overlap the
            result has zero width or height at the clamped corner.
        """
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.col_end, other.col_end)
        y1 = min(self.row_end, other.row_end)
        return Region(x0, y0, max(x1 - x0, 0), max(y1 - y0, 0))

    def contains(self, other: 'Region') -> bool:
        """Whether ``other`` lies entirely inside this region."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.col_end <= self.col_end
            and other.row_end <= self.row_end
        )

    def contains_point(self, x: int, y: int) -> bool:
        return self.x <= x < self.col_end and self.y <= y < self.row_end

    def expand(self, margin: int) -> 'Region':
        """Grow the region by ``margin`` pixels on every side."""
        return Region(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def relative_to(self, origin: 'Region') -> 'Region':
        """Same rectangle expressed in the pixel frame of ``origin``."""
        return Region(
            self.x - origin.x, self.y - origin.y, self.width, self.height
        )


class RegionBase:
    """Raster dimension management and region clipping.

    Parameters
    ----------
    nrows : int
        Number of rows in the raster.
    ncols : int
        Number of columns in the raster.

    Raises
    ------
    TypeError
        If ``nrows`` or ``ncols`` is not ``int``.
    ValueError
        If ``nrows`` or ``ncols`` is not positive.
    """

    def __init__(self, nrows: int, ncols: int) -> None:
        if not isinstance(nrows, int) or not isinstance(ncols, int):
            raise TypeError(
                f"nrows and ncols must be int, got "
                f"nrows={type(nrows).__name__}, ncols={type(ncols).__name__}"
            )
        if nrows <= 0 or ncols <= 0:
            raise ValueError(
                f"nrows and ncols must be positive, got "
                f"nrows={nrows}, ncols={ncols}"
            )
        self._nrows = nrows
        self._ncols = ncols

    @property
    def nrows(self) -> int:
        """Number of raster rows.

        Returns
        -------
        int
        """
        return self._nrows

    @property
    def ncols(self) -> int:
        """Number of raster columns.

        Returns
        -------
        int
        """
        return self._ncols

    @property
    def shape(self) -> Tuple[int, int]:
        """Raster dimensions as ``(nrows, ncols)``.

        Returns
        -------
        Tuple[int, int]
        """
        return (self._nrows, self._ncols)

    @property
    def bounds(self) -> Region:
        """Region covering the whole raster."""
        return Region(0, 0, self._ncols, self._nrows)

    def clip(self, region: Region) -> Region:
        """Clip a region to the raster bounds.

        Unlike snapping, clipping never moves the region; the parts that
        fall outside the raster are simply dropped.

        Parameters
        ----------
        region : Region
            Requested region (may extend past the raster).

        Returns
        -------
        Region
            ``region`` intersected with ``bounds``.
        """
        return self.bounds.intersection(region)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nrows={self._nrows}, ncols={self._ncols})"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _normalize_pair(
    value: Union[int, Tuple[int, int]], name: str
) -> Tuple[int, int]:
    """Convert an int or (int, int) tuple to a validated (int, int) pair.

    Parameters
    ----------
    value : int or Tuple[int, int]
        Scalar or pair value. If scalar, both elements are set equal.
    name : str
        Parameter name for error messages.

    Returns
    -------
    Tuple[int, int]
        Validated (rows, cols) pair.

    Raises
    ------
    TypeError
        If value is not int or tuple of two ints.
    ValueError
        If any element is not positive.
    """
    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")
        return (value, value)
    if isinstance(value, tuple) and len(value) == 2:
        r, c = value
        if not isinstance(r, int) or not isinstance(c, int):
            raise TypeError(f"{name} tuple elements must be int")
        if r <= 0 or c <= 0:
            raise ValueError(
                f"{name} elements must be positive, got ({r}, {c})"
            )
        return (r, c)
    raise TypeError(
        f"{name} must be int or Tuple[int, int], got {type(value).__name__}"
    )
