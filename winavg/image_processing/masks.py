# -*- coding: utf-8 -*-
"""
Mask Providers - Per-region inclusion rasters for window averaging.

A mask provider answers ``fetch(region)`` with an integer-like raster
covering exactly ``region`` in which a sample is included when its value
is greater than zero. ``ArrayMask`` passes an existing raster through,
``ConstantMask`` is the all-ones default used when no mask is supplied,
and ``ExpressionMask`` evaluates a band-maths expression (numexpr syntax)
over the referenced bands, one region at a time.

Providers hold no per-request state, so one instance may be shared by
several engines and fetched from concurrently.

Dependencies
------------
numexpr

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
import ast
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Union

# Third-party
import numexpr as ne
import numpy as np

# WinAvg internal
from winavg.data_prep.base import Region
from winavg.exceptions import ValidationError
from winavg.IO.base import ArraySource, RasterSource

logger = logging.getLogger(__name__)


class MaskProvider(ABC):
    """Abstract source of inclusion flags (``> 0`` included, ``0`` excluded)."""

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        """Total mask dimensions ``(rows, cols)``."""
        ...

    @property
    def bounds(self) -> Region:
        return Region.from_shape(self.shape)

    @abstractmethod
    def fetch(self, region: Region) -> np.ndarray:
        """Mask samples covering exactly ``region``.

        Parameters
        ----------
        region : Region
            Rectangle inside ``bounds``. Callers clip before fetching.

        Returns
        -------
        np.ndarray
            2D array of shape ``region.shape``.
        """
        ...


class ArrayMask(MaskProvider):
    """Pass-through mask over an existing raster.

    Parameters
    ----------
    mask : np.ndarray or RasterSource
        2D mask raster. Arrays are wrapped in an ``ArraySource``.
    """

    def __init__(self, mask: Union[np.ndarray, RasterSource]) -> None:
        if not isinstance(mask, RasterSource):
            mask = ArraySource(mask)
        self._source = mask

    @property
    def shape(self) -> Tuple[int, int]:
        return self._source.shape

    def fetch(self, region: Region) -> np.ndarray:
        return self._source.read_region(region)


class ConstantMask(MaskProvider):
    """Mask filled with a single value, by default all ones.

    Parameters
    ----------
    shape : Tuple[int, int]
        ``(rows, cols)`` of the raster the mask stands in for.
    value : int
        Fill value. Default 1 (everything included).
    """

    def __init__(self, shape: Tuple[int, int], value: int = 1) -> None:
        self._shape = (int(shape[0]), int(shape[1]))
        self._value = value

    @property
    def shape(self) -> Tuple[int, int]:
        return self._shape

    def fetch(self, region: Region) -> np.ndarray:
        return np.full(region.shape, self._value, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"ConstantMask(shape={self._shape}, value={self._value})"


class ExpressionMask(MaskProvider):
    """Mask computed from a band-maths expression.

    The expression uses numexpr syntax, for example
    ``"(B4 > 0.2) & (B8 < 3000)"``. Names refer to keys of ``sources``;
    comparisons must be parenthesised when combined with ``&``, ``|``
    or ``~``. A non-boolean result is thresholded with ``> 0``.
    Comparisons involving NaN are false, so no-data samples are
    excluded.

    Only the bands the expression references are read, and only over the
    requested region.

    Parameters
    ----------
    expression : str
        Mask expression.
    sources : Dict[str, RasterSource]
        Band name to source. Every referenced source must share one shape.

    Raises
    ------
    ValidationError
        If the expression is empty, does not parse, references unknown
        names, or cannot be evaluated by numexpr.

    Examples
    --------
    >>> mask = ExpressionMask('(B1 > 10) & (B2 < 5)', {'B1': b1, 'B2': b2})
    >>> mask.fetch(Region(0, 0, 256, 256))
    """

    def __init__(self, expression: str, sources: Dict[str, Any]) -> None:
        if not expression or not expression.strip():
            raise ValidationError("Mask expression is empty")
        self._expression = expression.strip()
        self._names = _referenced_names(self._expression)

        unknown = [n for n in self._names if n not in sources]
        if unknown:
            raise ValidationError(
                f"Mask expression references unknown band(s): "
                f"{', '.join(unknown)}"
            )
        self._sources = {n: sources[n] for n in self._names}

        shapes = {tuple(s.shape) for s in self._sources.values()}
        if len(shapes) > 1:
            raise ValidationError(
                f"Bands referenced by the mask expression differ in size: "
                f"{sorted(shapes)}"
            )
        if shapes:
            self._shape = shapes.pop()
        elif sources:
            self._shape = tuple(next(iter(sources.values())).shape)
        else:
            raise ValidationError(
                "Mask expression references no bands and no shape is known"
            )

        try:
            self._evaluate({
                n: np.zeros(1, dtype=getattr(s, 'dtype', np.float64))
                for n, s in self._sources.items()
            })
        except (KeyError, NotImplementedError, SyntaxError,
                TypeError, ValueError) as e:
            raise ValidationError(
                f"Mask expression {self._expression!r} cannot be "
                f"evaluated: {e}"
            ) from e
        logger.debug(
            "Compiled mask %r over bands %s", self._expression, self._names
        )

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def band_names(self) -> List[str]:
        """Bands the expression reads, in first-reference order."""
        return list(self._names)

    @property
    def shape(self) -> Tuple[int, int]:
        return self._shape

    def _evaluate(self, local_dict: Dict[str, np.ndarray]) -> np.ndarray:
        local_dict = {n: _as_numexpr_operand(a) for n, a in local_dict.items()}
        result = ne.evaluate(
            self._expression, local_dict=local_dict, global_dict={}
        )
        return np.asarray(result)

    def fetch(self, region: Region) -> np.ndarray:
        chips = {
            name: source.read_region(region)
            for name, source in self._sources.items()
        }
        result = self._evaluate(chips)
        if result.dtype != np.bool_:
            result = result > 0
        return np.broadcast_to(result, region.shape).astype(np.uint8)

    def __repr__(self) -> str:
        return f"ExpressionMask({self._expression!r})"


def _referenced_names(expression: str) -> List[str]:
    """Variable names used in *expression*, excluding called functions."""
    try:
        tree = ast.parse(expression, mode='eval')
    except SyntaxError as e:
        raise ValidationError(
            f"Mask expression {expression!r} is not valid: {e.msg}"
        ) from e

    called = {
        id(node.func) for node in ast.walk(tree)
        if isinstance(node, ast.Call)
    }
    names: List[str] = []
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Name)
            and id(node) not in called
            and node.id not in names
        ):
            names.append(node.id)
    return names


def as_mask_provider(
    mask: Optional[Union[np.ndarray, RasterSource, MaskProvider]],
    shape: Tuple[int, int],
) -> MaskProvider:
    """Normalise a mask argument into a ``MaskProvider``.

    Parameters
    ----------
    mask : None, np.ndarray, RasterSource or MaskProvider
        ``None`` selects the all-ones ``ConstantMask``.
    shape : Tuple[int, int]
        Dimensions of the raster the mask applies to.

    Returns
    -------
    MaskProvider

    Raises
    ------
    ValidationError
        If the mask dimensions differ from ``shape``.
    """
    if mask is None:
        return ConstantMask(shape)
    provider = mask if isinstance(mask, MaskProvider) else ArrayMask(mask)
    if tuple(provider.shape) != tuple(shape):
        raise ValidationError(
            f"Mask shape {tuple(provider.shape)} does not match "
            f"raster shape {tuple(shape)}"
        )
    return provider


def _as_numexpr_operand(array: np.ndarray) -> np.ndarray:
    """Upcast dtypes numexpr has no kernels for (small and unsigned ints)."""
    array = np.asarray(array)
    kind = array.dtype.kind
    if kind in 'iu' and array.dtype != np.int32:
        if kind == 'u' or array.dtype.itemsize > 4:
            return array.astype(np.int64)
        return array.astype(np.int32)
    if kind == 'f' and array.dtype.itemsize < 4:
        return array.astype(np.float32)
    return array
