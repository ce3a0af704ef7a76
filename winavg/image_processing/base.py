# -*- coding: utf-8 -*-
"""
Image Processing Base Classes - Abstract interfaces for image processors.

``ImageProcessor`` is the common base of every operator and transform. It
warns once per class when no ``@processor_version`` was declared, turns
``typing.Annotated`` class fields into validated constructor parameters,
resolves per-call parameter overrides, and relays progress to an optional
``progress_callback``. ``ImageTransform`` is the array-in/array-out ABC
and ``BandwiseTransformMixin`` lifts a 2D implementation to band stacks.

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
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

# Third-party
import numpy as np

# WinAvg internal
from winavg.image_processing.params import ParamSpec, collect_param_specs, _make_init

logger = logging.getLogger(__name__)


class ImageProcessor(ABC):
    """
    Common base class for all image processors.

    **Version checking**: Concrete subclasses without
    ``@processor_version('x.y.z')`` trigger a ``UserWarning`` at first
    instantiation. The check runs in ``__new__`` so class decorators have
    already been applied.

    **Declared parameters**: ``Annotated`` class-body fields using the
    markers of :mod:`winavg.image_processing.params` are collected into
    ``__param_specs__``; an ``__init__`` is generated unless the subclass
    defines its own. ``_resolve_params(kwargs)`` merges instance values
    with per-call overrides and validates them.
    """

    _version_warned_classes: set = set()

    __param_specs__: Tuple[ParamSpec, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__param_specs__ = collect_param_specs(cls)
        if cls.__param_specs__ and '__init__' not in cls.__dict__:
            cls.__init__ = _make_init(cls.__param_specs__)

    def __new__(cls, *args: Any, **kwargs: Any) -> 'ImageProcessor':
        if cls not in ImageProcessor._version_warned_classes:
            ImageProcessor._version_warned_classes.add(cls)
            if (
                not getattr(cls, '__processor_version__', None)
                and not getattr(cls, '__abstractmethods__', None)
            ):
                warnings.warn(
                    f"{cls.__qualname__} does not declare a processor version. "
                    f"Use @processor_version('x.y.z') to declare one.",
                    UserWarning,
                    stacklevel=2,
                )
        logger.debug("Instantiating %s", cls.__qualname__)
        return super().__new__(cls)

    def _resolve_params(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge instance values with runtime *kwargs* overrides.

        Parameters
        ----------
        kwargs : Dict[str, Any]
            Runtime keyword arguments. Keys that are not declared
            parameters (``progress_callback``, ``mask``) are ignored.

        Returns
        -------
        Dict[str, Any]
            ``{param_name: resolved_value}`` for every declared param.

        Raises
        ------
        TypeError
            If a value has the wrong type.
        ValidationError
            If a value violates its range constraint.
        """
        resolved: Dict[str, Any] = {}
        for spec in type(self).__param_specs__:
            value = kwargs.get(spec.name, getattr(self, spec.name))
            spec.validate(value)
            resolved[spec.name] = value
        return resolved

    def _report_progress(
        self, kwargs: Dict[str, Any], fraction: float
    ) -> None:
        """Call ``kwargs['progress_callback']`` with *fraction*, if given.

        Parameters
        ----------
        kwargs : Dict[str, Any]
            The keyword arguments passed to the processor method.
        fraction : float
            Progress fraction in [0.0, 1.0].
        """
        cb = kwargs.get('progress_callback')
        if cb is not None:
            cb(float(fraction))


class ImageTransform(ImageProcessor):
    """
    Abstract base class for array-to-array transforms.

    Subclasses implement ``apply`` on numpy arrays.
    """

    @abstractmethod
    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """
        Apply the transform to a source image array.

        Parameters
        ----------
        source : np.ndarray
            Input image, ``(rows, cols)`` or ``(bands, rows, cols)``.

        Returns
        -------
        np.ndarray
            Transformed image.
        """
        ...


class BandwiseTransformMixin:
    """Mixin that applies a 2D transform to each band of a 3D stack.

    Subclasses inherit from both the mixin and ``ImageTransform`` and
    implement ``_apply_2d``::

        class MyFilter(BandwiseTransformMixin, ImageTransform):
            def _apply_2d(self, source, **kwargs):
                ...

    A ``(bands, rows, cols)`` input is processed band by band and the
    per-band outputs are stacked along a new leading axis. Keyword
    arguments are forwarded unchanged to every band.
    """

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        if source.ndim == 3:
            return np.stack(
                [self._apply_2d(source[b], **kwargs)
                 for b in range(source.shape[0])]
            )
        return self._apply_2d(source, **kwargs)

    @abstractmethod
    def _apply_2d(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """Apply the transform to a single ``(rows, cols)`` band."""
        ...
