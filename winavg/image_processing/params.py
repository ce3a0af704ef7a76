# -*- coding: utf-8 -*-
"""
Tunable Parameter Annotations - Declarative parameter constraints via typing.Annotated.

Operators and transforms declare their parameters as class-body
``Annotated`` fields carrying ``Range`` and ``Desc`` markers. At class
definition time ``ImageProcessor.__init_subclass__`` turns these into
``ParamSpec`` objects and, unless the class defines its own ``__init__``,
generates a keyword-only constructor that validates every value.

Usage
-----
::

    from typing import Annotated
    from winavg.image_processing.params import Range, Desc

    class MyOperator(ImageProcessor):
        window_size: Annotated[int, Range(min=3, max=125),
                               Desc('Window side length (odd)')] = 3
        mask_expression: Annotated[str, Desc('Mask expression')] = None

A parameter whose default is ``None`` is optional: ``None`` passes
validation and the owning class decides what an absent value means.

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
import inspect
from typing import (
    Annotated,
    Any,
    Optional,
    Tuple,
    Union,
    get_origin,
    get_type_hints,
)

# WinAvg internal
from winavg.exceptions import ValidationError


class ParamMeta:
    """Marker base class for parameter metadata inside ``Annotated``."""


class Range(ParamMeta):
    """Inclusive numeric range constraint.

    Parameters
    ----------
    min : int or float, optional
        Minimum allowed value (inclusive).
    max : int or float, optional
        Maximum allowed value (inclusive).
    """

    __slots__ = ('min', 'max')

    def __init__(
        self,
        min: Optional[Union[int, float]] = None,
        max: Optional[Union[int, float]] = None,
    ) -> None:
        self.min = min
        self.max = max

    def __repr__(self) -> str:
        return f"Range(min={self.min!r}, max={self.max!r})"


class Desc(ParamMeta):
    """Human-readable parameter description."""

    __slots__ = ('text',)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Desc({self.text!r})"


_SENTINEL = object()


class ParamSpec:
    """Resolved specification for a single declared parameter.

    Attributes
    ----------
    name : str
        Keyword-argument name.
    param_type : type
        Expected runtime type. Generic aliases such as ``List[str]`` are
        reduced to their origin (``list``).
    default : Any
        Default value; meaningless when ``required`` is True.
    description : str
        Text from the ``Desc`` marker.
    min_value, max_value : int, float or None
        Inclusive bounds from the ``Range`` marker.
    """

    __slots__ = (
        'name', 'param_type', 'default', '_has_default',
        'description', 'min_value', 'max_value',
    )

    def __init__(
        self,
        name: str,
        param_type: type,
        default: Any,
        has_default: bool,
        description: str = '',
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None,
    ) -> None:
        self.name = name
        self.param_type = param_type
        self.default = default
        self._has_default = has_default
        self.description = description
        self.min_value = min_value
        self.max_value = max_value

    @property
    def required(self) -> bool:
        return not self._has_default

    @property
    def optional(self) -> bool:
        """Whether ``None`` is an accepted value."""
        return self._has_default and self.default is None

    def validate(self, value: Any) -> None:
        """Check *value* against the declared type and range.

        ``int`` is accepted for ``float`` parameters, ``bool`` is never
        accepted for ``int`` parameters, and bounds are inclusive.

        Raises
        ------
        TypeError
            If *value* has the wrong type.
        ValidationError
            If *value* is outside the declared range.
        """
        if value is None and self.optional:
            return

        expected = (int, float) if self.param_type is float else self.param_type
        if (
            self.param_type is not object
            and (not isinstance(value, expected)
                 or (self.param_type in (int, float)
                     and isinstance(value, bool)))
        ):
            raise TypeError(
                f"Parameter '{self.name}' must be "
                f"{self.param_type.__name__}, got {type(value).__name__}"
            )

        if self.min_value is not None and value < self.min_value:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is below minimum {self.min_value!r}"
            )
        if self.max_value is not None and value > self.max_value:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is above maximum {self.max_value!r}"
            )

    def __repr__(self) -> str:
        parts = (
            f"ParamSpec(name={self.name!r}, "
            f"param_type={self.param_type.__name__}, "
            f"required={self.required!r}"
        )
        if not self.required:
            parts += f", default={self.default!r}"
        if self.min_value is not None:
            parts += f", min_value={self.min_value!r}"
        if self.max_value is not None:
            parts += f", max_value={self.max_value!r}"
        return parts + ")"


def collect_param_specs(cls: type) -> Tuple[ParamSpec, ...]:
    """Collect the ``Annotated`` parameter declarations of *cls*.

    Only fields carrying at least one ``ParamMeta`` marker are collected.
    Parent-class parameters come first, each class in declaration order.
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return ()

    ordered = []
    for klass in reversed(cls.__mro__):
        for name in getattr(klass, '__annotations__', {}):
            if name in hints and name not in ordered:
                ordered.append(name)

    specs = []
    for name in ordered:
        hint = hints[name]
        if get_origin(hint) is not Annotated:
            continue
        metas = [m for m in hint.__metadata__ if isinstance(m, ParamMeta)]
        if not metas:
            continue

        base_type = hint.__args__[0]
        base_type = get_origin(base_type) or base_type
        range_meta = next((m for m in metas if isinstance(m, Range)), None)
        desc_meta = next((m for m in metas if isinstance(m, Desc)), None)

        default = getattr(cls, name, _SENTINEL)
        has_default = default is not _SENTINEL
        specs.append(ParamSpec(
            name=name,
            param_type=base_type,
            default=default if has_default else None,
            has_default=has_default,
            description=desc_meta.text if desc_meta else '',
            min_value=range_meta.min if range_meta else None,
            max_value=range_meta.max if range_meta else None,
        ))
    return tuple(specs)


def _make_init(param_specs: Tuple[ParamSpec, ...]):
    """Build a keyword-only ``__init__`` for *param_specs*.

    The generated constructor validates each value, stores it as an
    instance attribute and finally calls ``self.__post_init__()`` when
    the class defines one.
    """
    _specs = param_specs

    def __init__(self, **kwargs):
        unexpected = set(kwargs) - {s.name for s in _specs}
        if unexpected:
            raise TypeError(
                f"{type(self).__name__}() got unexpected "
                f"keyword arguments: {', '.join(sorted(unexpected))}"
            )
        for spec in _specs:
            if spec.name in kwargs:
                value = kwargs[spec.name]
            elif not spec.required:
                value = spec.default
            else:
                raise TypeError(
                    f"{type(self).__name__}() missing required "
                    f"keyword argument: '{spec.name}'"
                )
            spec.validate(value)
            object.__setattr__(self, spec.name, value)

        if hasattr(self, '__post_init__'):
            self.__post_init__()

    params = [inspect.Parameter('self', inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    for spec in _specs:
        params.append(inspect.Parameter(
            spec.name,
            inspect.Parameter.KEYWORD_ONLY,
            default=(inspect.Parameter.empty if spec.required
                     else spec.default),
        ))
    __init__.__signature__ = inspect.Signature(params)
    __init__.__qualname__ = '__init__'
    return __init__
