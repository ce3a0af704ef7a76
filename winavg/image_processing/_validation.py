# -*- coding: utf-8 -*-
"""
Window Validation Helpers - Shared window size checks.

The engine, the in-memory filter and the operator all enforce the same
constraint on the averaging window: an odd integer side length of at
least 3.

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
import numbers

# WinAvg internal
from winavg.exceptions import ValidationError


def validate_window_size(window_size: int, name: str = 'window_size') -> None:
    """Validate that a window size is an odd integer >= 3.

    Parameters
    ----------
    window_size : int
        The window side length to validate.
    name : str
        Parameter name for error messages. Default ``'window_size'``.

    Raises
    ------
    ValidationError
        If ``window_size`` is not an integer, is less than 3, or is even.
    """
    if (isinstance(window_size, bool)
            or not isinstance(window_size, numbers.Integral)):
        raise ValidationError(
            f"{name} must be an integer, got {type(window_size).__name__}"
        )
    if window_size < 3:
        raise ValidationError(
            f"{name} must be >= 3, got {window_size}"
        )
    if window_size % 2 == 0:
        raise ValidationError(
            f"{name} must be odd, got {window_size}"
        )
