# -*- coding: utf-8 -*-
"""
WinAvg Exception Hierarchy - Domain-specific exceptions for WinAvg operations.

Provides a small exception hierarchy that lets callers catch WinAvg errors
distinctly from Python built-in exceptions. All WinAvg exceptions subclass
both ``WinAvgError`` and the appropriate built-in exception so existing
``except ValueError`` handlers keep working.

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


class WinAvgError(Exception):
    """Base exception for all WinAvg errors."""


class ValidationError(WinAvgError, ValueError):
    """Invalid input data, parameters, or configuration.

    Raised for even or out-of-range window sizes, missing or unknown band
    names, band size mismatches, and mask expressions that cannot be
    evaluated against the source product. Always raised before any pixel
    is computed.
    """


class ProcessorError(WinAvgError, RuntimeError):
    """Processing failure after a processor has been configured.

    Raised when a request cannot be served, e.g. a tile is requested for a
    target band the operator never produced.
    """


class DependencyError(WinAvgError, ImportError):
    """Missing optional dependency required for a specific module.

    Raised when a reader or writer needs a package (rasterio) that is
    not installed.
    """
