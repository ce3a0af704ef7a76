# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for the WinAvg package.

Single source of truth for the controlled vocabularies used when tagging
processors and selecting output writers.

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

from enum import Enum


class ProcessorCategory(Enum):
    """Processing categories for processor tagging."""

    FILTERS = "filters"
    MASKING = "masking"
    STATISTICS = "statistics"


class OutputFormat(Enum):
    """Supported output file formats for product writing.

    Used by the operator and the command line to select the appropriate
    ``ImageWriter`` implementation.
    """

    GEOTIFF = "geotiff"
    NUMPY = "numpy"
