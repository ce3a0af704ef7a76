# -*- coding: utf-8 -*-
"""
Processor Versioning Tests - Version and tag decorators.

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

import warnings

import pytest

from winavg.image_processing.base import ImageTransform
from winavg.image_processing.filters import WindowAverageFilter
from winavg.image_processing.versioning import processor_tags, processor_version
from winavg.operator import WindowAverageOperator
from winavg.vocabulary import ProcessorCategory


class TestProcessorVersion:
    """Test @processor_version."""

    def test_stamps_version_on_class(self):
        @processor_version('2.1.0')
        class Identity(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        assert Identity.__processor_version__ == '2.1.0'

    def test_version_from_package_metadata(self):
        @processor_version()
        class Identity(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        assert isinstance(Identity.__processor_version__, str)
        assert Identity.__processor_version__

    def test_warns_for_undecorated_class_once(self):
        class Unversioned(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            Unversioned()
            Unversioned()
        messages = [str(w.message) for w in caught]
        assert sum('does not declare a processor version' in m
                   for m in messages) == 1

    def test_shipped_processors_are_versioned(self):
        assert WindowAverageOperator.__processor_version__ == '0.2.0'
        assert WindowAverageFilter.__processor_version__ == '1.0.0'


class TestProcessorTags:
    """Test @processor_tags."""

    def test_stamps_tags(self):
        tags = WindowAverageOperator.__processor_tags__
        assert tags['category'] is ProcessorCategory.STATISTICS
        assert 'window' in tags['description']

    def test_bad_category_raises(self):
        with pytest.raises(TypeError, match="ProcessorCategory"):
            processor_tags(category='statistics')
