"""
Test utilities for zderive.

This package contains shared testing utilities to help write
better, more maintainable tests.
"""

from .memory_utils import assert_no_object_leak, count_types, is_collected
from .recorder import Recorder

__all__ = [
    "assert_no_object_leak",
    "count_types",
    "is_collected",
    "Recorder",
]
