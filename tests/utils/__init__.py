"""
Test utilities

Assertions over execution handle result trees.
"""

from .assertions import *

__all__ = [
    "assert_failed",
    "assert_passed",
    "assert_subunit_names",
    "get_subunit",
]
