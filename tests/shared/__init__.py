"""
Shared test module

Data models and constants used across the test suite.
"""

from .data_models import *
from .test_constants import *

__all__ = [
    # data models
    "MockUser",
    "MockComment",
    # constants
    "ASSERTION_MESSAGES",
    "CASE_EVENTS",
]
