# tests/fixtures/__init__.py
"""
Test fixtures module - sample fixture implementations
"""

from .sample_fixtures import register_sample_fixtures

__all__ = ["register_sample_fixtures"]
