"""
Test helpers package for the Symb0l API.

Reusable route sets and assertion utilities for the versioning tests.
"""

from .assertion_helpers import ResponseAssertions, VersionHeaderAssertions
from .route_sets import EchoRoutes

__all__ = [
    'ResponseAssertions',
    'VersionHeaderAssertions',
    'EchoRoutes',
]
