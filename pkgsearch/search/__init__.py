"""
Package search functionality.

This module provides query validation, version constraint parsing, matching,
ranking and rendering of search results.
"""

from .constraints import (
    Comparator, Exact, NoConstraint, Prefix, Range, VersionConstraint, parse_constraint
)
from .matcher import Matcher, filter_by_constraint
from .presenter import SearchPresenter
from .query import build_query, normalize_query
from .ranking import SearchRanker

__all__ = [
    'Comparator',
    'Exact',
    'NoConstraint',
    'Prefix',
    'Range',
    'VersionConstraint',
    'parse_constraint',
    'Matcher',
    'filter_by_constraint',
    'SearchPresenter',
    'build_query',
    'normalize_query',
    'SearchRanker'
]
