"""
Package catalog access.

This module provides read-only, scoped access to the prebuilt package catalog.
"""

from .accessor import CatalogAccessor, CatalogLoader
from .schema import CatalogSchemaValidator

__all__ = [
    'CatalogAccessor',
    'CatalogLoader',
    'CatalogSchemaValidator'
]
