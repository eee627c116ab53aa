"""
pkgsearch - search a prebuilt package catalog from the command line.

This package locates packages by name, filters them with version constraints
such as ``hello@2.x`` or ``node@>=16``, ranks the matches and renders them
as text lines or JSON.
"""

__version__ = "0.1.0"

from .core.engine import SearchEngine
from .core.exceptions import PkgSearchError, UsageError, CatalogUnavailable, ConfigurationError

__all__ = [
    "SearchEngine",
    "PkgSearchError",
    "UsageError",
    "CatalogUnavailable",
    "ConfigurationError"
]
