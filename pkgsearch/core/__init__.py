"""Core components for pkgsearch."""

from .engine import SearchEngine
from .configuration import ConfigurationManager
from .interfaces import (
    OutputFormat,
    PackageRecord,
    RankedResult,
    RenderedOutput,
    SearchQuery,
    SearchSettings,
    Strategy
)
from .exceptions import (
    PkgSearchError,
    UsageError,
    EmptyQuery,
    AmbiguousRedirect,
    InvalidVersionSpec,
    ShowError,
    NoMatch,
    CatalogUnavailable,
    ConfigurationError
)

__all__ = [
    "SearchEngine",
    "ConfigurationManager",
    "OutputFormat",
    "PackageRecord",
    "RankedResult",
    "RenderedOutput",
    "SearchQuery",
    "SearchSettings",
    "Strategy",
    "PkgSearchError",
    "UsageError",
    "EmptyQuery",
    "AmbiguousRedirect",
    "InvalidVersionSpec",
    "ShowError",
    "NoMatch",
    "CatalogUnavailable",
    "ConfigurationError"
]
