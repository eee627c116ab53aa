"""
Exceptions for pkgsearch.

This module contains the exception hierarchy for pkgsearch operations.
"""


class PkgSearchError(Exception):
    """Base exception for pkgsearch operations."""
    pass


class UsageError(PkgSearchError):
    """Raised when the caller supplied a malformed query."""
    pass


class EmptyQuery(UsageError):
    """Raised when no search term was given."""

    def __init__(self, message: str = "No search term given. Usage: pkgsearch search <term>[@<version>]"):
        super().__init__(message)


class AmbiguousRedirect(UsageError):
    """Raised when a query looks like the shell consumed an unquoted comparator."""

    def __init__(self, query: str):
        self.query = query
        package = query.split('@', 1)[0].rstrip('<>=') or "<package>"
        super().__init__(
            f"Search term '{query}' ends with a bare version operator. "
            f"If you used '>' or '<' the shell may have treated it as a redirect; "
            f"try quoting the search term, e.g. '{package}@>1'"
        )


class InvalidVersionSpec(UsageError):
    """Raised when the version constraint after '@' cannot be parsed."""

    def __init__(self, fragment: str, reason: str = "unrecognized version constraint"):
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"Invalid version constraint '{fragment}': {reason}")


class ShowError(UsageError):
    """Raised when a show term is malformed."""
    pass


class NoMatch(PkgSearchError):
    """Raised when a lookup that requires a result found nothing."""

    def __init__(self, term: str):
        self.term = term
        super().__init__(f"no packages matched this search term: {term}")


class CatalogUnavailable(PkgSearchError):
    """Raised when the package catalog cannot be opened or read."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Catalog unavailable ({source}): {message}")


class ConfigurationError(PkgSearchError):
    """Raised when configuration is invalid."""
    pass
