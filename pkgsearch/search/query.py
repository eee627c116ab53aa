"""
Query validation and construction.

Raw CLI words are checked for the mistakes operators commonly make (an empty
term, or an unquoted ``>`` that the shell turned into a redirect) before the
version constraint is parsed and any catalog is touched.
"""

import logging
import re
from typing import Optional, Sequence

from pkgsearch.core.exceptions import AmbiguousRedirect, EmptyQuery
from pkgsearch.core.interfaces import OutputFormat, SearchQuery, Strategy
from pkgsearch.search.constraints import parse_constraint, split_query


logger = logging.getLogger(__name__)

# Comparators a shell could have split off as a redirect
BARE_COMPARATOR = re.compile(r"^(?:[<>]=?)?$")
TRAILING_COMPARATOR = re.compile(r"[<>]=?$")


def normalize_query(args: Sequence[str]) -> str:
    """
    Validate the raw search words and return a normalized query string.

    Args:
        args: Positional words from the command line.

    Returns:
        Words joined by single spaces with surrounding whitespace removed.

    Raises:
        EmptyQuery: If no search term was given.
        AmbiguousRedirect: If the query ends in a bare comparator.
    """
    query = " ".join(" ".join(arg.split()) for arg in args if arg and arg.strip())
    if not query:
        raise EmptyQuery()

    term, spec = split_query(query)
    if spec is not None and BARE_COMPARATOR.match(spec.strip()):
        raise AmbiguousRedirect(query)
    if spec is None and TRAILING_COMPARATOR.search(term.rstrip()):
        raise AmbiguousRedirect(query)
    if not term.strip():
        raise EmptyQuery(f"No package name given before the version in '{query}'")

    return query


def build_query(
    args: Sequence[str],
    strategy: Strategy = Strategy.MATCH,
    output_format: OutputFormat = OutputFormat.TEXT,
) -> SearchQuery:
    """
    Build a search query from raw CLI words.

    Args:
        args: Positional words from the command line.
        strategy: Name matching strategy from configuration.
        output_format: Requested output format.

    Returns:
        Immutable search query.

    Raises:
        UsageError: If the words do not form a valid query.
    """
    query = normalize_query(args)
    term, spec = split_query(query)
    constraint = parse_constraint(spec)

    logger.debug(f"Parsed query '{query}' into term '{term.strip()}' with constraint '{constraint}'")
    return SearchQuery(
        term=term.strip(),
        constraint=constraint,
        strategy=strategy,
        output_format=output_format,
        raw=query,
    )


def parse_term(term: str, strategy: Optional[Strategy] = None) -> SearchQuery:
    """Build a query from a single already-quoted term."""
    return build_query([term], strategy or Strategy.MATCH)
