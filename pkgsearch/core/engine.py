"""
Search engine for pkgsearch.

This module wires the search pipeline together: the catalog is opened for
the duration of a single call, candidates are matched and filtered, then
collapsed and ranked.
"""

import logging
from typing import List, Optional

from pkgsearch.catalog.accessor import CatalogAccessor, CatalogLoader
from pkgsearch.core.exceptions import NoMatch, ShowError
from pkgsearch.core.interfaces import PackageRecord, RankedResult, SearchQuery, SearchSettings, Strategy
from pkgsearch.search.matcher import Matcher, filter_by_constraint
from pkgsearch.search.query import parse_term
from pkgsearch.search.ranking import SearchRanker


logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Runs searches and package detail lookups against the configured catalog.
    """

    def __init__(self, settings: Optional[SearchSettings] = None, loader: Optional[CatalogLoader] = None):
        """
        Initialize the search engine.

        Args:
            settings: Effective settings. If None, uses defaults.
            loader: Catalog loader. If None, one is created from the settings.
        """
        self.settings = settings or SearchSettings()
        self.loader = loader or CatalogLoader(request_timeout=self.settings.request_timeout)
        self.matcher = Matcher()
        self.ranker = SearchRanker()

    def _open_catalog(self):
        return CatalogAccessor.open(
            self.settings.catalog,
            systems=self.settings.systems or None,
            loader=self.loader,
        )

    def search(self, query: SearchQuery) -> List[RankedResult]:
        """
        Search the catalog.

        Args:
            query: Validated search query.

        Returns:
            Ranked results; empty when nothing matched.

        Raises:
            CatalogUnavailable: If the catalog cannot be opened.
        """
        logger.info(f"Searching for '{query.raw or query.term}' using strategy {query.strategy.value}")

        with self._open_catalog() as catalog:
            matched = self.matcher.match(catalog, query)

        collapsed = self.ranker.collapse_versions(matched)
        ranked = self.ranker.rank_results(collapsed, query.constraint)

        logger.info(f"Found {len(ranked)} results for '{query.term}'")
        return ranked

    def show(self, term: str, separator: Optional[str] = None) -> List[PackageRecord]:
        """
        Get every version of one package, best version first.

        Args:
            term: ``package``, ``input<separator>package``, optionally followed
                by ``@<version constraint>``.
            separator: Separator between input and package. Defaults to the
                configured input separator.

        Returns:
            Records of the package sorted highest version first.

        Raises:
            ShowError: If the term has too many separators.
            NoMatch: If no package matches.
            UsageError: If the version constraint is invalid.
            CatalogUnavailable: If the catalog cannot be opened.
        """
        separator = separator or self.settings.input_separator
        parts = term.split(separator)
        if len(parts) == 1:
            input_name, package = None, parts[0]
        elif len(parts) == 2:
            input_name, package = parts
        else:
            raise ShowError(
                f"Invalid package '{term}': expected <package> or <input>{separator}<package>"
            )

        query = parse_term(package, Strategy.MATCH_NAME)
        logger.debug(f"Showing '{query.term}' from input {input_name or '<any>'}")

        with self._open_catalog() as catalog:
            records = catalog.get(query.term, input_name)
            if not records:
                records = self._first_package(catalog.lookup(query.term, Strategy.MATCH_NAME), input_name)

        records = filter_by_constraint(records, query.constraint)
        if not records:
            raise NoMatch(term)
        return self.ranker.sort_versions(records)

    def _first_package(self, records: List[PackageRecord], input_name: Optional[str]) -> List[PackageRecord]:
        if input_name is not None:
            records = [r for r in records if r.input == input_name]
        if not records:
            return []
        name = records[0].name
        return [r for r in records if r.name == name]
