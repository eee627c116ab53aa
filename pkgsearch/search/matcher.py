"""
Candidate selection and version filtering.
"""

import logging
from typing import List, Sequence

from pkgsearch.catalog.accessor import CatalogAccessor
from pkgsearch.core.interfaces import PackageRecord, SearchQuery
from pkgsearch.search.constraints import VersionConstraint


logger = logging.getLogger(__name__)


def filter_by_constraint(
    records: Sequence[PackageRecord],
    constraint: VersionConstraint
) -> List[PackageRecord]:
    """
    Keep the records whose version satisfies a constraint.

    Without a constraint every record passes in its original order. With one,
    records whose version is missing or unparseable are dropped.

    Args:
        records: Candidate records in catalog order.
        constraint: Parsed version constraint.

    Returns:
        Filtered records in their original order.
    """
    if not constraint.is_constrained:
        return list(records)
    return [record for record in records if constraint.matches(record.version)]


class Matcher:
    """
    Selects candidate records for a query from an opened catalog.
    """

    def match(self, catalog: CatalogAccessor, query: SearchQuery) -> List[PackageRecord]:
        """
        Look up candidates by name and filter them by version.

        Args:
            catalog: Opened catalog accessor.
            query: Parsed search query.

        Returns:
            Matching records in catalog order.
        """
        candidates = catalog.lookup(query.term, query.strategy)
        matched = filter_by_constraint(candidates, query.constraint)

        if query.constraint.is_constrained:
            logger.debug(
                f"Constraint '{query.constraint}' kept {len(matched)} of {len(candidates)} candidates"
            )
        return matched
