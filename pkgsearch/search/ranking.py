"""
Search result ranking and version collapsing.

This module orders matched records so that exact version matches come first
and otherwise keeps the catalog order, and reduces the versions of each
package to the single best one for listing.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from packaging import version as pkg_version

from pkgsearch.core.interfaces import PackageRecord, RankedResult
from pkgsearch.search.constraints import Exact, VersionConstraint, parse_version


logger = logging.getLogger(__name__)

# Packages are listed once per input, attribute path and system
GroupKey = Tuple[str, str, Optional[str]]

# Placeholder ordering slot for records whose version does not parse
UNPARSEABLE_VERSION = pkg_version.Version("0")


def version_sort_key(record: PackageRecord) -> Tuple[bool, pkg_version.Version]:
    """
    Sort key ordering records by version, unparseable versions lowest.
    """
    parsed = parse_version(record.version)
    return (parsed is not None, parsed or UNPARSEABLE_VERSION)


class SearchRanker:
    """
    Ranking and deduplication of matched catalog records.
    """

    def collapse_versions(self, records: Sequence[PackageRecord]) -> List[PackageRecord]:
        """
        Keep only the highest version of each package.

        Records are grouped by input, attribute path and system. Each group is
        represented by its highest parseable version (versioned records beat
        unversioned ones, the earliest record wins ties) and sits at the
        catalog position of the group's first record.

        Args:
            records: Matched records in catalog order.

        Returns:
            One record per group, in order of first appearance.
        """
        best: Dict[GroupKey, PackageRecord] = {}
        first_position: Dict[GroupKey, int] = {}

        for record in records:
            key = (record.input, record.name, record.system)
            if key not in best:
                best[key] = record
                first_position[key] = record.position
            elif version_sort_key(record) > version_sort_key(best[key]):
                best[key] = record

        collapsed = []
        for key in sorted(best, key=lambda k: first_position[k]):
            record = best[key]
            if record.position != first_position[key]:
                record = replace(record, position=first_position[key])
            collapsed.append(record)

        if len(collapsed) != len(records):
            logger.debug(f"Collapsed {len(records)} records into {len(collapsed)} packages")
        return collapsed

    def is_exact_match(self, record: PackageRecord, constraint: VersionConstraint) -> bool:
        return isinstance(constraint, Exact) and record.version == constraint.version

    def rank_results(
        self,
        records: Sequence[PackageRecord],
        constraint: VersionConstraint
    ) -> List[RankedResult]:
        """
        Rank records: exact version matches first, then catalog order.

        Args:
            records: Matched records.
            constraint: Constraint the records were filtered with.

        Returns:
            Ranked results; the sort is stable.
        """
        ranked = [
            RankedResult(record=record, is_exact_version_match=self.is_exact_match(record, constraint))
            for record in records
        ]
        ranked.sort(key=lambda result: result.sort_key)
        return ranked

    def sort_versions(self, records: Sequence[PackageRecord]) -> List[PackageRecord]:
        """
        Order records highest version first, unparseable versions last.

        Records with equal versions keep their catalog order.
        """
        return sorted(records, key=version_sort_key, reverse=True)
