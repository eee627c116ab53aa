"""
Core interfaces for pkgsearch.

This module contains the core data models shared by the catalog, search and
presentation layers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from pkgsearch.search.constraints import VersionConstraint


class Strategy(Enum):
    """
    Breadth of name matching used when looking packages up in the catalog.
    """
    MATCH = "match"
    MATCH_NAME = "match-name"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "Strategy":
        """
        Resolve a configuration value to a strategy.

        Args:
            value: Configured value, or None for the default.

        Returns:
            The matching strategy.

        Raises:
            ValueError: If the value is not a known strategy.
        """
        if value is None or value == "":
            return cls.MATCH
        normalized = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(
            f"Unknown search strategy '{value}' "
            f"(expected one of: {', '.join(m.value for m in cls)})"
        )


class OutputFormat(Enum):
    """
    Output format for search results.
    """
    TEXT = "text"
    JSON = "json"


@dataclass(frozen=True)
class PackageRecord:
    """
    A single package version known to the catalog.
    """
    name: str
    input: str
    version: Optional[str] = None
    system: Optional[str] = None
    pname: Optional[str] = None
    description: Optional[str] = None
    license: Optional[str] = None
    position: int = 0

    @property
    def rel_path(self) -> List[str]:
        return self.name.split(".")

    @property
    def display_name(self) -> str:
        return self.name

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "pname": self.pname or self.rel_path[-1],
            "version": self.version,
            "system": self.system,
            "input": self.input,
            "description": self.description,
            "license": self.license,
            "rel_path": self.rel_path,
        }


@dataclass(frozen=True)
class SearchQuery:
    """
    A validated and parsed search request.
    """
    term: str
    constraint: "VersionConstraint"
    strategy: Strategy = Strategy.MATCH
    output_format: OutputFormat = OutputFormat.TEXT
    raw: str = ""


@dataclass(frozen=True)
class RankedResult:
    """
    A matched record together with its ranking attributes.
    """
    record: PackageRecord
    is_exact_version_match: bool = False

    @property
    def sort_key(self) -> Tuple[bool, int]:
        return (not self.is_exact_version_match, self.record.position)


@dataclass
class RenderedOutput:
    """
    Text destined for the two output channels plus the exit code.
    """
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


@dataclass
class SearchSettings:
    """
    Effective configuration for one invocation.
    """
    catalog: Optional[str] = None
    search_strategy: Strategy = Strategy.MATCH
    systems: List[str] = field(default_factory=list)
    disambiguate_inputs: bool = False
    input_separator: str = ":"
    request_timeout: int = 30
    config_path: Optional[str] = None
