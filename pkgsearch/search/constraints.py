"""
Version constraint parsing and evaluation.

This module turns the text after the ``@`` in a search query into a
structured constraint and evaluates record versions against it using
``packaging`` version ordering.
"""

import abc
import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from packaging import version as pkg_version

from pkgsearch.core.exceptions import InvalidVersionSpec


# Versions written by the user: dotted numbers only
VERSION_LITERAL = re.compile(r"^\d+(?:\.\d+)*$")

WILDCARD_VERSION = re.compile(r"^(\d+(?:\.\d+)*)((?:\.[xX*])+)$")
COMPARATOR_TOKEN = re.compile(r"^(>=|<=|>|<)(.*)$")
UNESCAPED_AT = re.compile(r"(?<!\\)@")

# A bare version with this many components is an exact release
FULL_RELEASE_COMPONENTS = 3

OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}
LOWER_BOUND_OPERATORS = (">", ">=")
UPPER_BOUND_OPERATORS = ("<", "<=")


def parse_version(version: Optional[str]) -> Optional[pkg_version.Version]:
    """
    Parse a catalog version string.

    A leading ``v`` is accepted and pre-release suffixes such as ``-rc1``
    sort below the final release. Missing trailing components count as
    zero, so ``2`` equals ``2.0.0``.

    Args:
        version: Version string from a catalog record.

    Returns:
        Parsed version, or None if the version is missing or unparseable.
    """
    if not version:
        return None
    try:
        return pkg_version.Version(version.strip())
    except pkg_version.InvalidVersion:
        return None


class VersionConstraint(abc.ABC):
    """
    Base class for the closed set of version constraint variants.
    """

    @abc.abstractmethod
    def matches(self, version: Optional[str]) -> bool:
        """
        Check whether a record version satisfies this constraint.

        Args:
            version: Version string of a catalog record, possibly None.

        Returns:
            True if the version satisfies the constraint.
        """
        pass

    @property
    def is_constrained(self) -> bool:
        return True


@dataclass(frozen=True)
class NoConstraint(VersionConstraint):
    """
    The query carried no ``@`` suffix.

    Renders as the empty string, so a query string rebuilt from it has no
    suffix and parses back to ``NoConstraint``.
    """

    def matches(self, version: Optional[str]) -> bool:
        return True

    @property
    def is_constrained(self) -> bool:
        return False

    def __str__(self) -> str:
        return ""


@dataclass(frozen=True)
class Exact(VersionConstraint):
    """Version string must equal ``version`` verbatim."""
    version: str

    def matches(self, version: Optional[str]) -> bool:
        return version is not None and version == self.version

    def __str__(self) -> str:
        return f"={self.version}"


@dataclass(frozen=True)
class Prefix(VersionConstraint):
    """Leading version components must equal ``components``."""
    components: Tuple[int, ...]

    def matches(self, version: Optional[str]) -> bool:
        parsed = parse_version(version)
        if parsed is None:
            return False
        return parsed.release[:len(self.components)] == self.components

    def __str__(self) -> str:
        if not self.components:
            return "*"
        return ".".join(str(part) for part in self.components) + ".x"


@dataclass(frozen=True)
class Comparator(VersionConstraint):
    """Ordered comparison against a single version."""
    op: str
    version: str

    @property
    def bound(self) -> pkg_version.Version:
        return pkg_version.Version(self.version)

    def matches(self, version: Optional[str]) -> bool:
        parsed = parse_version(version)
        if parsed is None:
            return False
        return OPERATORS[self.op](parsed, self.bound)

    def __str__(self) -> str:
        return f"{self.op}{self.version}"


@dataclass(frozen=True)
class Range(VersionConstraint):
    """Conjunction of a lower and an upper comparator."""
    lower: Comparator
    upper: Comparator

    def matches(self, version: Optional[str]) -> bool:
        return self.lower.matches(version) and self.upper.matches(version)

    def __str__(self) -> str:
        return f"{self.lower} {self.upper}"


def split_query(query: str) -> Tuple[str, Optional[str]]:
    """
    Split a query into its term and the text after the first unescaped ``@``.

    A backslash-escaped ``\\@`` is a literal part of the term.

    Args:
        query: Normalized query string.

    Returns:
        Tuple of (term, constraint text or None).

    Raises:
        InvalidVersionSpec: If the query contains more than one unescaped ``@``.
    """
    parts = UNESCAPED_AT.split(query)
    if len(parts) > 2:
        raise InvalidVersionSpec(query, "only one '@' may separate the package from its version")
    term = parts[0].replace("\\@", "@")
    spec = parts[1] if len(parts) == 2 else None
    return term, spec


def parse_constraint(spec: Optional[str]) -> VersionConstraint:
    """
    Parse the text after ``@`` into a version constraint.

    Accepted forms are ``=1.2.3``, ``1.2.3``, ``v2``, ``2.x``, ``>=1``
    and a lower/upper comparator pair such as ``>1 <3``.

    Args:
        spec: Constraint text, or None when the query had no ``@``.

    Returns:
        The parsed constraint.

    Raises:
        InvalidVersionSpec: If the text is not in the accepted grammar.
    """
    if spec is None:
        return NoConstraint()

    tokens = spec.split()
    if not tokens:
        raise InvalidVersionSpec(spec, "missing version after '@'")
    if len(tokens) == 1:
        return _parse_single(tokens[0])
    if len(tokens) == 2:
        return _parse_range(spec, tokens[0], tokens[1])
    raise InvalidVersionSpec(spec, "a range takes exactly two comparators, e.g. '>1 <3'")


def _parse_single(token: str) -> VersionConstraint:
    comparator = COMPARATOR_TOKEN.match(token)
    if comparator:
        op, rest = comparator.groups()
        return Comparator(op, _parse_literal(rest, token))

    if token.startswith("="):
        return Exact(_parse_literal(token[1:], token))

    bare = token[1:] if token.startswith("v") else token
    if bare in ("x", "X", "*"):
        return Prefix(())

    wildcard = WILDCARD_VERSION.match(bare)
    if wildcard:
        return Prefix(tuple(int(part) for part in wildcard.group(1).split(".")))

    literal = _parse_literal(bare, token)
    components = literal.split(".")
    if len(components) >= FULL_RELEASE_COMPONENTS:
        return Exact(literal)
    return Prefix(tuple(int(part) for part in components))


def _parse_range(spec: str, first: str, second: str) -> Range:
    bounds = []
    for token in (first, second):
        constraint = _parse_single(token)
        if not isinstance(constraint, Comparator):
            raise InvalidVersionSpec(spec, f"'{token}' is not a comparator; ranges look like '>1 <3'")
        bounds.append(constraint)

    lower, upper = bounds
    if lower.op in UPPER_BOUND_OPERATORS and upper.op in LOWER_BOUND_OPERATORS:
        lower, upper = upper, lower
    if lower.op not in LOWER_BOUND_OPERATORS or upper.op not in UPPER_BOUND_OPERATORS:
        raise InvalidVersionSpec(spec, "a range needs one lower ('>', '>=') and one upper ('<', '<=') bound")
    return Range(lower, upper)


def _parse_literal(text: str, fragment: str) -> str:
    if text.startswith("v"):
        text = text[1:]
    if not text:
        raise InvalidVersionSpec(fragment, "missing version number")
    if "" in text.split("."):
        raise InvalidVersionSpec(fragment, "empty version component")
    if not VERSION_LITERAL.match(text):
        leading = re.match(r"^[^\d]+", text)
        if leading:
            raise InvalidVersionSpec(fragment, f"unrecognized operator '{leading.group(0)}'")
        raise InvalidVersionSpec(fragment, "versions must be dotted numbers")
    return text
