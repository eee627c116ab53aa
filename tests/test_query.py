"""
Tests for query validation and construction.
"""

import pytest

from pkgsearch.core.exceptions import AmbiguousRedirect, EmptyQuery, InvalidVersionSpec, UsageError
from pkgsearch.core.interfaces import OutputFormat, Strategy
from pkgsearch.search.constraints import Comparator, NoConstraint, Prefix, Range
from pkgsearch.search.query import build_query, normalize_query


class TestNormalizeQuery:
    """Tests for normalize_query."""

    @pytest.mark.parametrize("args", [[], [""], ["   "], ["", "  "]])
    def test_empty_query(self, args):
        with pytest.raises(EmptyQuery):
            normalize_query(args)

    def test_missing_package_name(self):
        with pytest.raises(EmptyQuery) as exc_info:
            normalize_query(["@2.x"])
        assert "@2.x" in str(exc_info.value)

    @pytest.mark.parametrize("query", ["hello@", "hello@>", "hello@>=", "hello@<", "hello>", "hello@ "])
    def test_ambiguous_redirect(self, query):
        with pytest.raises(AmbiguousRedirect) as exc_info:
            normalize_query([query])
        message = str(exc_info.value)
        assert "try quoting" in message
        assert query.strip() in message

    def test_ambiguous_redirect_is_usage_error(self):
        with pytest.raises(UsageError):
            normalize_query(["hello@"])

    def test_words_are_joined(self):
        assert normalize_query(["hello@>1", "<3"]) == "hello@>1 <3"

    def test_whitespace_is_collapsed(self):
        assert normalize_query(["  hello@>1    <3  "]) == "hello@>1 <3"

    def test_multiple_at(self):
        with pytest.raises(InvalidVersionSpec):
            normalize_query(["hello@1@2"])

    def test_lone_equals_is_invalid_version(self):
        assert normalize_query(["hello@="]) == "hello@="
        with pytest.raises(InvalidVersionSpec) as exc_info:
            build_query(["hello@="])
        assert not isinstance(exc_info.value, AmbiguousRedirect)

    def test_redirect_example_without_package_name(self):
        with pytest.raises(AmbiguousRedirect) as exc_info:
            normalize_query(["@>"])
        message = str(exc_info.value)
        assert "'<package>@>1'" in message
        assert "hello" not in message


class TestBuildQuery:
    """Tests for build_query."""

    def test_plain_term(self):
        query = build_query(["hello"])
        assert query.term == "hello"
        assert query.constraint == NoConstraint()
        assert query.strategy == Strategy.MATCH
        assert query.output_format == OutputFormat.TEXT
        assert query.raw == "hello"

    def test_prefix_constraint(self):
        query = build_query(["hello@2.x"], Strategy.MATCH_NAME, OutputFormat.JSON)
        assert query.term == "hello"
        assert query.constraint == Prefix((2,))
        assert query.strategy == Strategy.MATCH_NAME
        assert query.output_format == OutputFormat.JSON

    def test_range_constraint(self):
        query = build_query(["hello@>1 <3"])
        assert query.constraint == Range(Comparator(">", "1"), Comparator("<", "3"))

    def test_invalid_constraint(self):
        with pytest.raises(InvalidVersionSpec) as exc_info:
            build_query(["hello@~1.2"])
        assert "~1.2" in str(exc_info.value)

    def test_query_is_immutable(self):
        query = build_query(["hello"])
        with pytest.raises(AttributeError):
            query.term = "other"
