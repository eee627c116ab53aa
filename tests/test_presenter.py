"""
Tests for result rendering.
"""

import io
import json

import pytest

from pkgsearch.core.exceptions import CatalogUnavailable, InvalidVersionSpec, NoMatch
from pkgsearch.core.interfaces import OutputFormat, PackageRecord, RankedResult, RenderedOutput, SearchSettings
from pkgsearch.search.presenter import (
    DEFAULT_DESCRIPTION, EXIT_FAILURE, EXIT_USAGE, HINT_LINE, SearchPresenter
)
from pkgsearch.search.query import build_query


def ranked(*records, exact=False):
    return [RankedResult(record=r, is_exact_version_match=exact) for r in records]


@pytest.fixture
def hello():
    return PackageRecord(
        name="hello", input="nixpkgs", version="2.12.1", system="x86_64-linux",
        description="Program that produces a familiar, friendly greeting", position=0,
    )


@pytest.fixture
def wayland():
    return PackageRecord(
        name="hello-wayland", input="nixpkgs", version="unstable-2023-09-28",
        description="Hello world Wayland client", position=1,
    )


class TestTextRendering:
    """Tests for the default text output."""

    def test_aligned_columns_and_hint(self, hello, wayland):
        rendered = SearchPresenter().render(ranked(hello, wayland), build_query(["hello"]))
        assert rendered.stdout == (
            "hello          Program that produces a familiar, friendly greeting\n"
            "hello-wayland  Hello world Wayland client\n"
        )
        assert rendered.stderr == HINT_LINE + "\n"
        assert rendered.exit_code == 0

    def test_missing_description(self):
        record = PackageRecord(name="cowsay", input="nixpkgs")
        rendered = SearchPresenter().render(ranked(record), build_query(["cowsay"]))
        assert rendered.stdout == f"cowsay  {DEFAULT_DESCRIPTION}\n"

    def test_multiline_description_is_flattened(self):
        record = PackageRecord(name="ripgrep", input="nixpkgs", description="fast\ngrep")
        rendered = SearchPresenter().render(ranked(record), build_query(["ripgrep"]))
        assert rendered.stdout == "ripgrep  fast grep\n"

    def test_one_line_per_package(self, hello):
        darwin = PackageRecord(name="hello", input="nixpkgs", version="2.12.1",
                               system="aarch64-darwin", description=hello.description, position=3)
        rendered = SearchPresenter().render(ranked(hello, darwin), build_query(["hello"]))
        assert rendered.stdout.count("\n") == 1

    def test_no_match_non_interactive_goes_to_stdout(self):
        rendered = SearchPresenter(interactive=False).render([], build_query(["surely_doesnt_exist"]))
        assert rendered.stdout == "No packages matched this search term: surely_doesnt_exist\n"
        assert rendered.stderr == ""
        assert rendered.exit_code == 0

    def test_no_match_interactive_goes_to_stderr(self):
        rendered = SearchPresenter(interactive=True).render([], build_query(["surely_doesnt_exist"]))
        assert rendered.stdout == ""
        assert "surely_doesnt_exist" in rendered.stderr


class TestInputDisambiguation:
    """Tests for labelling packages defined by several inputs."""

    def records(self, hello):
        unstable = PackageRecord(name="hello", input="nixpkgs-unstable", version="2.12.1",
                                 description=hello.description, position=5)
        rg = PackageRecord(name="ripgrep", input="nixpkgs", description="grep", position=2)
        return ranked(hello, rg, unstable)

    def test_disabled_keeps_first_input(self, hello):
        rendered = SearchPresenter().render(self.records(hello), build_query(["hello"]))
        lines = rendered.stdout.splitlines()
        assert [line.split()[0] for line in lines] == ["hello", "ripgrep"]

    def test_enabled_prefixes_shared_packages(self, hello):
        settings = SearchSettings(disambiguate_inputs=True)
        rendered = SearchPresenter(settings).render(self.records(hello), build_query(["hello"]))
        labels = [line.split()[0] for line in rendered.stdout.splitlines()]
        assert labels == ["nixpkgs:hello", "ripgrep", "nixpkgs-unstable:hello"]

    def test_custom_separator(self, hello):
        settings = SearchSettings(disambiguate_inputs=True, input_separator="#")
        rendered = SearchPresenter(settings).render(self.records(hello), build_query(["hello"]))
        assert rendered.stdout.startswith("nixpkgs#hello")


class TestJsonRendering:
    """Tests for --json output."""

    def test_json_document(self, hello):
        query = build_query(["hello@2.12.1"], output_format=OutputFormat.JSON)
        rendered = SearchPresenter().render(ranked(hello, exact=True), query)
        payload = json.loads(rendered.stdout)
        assert payload == [{
            "name": "hello",
            "pname": "hello",
            "version": "2.12.1",
            "system": "x86_64-linux",
            "input": "nixpkgs",
            "description": "Program that produces a familiar, friendly greeting",
            "license": None,
            "rel_path": ["hello"],
            "exact": True,
        }]
        assert rendered.stderr == HINT_LINE + "\n"

    def test_empty_json(self):
        query = build_query(["nothing"], output_format=OutputFormat.JSON)
        rendered = SearchPresenter(interactive=True).render([], query)
        assert rendered.stdout == "[]\n"
        assert rendered.stderr == ""

    def test_json_keeps_every_record(self, hello):
        darwin = PackageRecord(name="hello", input="nixpkgs", version="2.12.1",
                               system="aarch64-darwin", position=3)
        query = build_query(["hello"], output_format=OutputFormat.JSON)
        payload = json.loads(SearchPresenter().render(ranked(hello, darwin), query).stdout)
        assert [item["system"] for item in payload] == ["x86_64-linux", "aarch64-darwin"]


class TestShowRendering:
    """Tests for the package detail view."""

    def versions(self, hello):
        older = [
            PackageRecord(name="hello", input="nixpkgs", version=v, description=hello.description)
            for v in ("2.12", "2.10")
        ]
        return [hello] + older

    def test_best_version(self, hello):
        rendered = SearchPresenter().render_show(self.versions(hello))
        assert rendered.stdout == (
            "hello - Program that produces a familiar, friendly greeting\n"
            "    hello - hello@2.12.1\n"
        )

    def test_all_versions(self, hello):
        rendered = SearchPresenter().render_show(self.versions(hello), show_all=True)
        assert rendered.stdout.splitlines()[1] == "    hello - hello@2.12.1, hello@2.12, hello@2.10"

    def test_unversioned_package(self):
        rendered = SearchPresenter().render_show([PackageRecord(name="cowsay", input="nixpkgs")])
        assert rendered.stdout == f"cowsay - {DEFAULT_DESCRIPTION}\n    cowsay - cowsay\n"


class TestErrorsAndSinks:
    """Tests for error rendering and output sinks."""

    def test_usage_error_exit_code(self):
        rendered = SearchPresenter().render_error(InvalidVersionSpec("~1", "unrecognized operator '~'"))
        assert rendered.exit_code == EXIT_USAGE
        assert rendered.stderr.startswith("Error: ")
        assert rendered.stdout == ""

    @pytest.mark.parametrize("error", [
        NoMatch("hello"),
        CatalogUnavailable("/missing.yaml", "cannot read catalog"),
    ])
    def test_other_errors_exit_code(self, error):
        assert SearchPresenter().render_error(error).exit_code == EXIT_FAILURE

    def test_write_routes_channels(self):
        out, err = io.StringIO(), io.StringIO()
        code = SearchPresenter().write(RenderedOutput(stdout="data\n", stderr="hint\n", exit_code=0), out, err)
        assert code == 0
        assert out.getvalue() == "data\n"
        assert err.getvalue() == "hint\n"

    def test_write_returns_exit_code(self):
        out, err = io.StringIO(), io.StringIO()
        code = SearchPresenter().write(RenderedOutput(stderr="Error: boom\n", exit_code=2), out, err)
        assert code == 2
        assert out.getvalue() == ""
