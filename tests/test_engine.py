"""
Tests for the search engine.
"""

import unittest
from unittest.mock import patch

import pytest
import yaml

from pkgsearch.core.engine import SearchEngine
from pkgsearch.core.exceptions import CatalogUnavailable, NoMatch, ShowError, UsageError
from pkgsearch.core.interfaces import SearchSettings, Strategy
from pkgsearch.search.query import build_query
from tests.fixtures.sample_data import SAMPLE_CATALOG


class TestSearchEngineSearch:
    """Tests for SearchEngine.search."""

    def test_versions_are_collapsed(self, settings):
        results = SearchEngine(settings).search(build_query(["hello"]))
        assert [(r.record.name, r.record.version) for r in results] == [
            ("hello", "2.12.1"),
            ("hello-wayland", "unstable-2023-09-28"),
        ]

    def test_prefix_constraint(self, settings):
        results = SearchEngine(settings).search(build_query(["hello@2.x"]))
        assert [r.record.version for r in results] == ["2.12.1"]

    def test_range_constraint(self, settings):
        results = SearchEngine(settings).search(build_query(["hello@>1 <3"]))
        assert [r.record.version for r in results] == ["2.12.1"]

    def test_upper_bound_constraint(self, settings):
        results = SearchEngine(settings).search(build_query(["hello@<2.11"]))
        assert [r.record.version for r in results] == ["2.10"]

    def test_exact_constraint_is_flagged(self, settings):
        results = SearchEngine(settings).search(build_query(["hello@=2.12"]))
        assert [r.record.version for r in results] == ["2.12"]
        assert results[0].is_exact_version_match

    def test_no_results(self, settings):
        assert SearchEngine(settings).search(build_query(["surely_doesnt_exist"])) == []

    def test_name_strategy_narrows_results(self, settings):
        engine = SearchEngine(settings)
        broad = engine.search(build_query(["node"], Strategy.MATCH))
        narrow = engine.search(build_query(["node"], Strategy.MATCH_NAME))
        assert len(broad) == 4
        assert narrow == []

    def test_sharded_catalog(self, catalog_dir):
        engine = SearchEngine(SearchSettings(catalog=str(catalog_dir)))
        results = engine.search(build_query(["ripgrep"]))
        assert [(r.record.input, r.record.system, r.record.version) for r in results] == [
            ("nixpkgs", "x86_64-linux", "14.1.0"),
            ("nixpkgs", "aarch64-darwin", "14.1.0"),
            ("nixpkgs-unstable", "x86_64-linux", "14.1.1"),
        ]

    def test_systems_setting(self, catalog_file):
        engine = SearchEngine(SearchSettings(catalog=str(catalog_file), systems=["aarch64-darwin"]))
        results = engine.search(build_query(["r"]))
        assert {r.record.system for r in results} == {"aarch64-darwin"}

    def test_missing_catalog(self, tmp_path):
        engine = SearchEngine(SearchSettings(catalog=str(tmp_path / "missing.yaml")))
        with pytest.raises(CatalogUnavailable):
            engine.search(build_query(["hello"]))


class TestSearchEngineShow(unittest.TestCase):
    """Test cases for SearchEngine.show."""

    def setUp(self):
        patcher = patch('pkgsearch.catalog.accessor.CatalogLoader.load',
                        return_value=[("nixpkgs", SAMPLE_CATALOG)])
        self.mock_load = patcher.start()
        self.addCleanup(patcher.stop)
        self.engine = SearchEngine(SearchSettings(catalog="catalog.yaml"))

    def test_versions_best_first(self):
        records = self.engine.show("hello")
        self.assertEqual([r.version for r in records], ["2.12.1", "2.12", "2.10", "1.0"])
        self.mock_load.assert_called_once_with("catalog.yaml")

    def test_input_prefix(self):
        self.assertEqual(len(self.engine.show("nixpkgs:hello")), 4)
        with self.assertRaises(NoMatch):
            self.engine.show("other:hello")

    def test_custom_separator(self):
        self.assertEqual(len(self.engine.show("nixpkgs#hello", separator="#")), 4)

    def test_version_constraint(self):
        self.assertEqual([r.version for r in self.engine.show("hello@2.10")], ["2.10"])

    def test_falls_back_to_name_segment(self):
        records = self.engine.show("flask")
        self.assertEqual([r.name for r in records], ["python311Packages.flask"])

    def test_too_many_separators(self):
        with self.assertRaises(ShowError) as ctx:
            self.engine.show("a:b:c")
        self.assertIsInstance(ctx.exception, UsageError)

    def test_unknown_package(self):
        with self.assertRaises(NoMatch) as ctx:
            self.engine.show("surely_doesnt_exist")
        self.assertIn("surely_doesnt_exist", str(ctx.exception))

    def test_catalog_loaded_per_call(self):
        self.engine.show("hello")
        self.engine.show("ripgrep")
        self.assertEqual(self.mock_load.call_count, 2)


def test_engine_uses_configured_timeout(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(yaml.safe_dump(SAMPLE_CATALOG))
    engine = SearchEngine(SearchSettings(catalog=str(path), request_timeout=7))
    assert engine.loader.request_timeout == 7


if __name__ == '__main__':
    unittest.main()
