"""
Pytest configuration and fixtures for pkgsearch tests.
"""

import json

import pytest
import yaml

from pkgsearch.catalog.accessor import CatalogAccessor
from pkgsearch.core.interfaces import SearchSettings
from tests.fixtures.sample_data import SAMPLE_CATALOG, SAMPLE_UNSTABLE_SHARD


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep user configuration and PKGSEARCH_* variables out of tests."""
    for name in (
        "PKGSEARCH_CONFIG",
        "PKGSEARCH_CATALOG",
        "PKGSEARCH_FEATURES_SEARCH_STRATEGY",
        "PKGSEARCH_SYSTEMS",
        "PKGSEARCH_DISAMBIGUATE_INPUTS",
        "PKGSEARCH_VERBOSE",
        "PKGSEARCH_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def catalog_file(tmp_path):
    """Write the sample catalog as a YAML file."""
    path = tmp_path / "nixpkgs.yaml"
    path.write_text(yaml.safe_dump(SAMPLE_CATALOG, sort_keys=False))
    return path


@pytest.fixture
def catalog_dir(tmp_path):
    """Write the sample catalog as two shards, one YAML and one JSON."""
    directory = tmp_path / "catalog.d"
    directory.mkdir()
    (directory / "00-nixpkgs.yaml").write_text(yaml.safe_dump(SAMPLE_CATALOG, sort_keys=False))
    (directory / "10-unstable.json").write_text(json.dumps(SAMPLE_UNSTABLE_SHARD))
    (directory / "README.txt").write_text("not a catalog shard")
    return directory


@pytest.fixture
def catalog():
    """In-memory accessor over the sample catalog."""
    return CatalogAccessor.from_documents([("nixpkgs", SAMPLE_CATALOG)])


@pytest.fixture
def settings(catalog_file):
    """Settings pointing at the sample catalog file."""
    return SearchSettings(catalog=str(catalog_file))
