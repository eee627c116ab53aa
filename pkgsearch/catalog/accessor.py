"""
Read-only access to the prebuilt package catalog.

The catalog is a YAML or JSON document (or a directory of such documents,
one per input) mapping package attribute paths to the versions known for
them. It is opened for the duration of a single search and released
afterwards.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests
import yaml

from pkgsearch.catalog.schema import CatalogSchemaValidator
from pkgsearch.core.exceptions import CatalogUnavailable
from pkgsearch.core.interfaces import PackageRecord, Strategy


logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yaml", ".yml", ".json")
DEFAULT_INPUT_NAME = "catalog"

# A loaded catalog document paired with the input name it defines
CatalogDocument = Tuple[str, Dict[str, Any]]


class CatalogLoader:
    """
    Loads catalog documents from a file, a directory of shards or a URL.

    Shards are read concurrently but always merged in sorted file-name order,
    so the resulting record order does not depend on thread scheduling.
    """

    def __init__(
        self,
        request_timeout: int = 30,
        max_workers: int = 4,
        session: Optional[requests.Session] = None,
        validator: Optional[CatalogSchemaValidator] = None
    ):
        """
        Initialize the catalog loader.

        Args:
            request_timeout: Timeout in seconds for remote catalogs.
            max_workers: Maximum number of threads used to read shards.
            session: Optional requests session used for remote catalogs.
            validator: Schema validator. If None, uses the bundled schema.
        """
        self.request_timeout = request_timeout
        self.max_workers = max_workers
        self.session = session
        self.validator = validator or CatalogSchemaValidator()

    def load(self, source: str) -> List[CatalogDocument]:
        """
        Load every catalog document behind a source.

        Args:
            source: File path, directory path or http(s) URL.

        Returns:
            Documents in deterministic order.

        Raises:
            CatalogUnavailable: If any part of the catalog cannot be loaded.
        """
        if self._is_url(source):
            return [self._load_url(source)]

        path = Path(source).expanduser()
        if path.is_dir():
            return self._load_directory(path)
        if not path.exists():
            raise CatalogUnavailable(source, "no such file or directory")
        return [self._load_file(path)]

    def _is_url(self, source: str) -> bool:
        return urlparse(source).scheme in ("http", "https")

    def _load_url(self, url: str) -> CatalogDocument:
        logger.debug(f"Fetching remote catalog {url}")
        get = self.session.get if self.session is not None else requests.get
        try:
            response = get(url, timeout=self.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CatalogUnavailable(url, str(e))

        default_input = Path(urlparse(url).path).stem or DEFAULT_INPUT_NAME
        return self._parse(response.text, url, default_input)

    def _load_directory(self, directory: Path) -> List[CatalogDocument]:
        shards = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in CATALOG_SUFFIXES
        )
        if not shards:
            raise CatalogUnavailable(str(directory), "directory contains no catalog files")

        logger.debug(f"Loading {len(shards)} catalog shards from {directory}")
        documents: Dict[int, CatalogDocument] = {}

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(shards))) as executor:
            future_to_index = {
                executor.submit(self._load_file, shard): index
                for index, shard in enumerate(shards)
            }
            for future in as_completed(future_to_index):
                documents[future_to_index[future]] = future.result()

        return [documents[index] for index in range(len(shards))]

    def _load_file(self, path: Path) -> CatalogDocument:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise CatalogUnavailable(str(path), f"cannot read catalog: {e.strerror or e}")

        return self._parse(content, str(path), path.stem)

    def _parse(self, content: str, source: str, default_input: str) -> CatalogDocument:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise CatalogUnavailable(source, f"malformed catalog: {e}")

        issues = self.validator.validate(data)
        if issues:
            shown = "; ".join(issues[:3])
            more = f" (and {len(issues) - 3} more)" if len(issues) > 3 else ""
            raise CatalogUnavailable(source, f"invalid catalog: {shown}{more}")

        return data.get("input") or default_input, data


class CatalogAccessor:
    """
    Read-only view over the records of an opened catalog.

    Records keep the order in which the catalog defines them; that order is
    the tie-breaker used by the ranker.
    """

    def __init__(self, records: Sequence[PackageRecord], source: str = "<memory>"):
        self.source = source
        self._records: Optional[List[PackageRecord]] = list(records)
        self._index: Dict[str, List[PackageRecord]] = {}
        for record in self._records:
            self._index.setdefault(record.name, []).append(record)

    @classmethod
    @contextmanager
    def open(
        cls,
        source: Optional[str],
        systems: Optional[Sequence[str]] = None,
        loader: Optional[CatalogLoader] = None
    ) -> Iterator["CatalogAccessor"]:
        """
        Open a catalog for the duration of a ``with`` block.

        Args:
            source: File path, directory path or http(s) URL.
            systems: If given, only records for these systems are exposed.
            loader: Loader to use. If None, a default loader is created.

        Yields:
            The opened catalog accessor.

        Raises:
            CatalogUnavailable: If no source is configured or loading fails.
        """
        if not source:
            raise CatalogUnavailable(
                "<unset>",
                "no catalog configured; pass --catalog or set PKGSEARCH_CATALOG"
            )

        documents = (loader or CatalogLoader()).load(source)
        accessor = cls.from_documents(documents, source=source, systems=systems)
        logger.debug(f"Opened catalog {source} with {len(accessor)} records")
        try:
            yield accessor
        finally:
            accessor.close()

    @classmethod
    def from_documents(
        cls,
        documents: Sequence[CatalogDocument],
        source: str = "<memory>",
        systems: Optional[Sequence[str]] = None
    ) -> "CatalogAccessor":
        """
        Build an accessor from parsed catalog documents.

        Args:
            documents: (input name, document) pairs in catalog order.
            source: Description of where the documents came from.
            systems: If given, only records for these systems are kept.

        Returns:
            Catalog accessor over the flattened records.
        """
        wanted = set(systems) if systems else None
        records = []
        for input_name, data in documents:
            for name, entries in (data.get("packages") or {}).items():
                for entry in entries or []:
                    entry = entry or {}
                    system = entry.get("system")
                    if wanted is not None and system not in wanted:
                        continue
                    records.append(PackageRecord(
                        name=name,
                        input=input_name,
                        version=entry.get("version"),
                        system=system,
                        pname=entry.get("pname") or name.split(".")[-1],
                        description=entry.get("description"),
                        license=entry.get("license"),
                        position=len(records),
                    ))
        return cls(records, source=source)

    @property
    def records(self) -> List[PackageRecord]:
        if self._records is None:
            raise CatalogUnavailable(self.source, "catalog has been closed")
        return self._records

    @property
    def inputs(self) -> List[str]:
        seen = []
        for record in self.records:
            if record.input not in seen:
                seen.append(record.input)
        return seen

    def __len__(self) -> int:
        return len(self.records)

    def lookup(self, term: str, strategy: Strategy = Strategy.MATCH) -> List[PackageRecord]:
        """
        Find records whose names match a search term.

        Args:
            term: Case-sensitive search term.
            strategy: ``MATCH`` selects every record whose attribute path or
                package name contains the term; ``MATCH_NAME`` selects only
                records whose attribute path, package name or one of the
                dot-separated path segments equals the term.

        Returns:
            Matching records in catalog order; empty if nothing matches.
        """
        if strategy == Strategy.MATCH_NAME:
            matched = [r for r in self.records if self._matches_name(r, term)]
        else:
            matched = [r for r in self.records if self._matches_substring(r, term)]

        logger.debug(f"Lookup of '{term}' with strategy {strategy.value} found {len(matched)} records")
        return matched

    def get(self, name: str, input_name: Optional[str] = None) -> List[PackageRecord]:
        """
        Get every record of exactly one attribute path.

        Args:
            name: Attribute path such as ``python311Packages.flask``.
            input_name: Restrict to records from this input.

        Returns:
            Records in catalog order; empty if the name is unknown.
        """
        if self._records is None:
            raise CatalogUnavailable(self.source, "catalog has been closed")
        records = self._index.get(name, [])
        if input_name is not None:
            records = [r for r in records if r.input == input_name]
        return list(records)

    def close(self) -> None:
        """Release the loaded records."""
        self._records = None
        self._index = {}

    @staticmethod
    def _matches_substring(record: PackageRecord, term: str) -> bool:
        return term in record.name or (record.pname is not None and term in record.pname)

    @staticmethod
    def _matches_name(record: PackageRecord, term: str) -> bool:
        return record.name == term or record.pname == term or term in record.rel_path
