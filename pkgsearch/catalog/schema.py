"""
Schema validation for catalog documents.

Catalog files are validated against ``catalog.schema.json`` before any of
their records are exposed to the search pipeline.
"""

import json
import logging
import os
from typing import Any, List, Optional

import jsonschema


logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "schemas",
    "catalog.schema.json"
)


class CatalogSchemaValidator:
    """
    Validates parsed catalog documents against the catalog JSON schema.
    """

    def __init__(self, schema_path: Optional[str] = None):
        """
        Initialize the validator.

        Args:
            schema_path: Path to the schema file. If None, uses the bundled schema.
        """
        with open(schema_path or DEFAULT_SCHEMA_PATH, 'r', encoding='utf-8') as f:
            self.schema = json.load(f)

        self.validator = jsonschema.Draft7Validator(self.schema)

    def validate(self, data: Any) -> List[str]:
        """
        Validate a parsed catalog document.

        Args:
            data: Parsed YAML or JSON document.

        Returns:
            Human-readable issue messages; empty when the document is valid.
        """
        issues = []
        for error in sorted(self.validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
            path = "/".join(str(p) for p in error.path) if error.path else "<root>"
            issues.append(f"{path}: {error.message}")

        if issues:
            logger.debug(f"Catalog document failed validation with {len(issues)} issue(s)")
        return issues
