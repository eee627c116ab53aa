"""
Configuration management for pkgsearch.

This module provides the ConfigurationManager class, which loads the YAML
configuration file, applies environment variable overrides and explicit
command line overrides, and produces the effective SearchSettings.
"""

import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from pkgsearch.core.exceptions import ConfigurationError
from pkgsearch.core.interfaces import SearchSettings, Strategy


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = "~/.pkgsearch"
DEFAULT_CONFIG_FILE = "config.yaml"

ENV_CONFIG = "PKGSEARCH_CONFIG"
ENV_CATALOG = "PKGSEARCH_CATALOG"
ENV_SEARCH_STRATEGY = "PKGSEARCH_FEATURES_SEARCH_STRATEGY"
ENV_SYSTEMS = "PKGSEARCH_SYSTEMS"
ENV_DISAMBIGUATE_INPUTS = "PKGSEARCH_DISAMBIGUATE_INPUTS"

TRUE_VALUES = ("true", "1", "yes", "on")


def default_config() -> Dict[str, Any]:
    """
    Default configuration document written by ``pkgsearch config init``.
    """
    return {
        'catalog': None,
        'systems': [],
        'features': {
            'search_strategy': Strategy.MATCH.value,
        },
        'output': {
            'disambiguate_inputs': False,
            'input_separator': ':',
        },
        'catalog_request_timeout': 30,
    }


class ConfigurationManager:
    """
    Loads and merges pkgsearch configuration.

    Precedence, lowest first: built-in defaults, the YAML configuration
    file, environment variables, explicit overrides.
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses
                ``PKGSEARCH_CONFIG`` or ``~/.pkgsearch/config.yaml``.
            environ: Environment mapping. If None, uses ``os.environ``.
        """
        self.environ = os.environ if environ is None else environ
        explicit = config_path or self.environ.get(ENV_CONFIG)

        if explicit:
            self.config_path = Path(explicit).expanduser()
            self._required = True
        else:
            self.config_path = Path(DEFAULT_CONFIG_DIR).expanduser() / DEFAULT_CONFIG_FILE
            self._required = False

        self._file_cache: Optional[Dict[str, Any]] = None

    def load_file(self) -> Dict[str, Any]:
        """
        Load the YAML configuration file.

        Returns:
            The parsed document, or an empty dict if the default file is absent.

        Raises:
            ConfigurationError: If an explicitly given file is missing or the
                file cannot be parsed.
        """
        if self._file_cache is not None:
            return self._file_cache

        if not self.config_path.exists():
            if self._required:
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")
            logger.debug(f"No configuration file at {self.config_path}, using defaults")
            self._file_cache = {}
            return self._file_cache

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing configuration file {self.config_path}: {e}")
        except IOError as e:
            raise ConfigurationError(f"Error reading configuration file {self.config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {self.config_path} must contain a mapping")

        logger.debug(f"Loaded configuration from {self.config_path}")
        self._file_cache = data
        return self._file_cache

    def load(self, **overrides: Any) -> SearchSettings:
        """
        Build the effective settings.

        Args:
            **overrides: Explicit values (e.g. from CLI options); None values
                are ignored.

        Returns:
            Effective search settings.

        Raises:
            ConfigurationError: If any value is invalid.
        """
        merged = self._deep_merge(default_config(), self.load_file())
        features = merged.get('features') or {}
        output = merged.get('output') or {}

        catalog = self.environ.get(ENV_CATALOG) or merged.get('catalog')
        strategy_value = self.environ.get(ENV_SEARCH_STRATEGY) or features.get('search_strategy')
        systems = self._parse_systems(self.environ.get(ENV_SYSTEMS, merged.get('systems')))
        disambiguate = self._parse_bool(
            self.environ.get(ENV_DISAMBIGUATE_INPUTS, output.get('disambiguate_inputs'))
        )

        if overrides.get('catalog'):
            catalog = overrides['catalog']
        if overrides.get('search_strategy'):
            strategy_value = overrides['search_strategy']
        if overrides.get('systems'):
            systems = self._parse_systems(overrides['systems'])

        try:
            strategy = Strategy.from_value(strategy_value)
        except ValueError as e:
            raise ConfigurationError(str(e))

        separator = output.get('input_separator') or ':'
        if not isinstance(separator, str):
            raise ConfigurationError("output.input_separator must be a string")

        try:
            timeout = int(merged.get('catalog_request_timeout') or 30)
        except (TypeError, ValueError):
            raise ConfigurationError("catalog_request_timeout must be an integer")

        settings = SearchSettings(
            catalog=str(catalog) if catalog else None,
            search_strategy=strategy,
            systems=systems,
            disambiguate_inputs=disambiguate,
            input_separator=separator,
            request_timeout=timeout,
            config_path=str(self.config_path),
        )
        logger.debug(f"Effective settings: {settings}")
        return settings

    def settings_as_dict(self, settings: SearchSettings) -> Dict[str, Any]:
        """
        Convert settings back into the configuration file layout.
        """
        data = asdict(settings)
        return {
            'catalog': data['catalog'],
            'systems': data['systems'],
            'features': {'search_strategy': settings.search_strategy.value},
            'output': {
                'disambiguate_inputs': data['disambiguate_inputs'],
                'input_separator': data['input_separator'],
            },
            'catalog_request_timeout': data['request_timeout'],
        }

    def _parse_systems(self, value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [s.strip() for s in value.split(',') if s.strip()]
        if isinstance(value, (list, tuple)):
            return [str(s).strip() for s in value if str(s).strip()]
        raise ConfigurationError(f"systems must be a list or comma-separated string, got {value!r}")

    def _parse_bool(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in TRUE_VALUES

    def _deep_merge(self, base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary.
            overlay: Dictionary to merge into base.

        Returns:
            Merged dictionary.
        """
        result = dict(base)

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
