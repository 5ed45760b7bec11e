#!/usr/bin/env python3
"""Layered configuration for Treesmith.

Configuration is merged from several sources, lowest precedence first:
1. Compiled defaults
2. User config file (YAML)
3. Environment variables (TREESMITH_*)
4. Runtime updates

Template definitions live under ``treesmith.templates.<name>``.

Example:
    >>> config = ConfigManager()
    >>> config.load_file("treesmith.yaml")
    >>> config.get("treesmith.matching.style")
    'loose'
    >>> config.get_template("service")["includes"]
    ['**']
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from treesmith.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode, TreesmithError

ENV_PREFIX = "TREESMITH_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    RUNTIME = 4  # Highest precedence


class ConfigError(TreesmithError):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class ConfigManager:
    """Thread-safe layered configuration manager."""

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML file to load as user config
            load_environment: Read TREESMITH_* environment variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._files: List[str] = []

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file is missing or is not a YAML mapping
        """
        path = Path(file_path).expanduser().resolve()

        if not path.is_file():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigError(
                f"Error reading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR
            ) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}")

        # Files may omit the top-level "treesmith" key.
        if ConfigKey.ROOT not in config_data:
            config_data = {ConfigKey.ROOT: config_data}

        with self._lock:
            self._config[source] = config_data
            self._files.append(str(path))

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from a dictionary."""
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load TREESMITH_SECTION_KEY=value variables.

        Example: TREESMITH_MATCHING_STYLE=strict -> treesmith.matching.style
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split("_")
            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _parse_env_value(self, value: str) -> Any:
        """Parse an environment value as bool, int, float or string."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key (e.g. "treesmith.logging.level").

        Dictionaries are merged across sources; scalars come from the
        highest-precedence source defining them.
        """
        value = self._get_nested(self.get_all(), key)
        return default if value is None else value

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a value by dotted key at the given source level."""
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get the merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get_template(self, name: str) -> Dict[str, Any]:
        """Get a raw template definition by name.

        Raises:
            ConfigError: If no template has that name
        """
        templates = self.get(f"{ConfigKey.ROOT}.{ConfigKey.TEMPLATES}", {})
        if not isinstance(templates, dict) or name not in templates:
            raise ConfigError(f"Unknown template: {name}", ErrorCode.NOT_FOUND)
        return templates[name]

    def list_templates(self) -> List[str]:
        templates = self.get(f"{ConfigKey.ROOT}.{ConfigKey.TEMPLATES}", {})
        return sorted(templates) if isinstance(templates, dict) else []

    @property
    def loaded_files(self) -> List[str]:
        with self._lock:
            return self._files.copy()

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear one source, or every source except the defaults."""
        with self._lock:
            if source:
                if source != ConfigSource.COMPILED_DEFAULTS:
                    self._config.pop(source, None)
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create the shared configuration manager."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Replace (or reset with None) the shared configuration manager."""
    global _global_config
    _global_config = config
