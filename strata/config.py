"""
Config system - layered database configuration.

Merge precedence (later overrides earlier):
defaults < JSON/YAML files < .env file < STRATA_* environment < overrides
"""

from typing import Any, Dict, Optional, Type, get_args, get_origin, get_type_hints
from dataclasses import dataclass, field, fields, MISSING
from glob import glob
from pathlib import Path
import json
import os
import types

import yaml
from dotenv import dotenv_values

from .faults import ConfigFault


class ConfigError(ConfigFault):
    """Raised when configuration validation fails."""


@dataclass
class DatabaseConfig:
    """Settings consumed by ``Database.from_config``."""

    url: str = "sqlite:///:memory:"
    table_prefix: str = ""
    connect_retries: int = 3
    connect_retry_delay: float = 0.5
    options: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment keys drop the prefix, are lower-cased and split on ``__``
    for nesting: ``STRATA_DATABASE__URL`` sets ``database.url``.
    """

    def __init__(self, env_prefix: str = "STRATA_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list] = None,
        env_prefix: str = "STRATA_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from every source.

        Args:
            paths: Config file paths (glob patterns supported, .json/.yaml/.yml)
            env_prefix: Prefix for environment variables
            env_file: Path to a .env file
            overrides: Manual overrides (highest precedence)
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern))
        if not matches and not any(ch in pattern for ch in "*?["):
            raise ConfigError(pattern, "config file not found")

        for path_str in matches:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigError(path_str, f"unsupported config format '{path.suffix}'")

    def _load_json_file(self, path: Path):
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigError(str(path), f"invalid JSON: {exc}") from exc
        self._merge_mapping(path, data)

    def _load_yaml_file(self, path: Path):
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigError(str(path), f"invalid YAML: {exc}") from exc
        if data:
            self._merge_mapping(path, data)

    def _merge_mapping(self, path: Path, data: Any):
        if not isinstance(data, dict):
            raise ConfigError(str(path), "top level must be a mapping")
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert STRATA_DATABASE__OPTIONS__TIMEOUT to a nested dict."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def get_database_config(self, section: str = "database") -> DatabaseConfig:
        """
        Validated DatabaseConfig from ``section``.

        Raises:
            ConfigError: A value has the wrong type
        """
        data = self.get(section, {})
        if not isinstance(data, dict):
            raise ConfigError(section, "must be a mapping")
        return self._instantiate_dataclass(DatabaseConfig, data, section)

    def _instantiate_dataclass(self, config_class: Type, data: dict, section: str):
        hints = get_type_hints(config_class)
        kwargs = {}

        for field_info in fields(config_class):
            name = field_info.name
            if name in data:
                value = data[name]
                expected = hints[name]
                if expected is float and isinstance(value, int) and not isinstance(value, bool):
                    value = float(value)
                if not self._check_type(value, expected):
                    raise ConfigError(
                        f"{section}.{name}",
                        f"expected {getattr(expected, '__name__', expected)}, got {type(value).__name__}",
                    )
                kwargs[name] = value
            elif field_info.default is MISSING and field_info.default_factory is MISSING:
                raise ConfigError(f"{section}.{name}", "required field not provided")

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return True
            return any(self._check_type(value, arg) for arg in get_args(expected_type))

        if origin:
            return isinstance(value, origin)

        if expected_type is int and isinstance(value, bool):
            return False
        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        return self.config_data.copy()


__all__ = ["ConfigLoader", "ConfigError", "DatabaseConfig"]
