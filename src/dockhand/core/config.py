#!/usr/bin/env python3
"""
Configuration loader with multi-layer merging for engine settings.

Layers (low to high priority):
1. Built-in defaults
2. User file (--config, JSON or YAML)
3. Environment variables (DOCKHAND_*)
4. Explicit overrides
"""

import json
import logging
import math
import os
from copy import deepcopy
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from dockhand.core.errors import ConfigurationError


LOGGER = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """Settings for talking to the container engine."""

    engine: str = "docker"
    create_command: str = "/bin/sh"
    shell_command: str = "/bin/su"
    location: str = "/scratch"
    spinner: bool = True
    spinner_fast_interval: float = 0.016
    spinner_slow_interval: float = 0.1
    spinner_fast_window: float = 0.1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)


class ConfigLoader:
    """Build EngineSettings from defaults, a file, the environment, and overrides."""

    ENV_PREFIX = "DOCKHAND_"
    ENV_KEYS = ("engine", "location", "create_command", "shell_command")
    BOOLEAN_STRINGS = {
        "true": True, "yes": True, "on": True, "1": True,
        "false": False, "no": False, "off": False, "0": False,
    }

    @classmethod
    def deep_merge(cls, base: Dict, override: Mapping) -> Dict:
        """
        Deep merge two dictionaries. Override wins conflicts.
        Nested dicts are merged, lists/primitives are replaced.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls.deep_merge(result[key], value)
            else:
                result[key] = deepcopy(value)
        return result

    @classmethod
    def load_file(cls, config_path: str) -> Dict[str, Any]:
        """
        Load a JSON or YAML settings file.

        Args:
            config_path: Path to the settings file

        Returns:
            Dict of settings from the file

        Raises:
            ConfigurationError: If the file is missing, unreadable, or not a mapping
        """
        path = Path(config_path)
        suffix = path.suffix.lower()
        try:
            with open(path, "r") as f:
                if suffix == ".json":
                    data = json.load(f)
                elif suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    raise ConfigurationError(
                        f"Unsupported config file format: {suffix or path.name}",
                        suggestions=["Use a .json, .yaml, or .yml file"],
                    )
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not load config file {config_path}: {e}", cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping of settings"
            )
        return data

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Collect settings from DOCKHAND_* environment variables."""
        environ = os.environ if environ is None else environ
        settings = {}
        for key in cls.ENV_KEYS:
            value = environ.get(cls.ENV_PREFIX + key.upper())
            if value:
                settings[key] = value
        return settings

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> EngineSettings:
        """
        Load engine settings with all layers applied.

        Args:
            config_path: Optional JSON or YAML settings file
            overrides: Settings that win over every other layer
            environ: Environment to read (defaults to os.environ)

        Returns:
            EngineSettings

        Raises:
            ConfigurationError: If a layer is invalid or names an unknown setting
        """
        merged = EngineSettings().to_dict()
        if config_path:
            LOGGER.debug(f"Loading settings from {config_path}")
            merged = cls.deep_merge(merged, cls.load_file(config_path))
        merged = cls.deep_merge(merged, cls.from_env(environ))
        if overrides:
            merged = cls.deep_merge(
                merged, {k: v for k, v in overrides.items() if v is not None}
            )

        known = {f.name for f in fields(EngineSettings)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown setting(s): {', '.join(unknown)}",
                suggestions=[f"Valid settings: {', '.join(sorted(known))}"],
            )
        return EngineSettings(
            **{f.name: cls.coerce(f.name, merged[f.name], f.type) for f in fields(EngineSettings)}
        )

    @classmethod
    def coerce(cls, key: str, value: Any, kind: type) -> Any:
        """
        Convert a setting to its declared type.

        Strings are accepted for booleans and numbers, since environment
        variables only carry text. Numbers must be finite and non-negative.

        Raises:
            ConfigurationError: If the value cannot be converted
        """
        if kind is bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in cls.BOOLEAN_STRINGS:
                return cls.BOOLEAN_STRINGS[value.strip().lower()]
        elif kind is float:
            if not isinstance(value, bool):
                try:
                    number = float(value)
                except (TypeError, ValueError):
                    number = None
                if number is not None and math.isfinite(number) and number >= 0:
                    return number
        elif isinstance(value, kind):
            return value

        raise ConfigurationError(
            f"Invalid value for setting {key}: {value!r}",
            suggestions=[f"Expected a {'non-negative number' if kind is float else kind.__name__}"],
        )
