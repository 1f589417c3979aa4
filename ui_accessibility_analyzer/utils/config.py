# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
Configuration management for the ui_accessibility_analyzer package.

Options are grouped in sections: ``analysis`` (which analyzers run and how),
``report`` (output format and filtering), ``editor`` (editor integration)
and ``batch`` (workspace runs). A section resolves in this order, later
sources winning:

1. built-in defaults (``DEFAULT_CONFIG``)
2. user configuration, usually loaded from a ``.a11yrc`` file
3. ``UI_A11Y_<SECTION>_<OPTION>`` environment variables
4. runtime options passed by the caller
"""

import os
import json
from copy import deepcopy
from pathlib import Path
from typing import Dict, Any, Iterable, Optional

import yaml

from ui_accessibility_analyzer.utils.logging_helper import (
    setup_logger,
    ConfigurationError,
)

# Configure module-level logger
logger = setup_logger(__name__)

# Looked up in the working directory when no --config is given
DEFAULT_CONFIG_FILES = (".a11yrc.json", ".a11yrc.yaml", ".a11yrc.yml", "a11y.config.json")

YAML_SUFFIXES = (".yaml", ".yml")
TRUE_VALUES = ("true", "1", "yes", "y", "on")

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    # Analysis engine
    "analysis": {
        "includeEvents": True,
        "includeFocus": True,
        "includeAria": True,
        "includeKeyboard": True,
        "includeWidgets": True,
        "includeContext": True,
        "includeTiming": True,
        "includeSemantic": True,
        "strictMode": False,
        "significantDelay": 5000,
    },
    # Report output
    "report": {
        "format": "text",
        "minSeverity": "info",  # error, warning, info
        "useColor": True,
    },
    # Editor integration
    "editor": {
        "enable": True,
        "analysisMode": "smart",  # file, smart, project
        "analyzeOnSave": True,
        "analyzeOnType": False,
        "analyzeOnTypeDelay": 500,
        "maxProjectFiles": 1000,
        "minSeverity": "info",
        "excludePatterns": ["node_modules", "dist", "build"],
    },
    # Workspace batch runs
    "batch": {
        "workers": 4,
    },
}

CONFIG_SECTIONS = tuple(DEFAULT_CONFIG)


def coerce_env_value(value: str, default: Any) -> Any:
    """
    Convert an environment string to the type of an option's default.

    Lists are comma separated. A value that does not convert is returned
    unchanged.
    """
    if default is None or isinstance(default, str):
        return value
    try:
        if isinstance(default, bool):
            return value.strip().lower() in TRUE_VALUES
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, list):
            return [item.strip() for item in value.split(",") if item.strip()]
    except ValueError:
        logger.warning(f"Could not convert {value!r} to {type(default).__name__}, keeping it as text")
    return value


class ConfigManager:
    """
    Layered configuration with named sections.

    Args:
        defaults: Section name to default options
        env_prefix: Prefix of the environment variables that override options
    """

    def __init__(
        self, defaults: Dict[str, Any] = None, env_prefix: str = "UI_A11Y_"
    ):
        self.defaults = deepcopy(defaults) if defaults else {}
        self.env_prefix = env_prefix
        self.user_config: Dict[str, Any] = {}

    @property
    def sections(self) -> Iterable[str]:
        return tuple(self.defaults)

    def get_config(
        self, user_options: Dict[str, Any] = None, section: str = None
    ) -> Dict[str, Any]:
        """
        Resolve one section, or the whole configuration when no section is given.

        Args:
            user_options: Runtime overrides, applied last
            section: Section name, e.g. 'analysis' or 'editor'

        Returns:
            A fresh dict the caller may modify
        """
        if section and section in self.defaults:
            config = deepcopy(self.defaults[section])
            config.update(deepcopy(self.user_config.get(section, {})))
        else:
            config = deepcopy(self.defaults)
            if not section:
                config.update(deepcopy(self.user_config))

        self._apply_env_vars(config, section)

        if user_options:
            config.update(user_options)

        return config

    def resolve_sections(self) -> Dict[str, Dict[str, Any]]:
        """Every section resolved, as written by ``save_config``."""
        return {section: self.get_config(section=section) for section in self.sections}

    def set_user_config(self, config: Dict[str, Any], section: str = None) -> None:
        """Store user overrides for one section, or top-level ones."""
        if section:
            self.user_config.setdefault(section, {}).update(config)
        else:
            self.user_config.update(config)

    def reset_user_config(self) -> None:
        """Drop every stored user override."""
        self.user_config = {}

    def apply_config_data(self, data: Dict[str, Any]) -> None:
        """
        Store a loaded configuration document as user configuration.

        Each known section must be a mapping whose options have the same
        type as their defaults. Unknown sections are ignored with a warning.

        Raises:
            ConfigurationError: If a section or option is malformed
        """
        for section in self.sections:
            if section not in data:
                continue
            options = data[section] or {}
            if not isinstance(options, dict):
                raise ConfigurationError(f"Configuration section '{section}' must be a mapping")
            validate_options(options, optional_fields=self.option_types(section))
            self.set_user_config(options, section)
            logger.debug(f"Applied configuration for section: {section}")

        unknown = [name for name in data if name not in self.defaults]
        if unknown:
            logger.warning(f"Ignoring unknown configuration sections: {', '.join(unknown)}")

    def option_types(self, section: str) -> Dict[str, type]:
        return {
            name: type(value)
            for name, value in self.defaults.get(section, {}).items()
            if value is not None
        }

    def _apply_env_vars(self, config: Dict[str, Any], section: str = None) -> None:
        """
        Override options from the environment.

        Option names are matched case-insensitively, so
        UI_A11Y_EDITOR_ANALYSISMODE sets editor.analysisMode.
        """
        prefix = f"{self.env_prefix}{section.upper()}_" if section else self.env_prefix
        known_names = {name.lower(): name for name in config}

        for env_var, value in os.environ.items():
            if not env_var.startswith(prefix):
                continue
            option_name = known_names.get(env_var[len(prefix):].lower())
            if option_name is None:
                continue
            config[option_name] = coerce_env_value(value, config[option_name])
            logger.debug(f"Applied environment variable {env_var}")


def validate_options(
    options: Dict[str, Any],
    required_fields: Optional[Dict[str, type]] = None,
    optional_fields: Optional[Dict[str, type]] = None,
) -> None:
    """
    Check option presence and types.

    Args:
        options: The options to validate
        required_fields: Field names that must be present, with their types
        optional_fields: Field names that may be present, with their types

    Raises:
        ConfigurationError: On the first missing or mistyped field
    """
    for field in required_fields or {}:
        if field not in options:
            raise ConfigurationError(f"Required field '{field}' is missing")

    expected = dict(optional_fields or {})
    expected.update(required_fields or {})
    for field, field_type in expected.items():
        if field in options and not isinstance(options[field], field_type):
            raise ConfigurationError(
                f"Field '{field}' has incorrect type. "
                f"Expected {field_type.__name__}, got {type(options[field]).__name__}"
            )


def load_config_file(file_path: str) -> Dict[str, Any]:
    """
    Load a YAML (.yaml, .yml) or JSON (.json) configuration file.

    A file without an extension, such as ``.a11yrc``, is read as JSON.

    Raises:
        ConfigurationError: If the file is missing, unsupported or malformed
    """
    path = Path(file_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES + (".json", ""):
        raise ConfigurationError(
            f"Unsupported configuration file format: {path.suffix}. "
            "Supported formats: YAML (.yaml, .yml), JSON (.json)"
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) if suffix in YAML_SUFFIXES else json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Error parsing configuration file: {e}", path=file_path) from e
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration file: {e}", path=file_path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {file_path} must contain a mapping at the top level", path=file_path
        )
    return data


def find_config_file(directory: str = ".") -> Optional[str]:
    """Return the first of ``DEFAULT_CONFIG_FILES`` present in a directory, or None."""
    for name in DEFAULT_CONFIG_FILES:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            logger.debug(f"Found configuration file: {candidate}")
            return candidate
    return None


def save_config(config: Dict[str, Any], file_path: str, file_format: str = "yaml") -> None:
    """
    Write a configuration document as YAML or JSON.

    Raises:
        ConfigurationError: On an unknown format or a write failure
    """
    file_format = file_format.lower()
    if file_format not in ("yaml", "json"):
        raise ConfigurationError(f"Unsupported format: {file_format}")

    try:
        with open(file_path, "w", encoding="utf-8") as f:
            if file_format == "yaml":
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(config, f, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Error saving configuration: {e}", path=file_path) from e
    logger.info(f"Configuration saved to {file_path}")


# Global instance for shared configuration
config_manager = ConfigManager(DEFAULT_CONFIG)
