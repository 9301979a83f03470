"""Configuration management for spec-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from spec_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)

DEFAULT_MAX_MATCHES_PER_SPEC = 5
DEFAULT_CONTEXT_LENGTH = 80


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "spec-search" / "config.toml"


def get_default_specs_dir() -> Path:
    """Get the default specs directory (``./specs``)."""
    return Path.cwd() / "specs"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        specs_dir: Directory holding one sub-directory per spec.
        colored_output: Whether to use colored terminal output.
        max_matches_per_spec: Matches shown per result.
        context_length: Characters of context kept around content matches.
        include_archived: Whether to search ``archived/`` specs by default.
        config_path: Path where config was loaded from (None if defaults).
    """

    specs_dir: Path = field(default_factory=get_default_specs_dir)
    colored_output: bool = True
    max_matches_per_spec: int = DEFAULT_MAX_MATCHES_PER_SPEC
    context_length: int = DEFAULT_CONTEXT_LENGTH
    include_archived: bool = False
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        self.specs_dir = self.specs_dir.expanduser().resolve()

        # Missing specs dir is a warning: it may be passed with --specs-dir later
        if not self.specs_dir.exists():
            warnings.append(f"Specs directory not found: {self.specs_dir}")

        if self.max_matches_per_spec < 1:
            raise ConfigValidationError(
                "search.max_matches_per_spec", self.max_matches_per_spec, "must be at least 1"
            )

        if self.context_length < 1:
            raise ConfigValidationError(
                "search.context_length", self.context_length, "must be at least 1"
            )

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: spec-search init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _require_int(key: str, value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigValidationError(key, value, "must be an integer")
    return value


def _require_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(key, value, "must be a boolean")
    return value


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [paths] section
    paths = data.get("paths", {})
    if "specs_dir" in paths:
        value = paths["specs_dir"]
        if not isinstance(value, str):
            raise ConfigValidationError("paths.specs_dir", value, "must be a string path")
        # Relative paths are relative to the config file
        specs_dir = Path(value).expanduser()
        if not specs_dir.is_absolute():
            specs_dir = config_path.parent / specs_dir
        config.specs_dir = specs_dir

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        config.colored_output = _require_bool("display.colored_output", display["colored_output"])

    # Parse [search] section
    search = data.get("search", {})
    if "max_matches_per_spec" in search:
        config.max_matches_per_spec = _require_int(
            "search.max_matches_per_spec", search["max_matches_per_spec"]
        )
    if "context_length" in search:
        config.context_length = _require_int("search.context_length", search["context_length"])
    if "include_archived" in search:
        config.include_archived = _require_bool(
            "search.include_archived", search["include_archived"]
        )

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "paths": {
            "specs_dir": str(config.specs_dir),
        },
        "display": {
            "colored_output": config.colored_output,
        },
        "search": {
            "max_matches_per_spec": config.max_matches_per_spec,
            "context_length": config.context_length,
            "include_archived": config.include_archived,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
