"""Exception hierarchy for spec-search."""

from pathlib import Path


class SpecSearchError(Exception):
    """Base exception for all spec-search errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all spec-search errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(SpecSearchError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Spec Loading Errors
class SpecLoadError(SpecSearchError):
    """A spec file could not be read or its frontmatter is invalid."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load spec {path}: {reason}")


class SpecsDirNotFoundError(SpecSearchError):
    """Specs directory doesn't exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Specs directory not found: {path}")
