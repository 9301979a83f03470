"""Utility modules for spec-search."""

from spec_search.utils.output import (
    console,
    error,
    highlight_text,
    info,
    success,
    warning,
)

__all__ = [
    "console",
    "error",
    "highlight_text",
    "info",
    "success",
    "warning",
]
