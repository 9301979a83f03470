"""Load specs from a directory of ``<spec>/README.md`` files."""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Any

import yaml

from spec_search.exceptions import SpecLoadError, SpecsDirNotFoundError
from spec_search.search.engine import SearchableSpec

logger = logging.getLogger(__name__)

SPEC_FILENAME = "README.md"
ARCHIVE_DIRNAME = "archived"
FRONTMATTER_DELIMITER = "---"


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split a markdown document into its YAML frontmatter and body.

    Returns:
        Tuple of (frontmatter text or None, body).
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])

    # No closing delimiter: treat the whole file as body
    return None, text


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def _as_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(tag.strip() for tag in value.split(",") if tag.strip())
    if isinstance(value, list):
        return tuple(str(tag) for tag in value)
    return (str(value),)


def _first_heading(body: str) -> str | None:
    for line in body.splitlines():
        if line.startswith("# "):
            return line[2:].strip()
    return None


def parse_spec(path: Path, name: str, text: str) -> SearchableSpec:
    """Build a SearchableSpec from a README's text.

    Raises:
        SpecLoadError: If the frontmatter is not a valid YAML mapping.
    """
    raw, body = split_frontmatter(text)

    meta: dict[str, Any] = {}
    if raw is not None:
        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise SpecLoadError(path, f"invalid frontmatter: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise SpecLoadError(path, "frontmatter must be a mapping")
        meta = loaded or {}

    return SearchableSpec(
        path=str(path),
        name=name,
        status=_as_text(meta.get("status")) or "",
        priority=_as_text(meta.get("priority")),
        tags=_as_tags(meta.get("tags")),
        title=_as_text(meta.get("title")) or _first_heading(body),
        description=_as_text(meta.get("description")),
        content=body,
        created=_as_text(meta.get("created") or meta.get("created_at")),
        updated=_as_text(meta.get("updated") or meta.get("updated_at")),
        assignee=_as_text(meta.get("assignee")),
    )


def _spec_dirs(root: Path) -> list[Path]:
    return sorted(p for p in root.iterdir() if p.is_dir() and (p / SPEC_FILENAME).is_file())


def load_specs(specs_dir: Path, include_archived: bool = False) -> list[SearchableSpec]:
    """Load every spec under *specs_dir*.

    Each sub-directory containing a ``README.md`` is one spec, named after
    the directory. Specs under ``archived/`` are included on request.

    Raises:
        SpecsDirNotFoundError: If *specs_dir* does not exist.
        SpecLoadError: If a spec file cannot be read or parsed.
    """
    if not specs_dir.is_dir():
        raise SpecsDirNotFoundError(specs_dir)

    dirs = _spec_dirs(specs_dir)
    archive = specs_dir / ARCHIVE_DIRNAME
    if include_archived and archive.is_dir():
        dirs.extend(_spec_dirs(archive))

    specs: list[SearchableSpec] = []
    for spec_dir in dirs:
        spec_file = spec_dir / SPEC_FILENAME
        try:
            text = spec_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecLoadError(spec_file, str(e)) from e
        specs.append(parse_spec(spec_file, spec_dir.name, text))

    logger.debug("Loaded %d specs from %s", len(specs), specs_dir)
    return specs
