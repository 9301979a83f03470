"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from spec_search.search.engine import SearchableSpec

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def write_spec(root: Path, name: str, frontmatter: str, body: str) -> Path:
    """Write ``<root>/<name>/README.md`` and return its path."""
    spec_dir = root / name
    spec_dir.mkdir(parents=True)
    readme = spec_dir / "README.md"
    readme.write_text(f"---\n{frontmatter.strip()}\n---\n{body}", encoding="utf-8")
    return readme


@pytest.fixture
def specs_dir(temp_dir: Path) -> Path:
    """Create a specs directory with a few specs, one of them archived."""
    root = temp_dir / "specs"
    root.mkdir()

    write_spec(
        root,
        "001-user-auth",
        """
status: planned
priority: high
tags: [api, security]
created: 2025-11-01
assignee: marvin
""",
        "# User Authentication\n\nImplement OAuth token refresh for the API.\n"
        "\nSessions expire after one hour.\n",
    )
    write_spec(
        root,
        "002-dashboard",
        """
status: in-progress
priority: medium
tags: [frontend, ui]
created: 2025-11-10
description: Metrics dashboard for operators
""",
        "# Dashboard\n\nCharts for request latency.\n\nThe old dashboard is deprecated.\n",
    )
    write_spec(
        root,
        "003-api-docs",
        """
status: complete
priority: low
tags: api, docs
created: 2025-11-20
""",
        "# API Documentation\n\nReference pages for every API endpoint.\n",
    )
    write_spec(
        root / "archived",
        "000-legacy-login",
        """
status: archived
tags: [security]
created: 2025-10-01
""",
        "# Legacy Login\n\nPassword login, replaced by OAuth.\n",
    )
    return root


@pytest.fixture
def sample_config(temp_dir: Path, specs_dir: Path) -> Path:
    """Create a sample config file pointing at the fixture specs."""
    config_path = temp_dir / "config.toml"
    config_path.write_text(f"""[paths]
specs_dir = "{specs_dir}"

[display]
colored_output = false

[search]
max_matches_per_spec = 3
context_length = 60
include_archived = false
""")
    return config_path


@pytest.fixture
def sample_specs() -> list[SearchableSpec]:
    """In-memory specs for engine tests."""
    return [
        SearchableSpec(
            path="specs/001-user-auth/README.md",
            name="001-user-auth",
            status="planned",
            priority="high",
            tags=("api", "security"),
            title="User Authentication",
            content="Implement OAuth token refresh for the API.\nSessions expire after one hour.",
            created="2025-11-01",
            assignee="marvin",
        ),
        SearchableSpec(
            path="specs/002-dashboard/README.md",
            name="002-dashboard",
            status="in-progress",
            priority="medium",
            tags=("frontend", "ui"),
            title="Dashboard",
            description="Metrics dashboard for operators",
            content="Charts for request latency.\nThe old dashboard is deprecated.",
            created="2025-11-10",
            updated="2025-12-01",
        ),
        SearchableSpec(
            path="specs/003-api-docs/README.md",
            name="003-api-docs",
            status="complete",
            priority="low",
            tags=("api", "docs"),
            title="API Documentation",
            content="Reference pages for every API endpoint.",
            created="2025-11-20",
        ),
    ]
