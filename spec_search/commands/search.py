"""Search specs with the query language."""

from __future__ import annotations

import io
import json
from dataclasses import asdict

import click
from rich.console import Console
from rich.markup import escape

from spec_search.cli import Context, pass_context
from spec_search.exceptions import SpecLoadError, SpecsDirNotFoundError
from spec_search.loader import load_specs
from spec_search.search import (
    FieldFilter,
    SearchableSpec,
    SearchOptions,
    SearchResult,
    advanced_search_specs,
    parse_query,
)
from spec_search.search.engine import matches_field_filter
from spec_search.utils.output import (
    THEME,
    console,
    debug,
    error,
    highlight_text,
    info,
    pager_print,
    verbose,
    warning,
)

EXIT_SUCCESS = 0
EXIT_NO_RESULTS = 0
EXIT_LOAD_ERROR = 2
EXIT_NO_SPECS_DIR = 3

_STATUS_ICONS: dict[str, str] = {
    "planned": "○",
    "in-progress": "◐",
    "complete": "●",
    "archived": "□",
}


def _filter_specs(
    specs: list[SearchableSpec],
    status: str | None,
    tags: tuple[str, ...],
    priority: str | None,
    assignee: str | None,
) -> list[SearchableSpec]:
    """Apply the metadata filter options before searching."""
    filters: list[FieldFilter] = []
    if status:
        filters.append(FieldFilter(field="status", value=status))
    for tag in tags:
        filters.append(FieldFilter(field="tag", value=tag))
    if priority:
        filters.append(FieldFilter(field="priority", value=priority))
    if assignee:
        filters.append(FieldFilter(field="assignee", value=assignee))

    if not filters:
        return specs
    return [s for s in specs if all(matches_field_filter(s, f) for f in filters)]


@click.command("search")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "paths", "json"]),
    default="text",
    help="Output format (default: text)",
)
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=1),
    default=None,
    help="Limit number of results",
)
@click.option("--status", default=None, help="Only search specs with this status")
@click.option("--tag", "tags", multiple=True, help="Only search specs with this tag (repeatable)")
@click.option("--priority", default=None, help="Only search specs with this priority")
@click.option("--assignee", default=None, help="Only search specs with this assignee")
@click.option(
    "--include-archived/--exclude-archived",
    default=None,
    help="Search archived specs too (default: from config)",
)
@click.option(
    "--max-matches",
    type=click.IntRange(min=1),
    default=None,
    help="Matches shown per spec (default: from config)",
)
@click.option(
    "--context-length",
    type=click.IntRange(min=1),
    default=None,
    help="Characters of context around content matches (default: from config)",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    output_format: str,
    limit: int | None,
    status: str | None,
    tags: tuple[str, ...],
    priority: str | None,
    assignee: str | None,
    include_archived: bool | None,
    max_matches: int | None,
    context_length: int | None,
) -> None:
    """Search specs and rank them by relevance.

    QUERY uses the spec-search query language. Multiple arguments are
    joined with spaces. Run `spec-search syntax` for the full reference.

    \b
    Syntax examples:
      spec-search search api authentication
      spec-search search '"token refresh" OR oauth'
      spec-search search "tag:api status:planned"
      spec-search search "created:>2025-11-01"
      spec-search search "(frontend OR backend) AND api NOT deprecated"
      spec-search search authetication~

    \b
    Output formats:
      --format text    Ranked results with highlighted matches (default)
      --format paths   One spec path per line (for piping)
      --format json    JSON array of results
    """
    config = ctx.config
    if config is None:
        error("Configuration not loaded")
        raise SystemExit(EXIT_NO_SPECS_DIR)

    query_string = " ".join(query)
    parsed = parse_query(query_string)
    if not ctx.quiet:
        for message in parsed.errors:
            warning(f"Query: {message}")
    debug(
        escape(
            f"Parsed query: terms={parsed.terms} fields={parsed.fields} "
            f"dates={parsed.date_filters} fuzzy={parsed.fuzzy_terms}"
        )
    )

    archived = config.include_archived if include_archived is None else include_archived
    try:
        specs = load_specs(config.specs_dir, include_archived=archived)
    except SpecsDirNotFoundError as e:
        error(str(e), hint="Use --specs-dir or set paths.specs_dir in the config")
        raise SystemExit(EXIT_NO_SPECS_DIR)
    except SpecLoadError as e:
        error(str(e))
        raise SystemExit(EXIT_LOAD_ERROR)

    specs = _filter_specs(specs, status, tags, priority, assignee)
    verbose(f"Searching {len(specs)} specs in {config.specs_dir}")

    options = SearchOptions(
        max_matches_per_spec=max_matches or config.max_matches_per_spec,
        context_length=context_length or config.context_length,
    )
    response = advanced_search_specs(query_string, specs, options, parsed=parsed)
    results = response.results
    if limit is not None:
        results = results[:limit]

    if not results:
        if output_format == "json":
            click.echo("[]")
        elif not ctx.quiet:
            info(f"No specs found matching: {escape(query_string)}")
        raise SystemExit(EXIT_NO_RESULTS)

    if output_format == "paths":
        _print_paths(results)
    elif output_format == "json":
        _print_json(results)
    else:
        meta = response.metadata
        if not ctx.quiet:
            info(
                f"Found {meta.total_results} spec{'' if meta.total_results == 1 else 's'} "
                f"matching: {escape(query_string)} "
                f"(searched {meta.specs_searched} in {meta.search_time_ms:.0f}ms)"
            )
        _print_results(results)

    raise SystemExit(EXIT_SUCCESS)


def _render_result(out: Console, result: SearchResult) -> None:
    spec = result.spec
    icon = _STATUS_ICONS.get(spec.status, "·")
    status_style = f"status.{spec.status}" if spec.status in _STATUS_ICONS else "info"
    out.print(
        f"[{status_style}]{icon}[/{status_style}] [path]{escape(spec.name)}[/path] "
        f"[score]({result.score}% match)[/score]"
    )

    meta: list[str] = []
    if spec.status:
        meta.append(spec.status)
    if spec.priority:
        meta.append(spec.priority)
    if spec.tags:
        meta.append("[" + ", ".join(spec.tags) + "]")
    if meta:
        out.print("   " + " • ".join(meta), style="dim", markup=False)

    for label, field_name in (("Title", "title"), ("Description", "description")):
        match = next((m for m in result.matches if m.field == field_name), None)
        if match is not None:
            line = highlight_text(match.text, match.highlights)
            out.print("   ", f"[field]{label}:[/field]", line)

    tag_matches = [m for m in result.matches if m.field == "tags"]
    if tag_matches:
        line = highlight_text("", [])
        for i, m in enumerate(tag_matches):
            if i:
                line.append(", ")
            line.append_text(highlight_text(m.text, m.highlights))
        out.print("   ", "[field]Tags:[/field]", line)

    content_matches = [m for m in result.matches if m.field == "content"]
    if content_matches:
        out.print("   [field]Content matches:[/field]")
        for m in content_matches:
            out.print(f"   [dim]\\[L{m.line_number}][/dim]", highlight_text(m.text, m.highlights))

    remaining = result.total_matches - len(result.matches)
    if remaining > 0:
        out.print(f"   [dim]... and {remaining} more match{'' if remaining == 1 else 'es'}[/dim]")
    out.print()


def _print_results(results: list[SearchResult]) -> None:
    """Print ranked results, using pager when appropriate."""
    buf = io.StringIO()
    render_console = Console(
        file=buf,
        theme=THEME,
        force_terminal=not console.no_color,
        width=console.width,
        no_color=console.no_color,
    )
    for result in results:
        _render_result(render_console, result)
    pager_print(buf.getvalue())


def _print_paths(results: list[SearchResult]) -> None:
    """Print one spec path per line."""
    for result in results:
        click.echo(result.spec.path)


def _print_json(results: list[SearchResult]) -> None:
    """Print results as a JSON array."""
    payload = []
    for result in results:
        payload.append(
            {
                "spec": {k: v for k, v in asdict(result.spec).items() if k != "content"},
                "score": result.score,
                "total_matches": result.total_matches,
                "matches": [asdict(m) for m in result.matches],
            }
        )
    click.echo(json.dumps(payload, indent=2))
