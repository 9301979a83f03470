"""Show the query language reference."""

from __future__ import annotations

import click

from spec_search.search import get_search_syntax_help


@click.command("syntax")
def cli() -> None:
    """Show the search query syntax."""
    click.echo(get_search_syntax_help())
