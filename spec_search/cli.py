"""Command-line interface for spec-search."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from rich.logging import RichHandler

from spec_search import __version__
from spec_search.config import Config, load_config
from spec_search.exceptions import SpecSearchError
from spec_search.utils.output import (
    error,
    error_console,
    set_color,
    set_pager,
    set_verbosity,
    warning,
)


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False
        self.pager: bool | None = None  # None = auto


pass_context = click.make_pass_decorator(Context, ensure=True)


def _configure_logging(debug: bool) -> None:
    """Route library log records through Rich on stderr when debugging."""
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
    )


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/spec-search/config.toml)",
)
@click.option(
    "--specs-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    help="Directory containing specs (overrides config)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.option(
    "--pager/--no-pager",
    default=None,
    help="Force pager on/off (default: auto-detect)",
)
@click.version_option(version=__version__, prog_name="spec-search")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    specs_dir: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
    pager: bool | None,
) -> None:
    """spec-search: Find specs with a small boolean query language.

    Searches a directory of specs (one sub-directory with a README.md per
    spec) and ranks them by relevance.

    Configuration is loaded from ~/.config/spec-search/config.toml by default.
    Use --config to specify an alternative configuration file.

    Examples:

        # Find planned API specs mentioning authentication
        spec-search search "tag:api status:planned authentication"

        # Show the query syntax
        spec-search syntax
    """
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet
    app_ctx.pager = pager

    set_verbosity(verbose=verbose, debug=debug)
    set_pager(pager)
    _configure_logging(debug)

    # Color is disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None
    if disable_color:
        set_color(False)

    try:
        loaded_config, warnings = load_config(config)
    except SpecSearchError as e:
        error(str(e))
        ctx.exit(1)
        return

    app_ctx.config = loaded_config

    if specs_dir is not None:
        loaded_config.specs_dir = specs_dir.expanduser().resolve()
        # The override replaces the configured directory, so drop its warning
        warnings = [w for w in warnings if not w.startswith("Specs directory not found")]

    if not disable_color and not loaded_config.colored_output:
        set_color(False)

    if not quiet:
        for warn in warnings:
            warning(warn)


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    group = cli
    for name in command:
        cmd = group.get_command(ctx, name)
        if cmd is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        if isinstance(cmd, click.Group):
            group = cmd
        else:
            click.echo(cmd.get_help(ctx))
            return
    click.echo(group.get_help(ctx))


def register_commands() -> None:
    """Register all commands from the commands package."""
    from spec_search.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()
