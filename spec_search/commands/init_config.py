"""Initialize configuration file for spec-search."""

from __future__ import annotations

from pathlib import Path

import click

from spec_search.cli import Context, pass_context
from spec_search.config import Config, get_default_config_path, save_config
from spec_search.utils.output import error, info, success


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/spec-search/config.toml)",
)
@click.option(
    "--specs-dir",
    "specs_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Specs directory to record in the config (default: ./specs)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None, specs_dir: Path | None) -> None:
    """Create a new configuration file with default settings.

    Examples:

    \b
      # Create config at default location
      spec-search init-config

    \b
      # Create config for a project's specs
      spec-search init-config --output ./spec-search.toml --specs-dir ./specs

    \b
      # Overwrite existing config
      spec-search init-config --force
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    config = Config(config_path=config_path)
    if specs_dir is not None:
        config.specs_dir = specs_dir.expanduser().resolve()

    try:
        save_config(config, config_path)
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")
    info("Edit this file to customize your settings.")
