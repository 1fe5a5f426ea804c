"""Helpers shared by agentwire subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from agentwire.config.models import AgentwireConfig
from agentwire.config.parser import load_config
from agentwire.errors import ConfigError

verbose_option = click.option(
    "-v", "--verbose", is_flag=True, help="Enable debug logging on stderr."
)

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (defaults to ./agentwire.yaml when present).",
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_config_or_exit(config_path: Path | None) -> AgentwireConfig:
    """Load configuration, turning ``ConfigError`` into a clean exit."""
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None
