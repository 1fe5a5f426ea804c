"""agentwire frame — split a captured agent stream into JSON messages."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

import click

from agentwire.commands.common import (
    config_option,
    configure_logging,
    load_config_or_exit,
    verbose_option,
)
from agentwire.errors import BufferOverflowError
from agentwire.factories import create_stream_parser


@click.command()
@click.argument(
    "source",
    type=click.File("r", encoding="utf-8", errors="replace"),
    default="-",
)
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=4096,
    show_default=True,
    help="Characters fed to the parser per read.",
)
@config_option
@verbose_option
def frame(
    source: IO[str],
    chunk_size: int,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Print each JSON message found in SOURCE (or stdin) on its own line."""
    configure_logging(verbose)
    config = load_config_or_exit(config_path)

    parser = create_stream_parser(config)
    overflows: list[BufferOverflowError] = []

    def _on_message(message: dict[str, Any]) -> None:
        click.echo(json.dumps(message, ensure_ascii=False))

    def _on_error(exc: BufferOverflowError) -> None:
        overflows.append(exc)
        click.echo(f"Error: {exc}", err=True)

    parser.on("message", _on_message)
    parser.on("error", _on_error)

    while chunk := source.read(chunk_size):
        parser.feed(chunk)
    parser.flush()

    if overflows:
        raise SystemExit(1)
