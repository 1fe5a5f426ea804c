"""agentwire watch-logs — report errors from the agent CLI's log files."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path

import click

from agentwire.commands.common import (
    config_option,
    configure_logging,
    load_config_or_exit,
    verbose_option,
)
from agentwire.factories import create_log_watcher
from agentwire.logwatch.models import LogError
from agentwire.logwatch.watcher import LogWatcher


@click.command("watch-logs")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Log directory to watch (overrides the config).",
)
@click.option("--raw", is_flag=True, help="Also echo every ERROR line to stderr.")
@config_option
@verbose_option
def watch_logs(
    log_dir: Path | None,
    raw: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Watch the agent's log directory and print user-facing error messages."""
    configure_logging(verbose)
    config = load_config_or_exit(config_path)
    watcher = create_log_watcher(log_dir, config)

    def _on_error(error: LogError) -> None:
        click.echo(f"[{error.error_name}] {LogWatcher.get_error_message(error)}")

    watcher.on("error", _on_error)
    if raw:
        watcher.on("log-line", lambda line: click.echo(line, err=True))

    click.echo(f"Watching {watcher.log_dir} (Ctrl-C to stop)")
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run(watcher))


async def _run(watcher: LogWatcher) -> None:
    await watcher.start()
    try:
        await asyncio.Event().wait()
    finally:
        await watcher.stop()
