"""Root CLI group and version flag."""

import click

from agentwire import __version__
from agentwire.commands.frame import frame
from agentwire.commands.watch_logs import watch_logs


@click.group()
@click.version_option(version=__version__, prog_name="agentwire")
def cli() -> None:
    """agentwire — stream coordination for agent CLI subprocesses."""


cli.add_command(frame)
cli.add_command(watch_logs)
