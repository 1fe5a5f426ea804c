"""Factory functions wiring components to configuration defaults."""

from __future__ import annotations

from pathlib import Path

from agentwire.config.models import AgentwireConfig
from agentwire.interaction.handler import PermissionRequestHandler
from agentwire.logwatch.watcher import LogWatcher
from agentwire.stream.parser import StreamParser
from agentwire.thought.handler import ThoughtStreamHandler


def create_stream_parser(config: AgentwireConfig | None = None) -> StreamParser:
    config = config or AgentwireConfig()
    return StreamParser(max_buffer_size=config.stream.max_buffer_size)


def create_permission_handler(
    default_timeout: float | None = None,
    config: AgentwireConfig | None = None,
) -> PermissionRequestHandler:
    """Create a handler; an explicit *default_timeout* overrides the config."""
    config = config or AgentwireConfig()
    if default_timeout is None:
        default_timeout = config.interaction.default_timeout
    return PermissionRequestHandler(default_timeout=default_timeout)


def create_thought_stream_handler(
    config: AgentwireConfig | None = None,
) -> ThoughtStreamHandler:
    # Thought validation has no tunables yet; *config* keeps the factory
    # signatures uniform.
    return ThoughtStreamHandler()


def create_log_watcher(
    log_dir: Path | str | None = None,
    config: AgentwireConfig | None = None,
) -> LogWatcher:
    """Create a watcher; an explicit *log_dir* overrides the config."""
    config = config or AgentwireConfig()
    return LogWatcher(
        log_dir=log_dir if log_dir is not None else config.logwatch.log_dir,
        poll_interval=config.logwatch.poll_interval,
        file_notifications=config.logwatch.file_notifications,
    )
