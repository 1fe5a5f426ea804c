"""Shared constants and type aliases for the agentwire runtime."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

#: Hard cap on buffered, not-yet-framed stream text (10 MiB).
MAX_BUFFER_SIZE = 10 * 1024 * 1024

#: Seconds a permission or question request waits for the UI (5 minutes).
DEFAULT_INTERACTION_TIMEOUT = 300.0

#: Seconds between log file polls.
DEFAULT_POLL_INTERVAL = 0.5

#: Where the agent CLI writes its own log files.
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "opencode" / "log"

#: Listener signature used by every emitter.
Listener = Callable[..., Any]
