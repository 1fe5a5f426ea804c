"""Tails the agent CLI's own log files for errors.

The structured stdout stream does not always surface provider failures
(expired OAuth tokens, throttling, validation errors) promptly.  The CLI
does write them to its log directory, so the watcher tails the newest
``*.log`` file there and classifies new ``ERROR`` lines.

Two mechanisms detect log rotation: a directory change notification
(best effort, via ``watchfiles``) and the fixed-interval poll, which
rediscovers the newest file whenever the tracked one disappears.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import BinaryIO

from watchfiles import Change, awatch

from agentwire.background_loop import BackgroundLoop
from agentwire.constants import DEFAULT_LOG_DIR, DEFAULT_POLL_INTERVAL
from agentwire.emitter import Emitter
from agentwire.logwatch.models import LogError
from agentwire.logwatch.rules import ERROR_MARKER, classify_line

logger = logging.getLogger(__name__)

#: Suffix of files the agent CLI writes its logs to.
_LOG_SUFFIX = ".log"

#: Milliseconds watchfiles waits to group filesystem changes.
_NOTIFY_DEBOUNCE_MS = 100


class LogWatcher(BackgroundLoop, Emitter):
    """Tails the newest log file in a directory and reports new errors.

    Lifecycle is ``idle -> watching -> idle`` via :meth:`start` and
    :meth:`stop`.  Watching always begins at the current end of the file:
    history written before :meth:`start` (or before a rotated file was
    adopted) is never scanned.

    Events:

    * ``log-line``: ``(line: str)`` for every line carrying ``ERROR``
    * ``error``: ``(error: LogError)`` once per distinct
      ``(error_name, status_code, session_id)`` within a watch session
    """

    EVENTS = ("error", "log-line")

    def __init__(
        self,
        log_dir: Path | str | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        file_notifications: bool = True,
    ) -> None:
        BackgroundLoop.__init__(self, poll_interval)
        Emitter.__init__(self)
        self._log_dir = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
        self._file_notifications = file_notifications

        self._watching = False
        # Bumped on every start/stop so late I/O results can be recognised.
        self._generation = 0
        self._current_log_file: Path | None = None
        self._file: BinaryIO | None = None
        self._read_position = 0
        self._seen_errors: set[tuple[str, int | None, str]] = set()

        self._discovery_lock = asyncio.Lock()
        self._notify_task: asyncio.Task[None] | None = None
        self._notify_stop: asyncio.Event | None = None

    # ------------------------------------------------------------------ #
    # Public properties
    # ------------------------------------------------------------------ #

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def is_watching(self) -> bool:
        return self._watching

    @property
    def current_log_file(self) -> Path | None:
        """The log file being tailed, or ``None`` if none was found yet."""
        return self._current_log_file

    @property
    def read_position(self) -> int:
        """Byte offset up to which the current file has been consumed."""
        return self._read_position

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Begin watching.  A no-op when already watching."""
        if self._watching:
            return

        self._watching = True
        self._generation += 1
        generation = self._generation
        self._seen_errors.clear()

        await self._find_and_watch_latest_log()
        if generation != self._generation or not self._watching:
            # stop() ran while discovery was in flight.
            return
        await super().start()

        if self._file_notifications:
            self._notify_stop = asyncio.Event()
            self._notify_task = asyncio.create_task(
                self._watch_directory(self._notify_stop)
            )

    async def stop(self) -> None:
        """Stop watching and release the file handle.  Safe when idle."""
        self._watching = False
        self._generation += 1

        await super().stop()

        if self._notify_stop is not None:
            self._notify_stop.set()
            self._notify_stop = None
        notify_task = self._notify_task
        self._notify_task = None
        if notify_task is not None and not notify_task.done():
            notify_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await notify_task

        self._close_file()
        self._current_log_file = None
        self._read_position = 0
        self._seen_errors.clear()

    # ------------------------------------------------------------------ #
    # User-facing text
    # ------------------------------------------------------------------ #

    @staticmethod
    def get_error_message(error: LogError) -> str:
        """Return the message a UI should show for *error*."""
        match error.error_name:
            case (
                "OAuthExpiredError"
                | "OAuthUnauthorizedError"
                | "OAuthAuthenticationError"
            ):
                return (
                    error.message
                    or "Your session has expired. Please re-authenticate."
                )
            case "ThrottlingException":
                detail = error.message or "Please wait before trying again."
                return f"Rate limit exceeded: {detail}"
            case "AuthenticationError":
                return (
                    "Authentication failed. "
                    "Please check your API credentials in Settings."
                )
            case "ModelNotFoundError":
                model = error.model_id or "unknown"
                return f"Model not available: {model}. Please select a different model."
            case "ValidationError":
                return f"Invalid request: {error.message}"
            case "AI_APICallError":
                if error.status_code == 429:
                    detail = error.message or "Please wait before trying again."
                    return f"Rate limit exceeded: {detail}"
                if error.status_code == 503:
                    return "Service temporarily unavailable. Please try again later."
                detail = error.message or "Unknown error"
                return f"API error ({error.status_code}): {detail}"
            case _:
                return error.message or f"Error: {error.error_name}"

    # ------------------------------------------------------------------ #
    # Polling
    # ------------------------------------------------------------------ #

    def _should_start(self) -> bool:
        return self._watching

    async def _tick(self) -> None:
        if not self._watching:
            return
        if self._file is None:
            # Nothing found yet: keep looking until the CLI creates a log.
            await self._find_and_watch_latest_log()
            return
        await self._read_new_content()

    async def _read_new_content(self) -> None:
        handle = self._file
        path = self._current_log_file
        if handle is None or path is None or not self._watching:
            return

        generation = self._generation
        offset = self._read_position
        try:
            stats = await asyncio.to_thread(_stat_pair, path, handle)
            path_stat, handle_stat = stats
            if not _same_file(path_stat, handle_stat):
                if generation == self._generation and handle is self._file:
                    logger.info("Log file %s was replaced, reopening", path)
                    await self._find_and_watch_latest_log(reopen=True)
                return
            size = path_stat.st_size
            if size <= offset:
                return
            data = await asyncio.to_thread(_read_range, handle, offset, size - offset)
        except FileNotFoundError:
            if generation == self._generation:
                logger.info("Log file %s disappeared, rediscovering", path)
                await self._find_and_watch_latest_log()
            return
        except (OSError, ValueError) as exc:
            # ValueError: the handle was closed by stop() or a rotation.
            if generation == self._generation and handle is self._file:
                logger.warning("Error reading log file %s: %s", path, exc)
            return

        if generation != self._generation or handle is not self._file:
            return

        self._read_position = offset + len(data)
        text = data.decode("utf-8", errors="replace")
        for line in text.split("\n"):
            if generation != self._generation:
                return
            if line.strip():
                self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        if ERROR_MARKER not in line:
            return
        self._emit("log-line", line)

        error = classify_line(line)
        if error is None:
            return
        if error.dedup_key in self._seen_errors:
            return
        self._seen_errors.add(error.dedup_key)

        logger.info("Detected error: %s %s", error.error_name, error.message)
        self._emit("error", error)

    # ------------------------------------------------------------------ #
    # Discovery & rotation
    # ------------------------------------------------------------------ #

    async def _find_and_watch_latest_log(self, reopen: bool = False) -> None:
        """Adopt the newest log file, tailing it from its current end.

        With *reopen*, the tracked path is opened afresh even when it is
        still the newest name (the file was replaced under that name).
        """
        async with self._discovery_lock:
            generation = self._generation
            try:
                latest = await asyncio.to_thread(_latest_log_file, self._log_dir)
            except OSError as exc:
                logger.debug("Cannot list log directory %s: %s", self._log_dir, exc)
                return

            if generation != self._generation or not self._watching:
                return
            if latest is None:
                return
            if latest == self._current_log_file and not reopen:
                return

            try:
                handle, size = await asyncio.to_thread(_open_at_end, latest)
            except OSError as exc:
                logger.warning("Cannot open log file %s: %s", latest, exc)
                return
            if generation != self._generation or not self._watching:
                handle.close()
                return

            self._close_file()
            self._file = handle
            self._current_log_file = latest
            self._read_position = size
            logger.info("Watching log file: %s", latest)

    async def _watch_directory(self, stop_event: asyncio.Event) -> None:
        """React to log files appearing or vanishing faster than the poll."""
        try:
            async for changes in awatch(
                self._log_dir,
                stop_event=stop_event,
                debounce=_NOTIFY_DEBOUNCE_MS,
                recursive=False,
            ):
                if any(
                    change in (Change.added, Change.deleted)
                    and path.endswith(_LOG_SUFFIX)
                    for change, path in changes
                ):
                    await self._find_and_watch_latest_log()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Could not watch log directory %s: %s", self._log_dir, exc)

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def _latest_log_file(log_dir: Path) -> Path | None:
    """Return the lexicographically greatest ``*.log`` file in *log_dir*."""
    with os.scandir(log_dir) as entries:
        names = sorted(
            entry.name
            for entry in entries
            if entry.name.endswith(_LOG_SUFFIX) and entry.is_file()
        )
    return log_dir / names[-1] if names else None


def _open_at_end(path: Path) -> tuple[BinaryIO, int]:
    handle = path.open("rb")
    try:
        size = os.fstat(handle.fileno()).st_size
    except OSError:
        handle.close()
        raise
    return handle, size


def _stat_pair(
    path: Path, handle: BinaryIO
) -> tuple[os.stat_result, os.stat_result]:
    """Stat *path* and the open *handle* together, off the event loop."""
    return os.stat(path), os.fstat(handle.fileno())


def _same_file(a: os.stat_result, b: os.stat_result) -> bool:
    return (a.st_dev, a.st_ino) == (b.st_dev, b.st_ino)


def _read_range(handle: BinaryIO, offset: int, length: int) -> bytes:
    handle.seek(offset)
    return handle.read(length)
