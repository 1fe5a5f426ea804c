"""Frames JSON objects out of a chunked agent stdout stream."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from agentwire.constants import MAX_BUFFER_SIZE
from agentwire.emitter import Emitter
from agentwire.errors import BufferOverflowError

logger = logging.getLogger(__name__)

#: Message types whose nested ``part`` object describes a tool invocation.
_TOOL_MESSAGE_TYPES = {"tool_call", "tool_result"}

#: Substrings marking browser / MCP tool traffic worth a full payload dump.
_VERBOSE_TOOL_MARKERS = ("dev-browser", "browser", "mcp")

#: Characters that change scanner state outside and inside string literals.
_STRUCTURAL_RE = re.compile(r'[{}"]')
_STRING_SPECIAL_RE = re.compile(r'["\\]')


class StreamParser(Emitter):
    """Incremental JSON-object framer for agent CLI output.

    Chunk boundaries are meaningless: a chunk may end mid-object, mid-string
    or mid-escape.  Complete top-level ``{...}`` spans are decoded and
    emitted as ``message`` events in the order their closing brace arrives.
    Text between objects is logged as noise and discarded.

    Events:

    * ``message``: ``(message: dict[str, Any])``
    * ``error``: ``(exc: BufferOverflowError)``
    """

    EVENTS = ("message", "error")

    def __init__(self, max_buffer_size: int = MAX_BUFFER_SIZE) -> None:
        super().__init__()
        self._buffer = ""
        self._max_buffer_size = max_buffer_size
        self._scan = _ScanState()

    @property
    def buffered_size(self) -> int:
        """Number of characters currently held back waiting for more input."""
        return len(self._buffer)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def feed(self, chunk: str) -> None:
        """Append *chunk* and emit every frame it completes."""
        self._buffer += chunk
        self._parse_buffer()

        if len(self._buffer) > self._max_buffer_size:
            exc = BufferOverflowError(len(self._buffer), self._max_buffer_size)
            self._buffer = ""
            self._scan = _ScanState()
            logger.error("%s", exc)
            self._emit("error", exc)

    def flush(self) -> None:
        """Force-parse whatever is left in the buffer (end of stream)."""
        remainder = self._buffer
        self._buffer = ""
        self._scan = _ScanState()
        if remainder.strip():
            self._parse_frame(remainder)

    def reset(self) -> None:
        """Discard buffered text without parsing it."""
        self._buffer = ""
        self._scan = _ScanState()

    # ------------------------------------------------------------------ #
    # Framing
    # ------------------------------------------------------------------ #

    def _parse_buffer(self) -> None:
        while True:
            if self._scan.pos:
                end = self._scan.advance(self._buffer)
            else:
                end = self._start_frame()
            if end == -1:
                return

            frame = self._buffer[: end + 1]
            self._buffer = self._buffer[end + 1 :]
            self._scan = _ScanState()
            self._parse_frame(frame)

    def _start_frame(self) -> int:
        """Drop noise up to the next ``{`` and scan the frame it opens."""
        start = self._buffer.find("{")
        if start == -1:
            if self._buffer.strip():
                logger.debug("Skipping non-JSON content: %.50s", self._buffer.strip())
            self._buffer = ""
            return -1

        if start > 0:
            skipped = self._buffer[:start].strip()
            if skipped:
                logger.debug("Skipping non-JSON content: %.50s", skipped)
            self._buffer = self._buffer[start:]

        return self._scan.advance(self._buffer)

    def _parse_frame(self, frame: str) -> None:
        text = frame.strip()
        if not text:
            return

        # Stray CR/LF inside a frame is a transport artefact, not content.
        sanitized = text.replace("\r", "").replace("\n", "")

        try:
            message = json.loads(sanitized)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse JSON frame %.100s: %s", sanitized, exc)
            return

        if not isinstance(message, dict):
            logger.warning(
                "Dropping non-object JSON frame of type %s", type(message).__name__
            )
            return

        logger.debug("Parsed message type: %s", message.get("type"))
        self._emit_message(message)

    def _emit_message(self, message: dict[str, Any]) -> None:
        if message.get("type") in _TOOL_MESSAGE_TYPES:
            _log_tool_message(message)
        self._emit("message", message)


@dataclass
class _ScanState:
    """Brace-matching progress through a frame that starts at ``buffer[0]``.

    Kept between :meth:`StreamParser.feed` calls so each character of a
    pending frame is examined once, however many chunks it arrives in.
    """

    pos: int = 0
    depth: int = 0
    in_string: bool = False
    escape: bool = False

    def advance(self, text: str) -> int:
        """Scan *text* from :attr:`pos`; return the closing brace index or -1.

        Braces inside string literals do not count; a backslash inside a
        string consumes the following character so ``\\"`` never ends it.
        """
        i = self.pos
        end = len(text)
        while i < end:
            if self.escape:
                self.escape = False
                i += 1
                continue

            if self.in_string:
                match = _STRING_SPECIAL_RE.search(text, i)
                if match is None:
                    break
                i = match.start()
                if text[i] == "\\":
                    self.escape = True
                else:
                    self.in_string = False
                i += 1
                continue

            match = _STRUCTURAL_RE.search(text, i)
            if match is None:
                break
            i = match.start()
            char = text[i]
            if char == '"':
                self.in_string = True
            elif char == "{":
                self.depth += 1
            else:
                self.depth -= 1
                if self.depth == 0:
                    return i
            i += 1

        self.pos = end
        return -1


def _log_tool_message(message: dict[str, Any]) -> None:
    """Trace tool call/result messages; dump browser and MCP traffic in full."""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    part = message.get("part")
    if not isinstance(part, dict):
        part = {}

    logger.debug(
        "Tool message: type=%s tool=%s has_input=%s has_output=%s",
        message.get("type"),
        part.get("tool"),
        bool(part.get("input")),
        bool(part.get("output")),
    )

    tool_name = str(part.get("tool") or "").lower()
    output = str(part.get("output") or "").lower()
    if any(marker in tool_name for marker in _VERBOSE_TOOL_MARKERS) or any(
        marker in output for marker in _VERBOSE_TOOL_MARKERS[:2]
    ):
        logger.debug("Browser/MCP tool message: %s", json.dumps(message, indent=2))
