"""Exception types raised by agentwire."""

from __future__ import annotations


class AgentwireError(Exception):
    """Base class for all agentwire errors."""


class BufferOverflowError(AgentwireError):
    """Buffered stream text grew past the configured cap without framing."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Stream buffer size exceeded maximum limit ({size} > {limit} chars)"
        )


class ConfigError(AgentwireError):
    """User-facing configuration error."""
