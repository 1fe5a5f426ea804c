"""Incremental JSON framing of agent CLI output."""

from agentwire.stream.parser import StreamParser

__all__ = ["StreamParser"]
