"""Thought and checkpoint telemetry validation."""

from agentwire.thought.handler import ThoughtStreamHandler
from agentwire.thought.models import (
    CheckpointEvent,
    CheckpointStatus,
    ThoughtCategory,
    ThoughtEvent,
)

__all__ = [
    "CheckpointEvent",
    "CheckpointStatus",
    "ThoughtCategory",
    "ThoughtEvent",
    "ThoughtStreamHandler",
]
