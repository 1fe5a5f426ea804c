"""Configuration models and parser for agentwire.yaml."""

from agentwire.config.models import (
    AgentwireConfig,
    InteractionConfig,
    LogWatchConfig,
    StreamConfig,
)
from agentwire.config.parser import load_config
from agentwire.errors import ConfigError

__all__ = [
    "AgentwireConfig",
    "ConfigError",
    "InteractionConfig",
    "LogWatchConfig",
    "StreamConfig",
    "load_config",
]
