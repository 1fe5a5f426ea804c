"""Pydantic v2 models for agentwire.yaml configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from agentwire.constants import (
    DEFAULT_INTERACTION_TIMEOUT,
    DEFAULT_LOG_DIR,
    DEFAULT_POLL_INTERVAL,
    MAX_BUFFER_SIZE,
)


class StreamConfig(BaseModel):
    """Settings for framing the agent's stdout stream."""

    model_config = ConfigDict(extra="forbid")

    max_buffer_size: int = Field(
        default=MAX_BUFFER_SIZE,
        gt=0,
        description="Characters buffered without a complete frame before overflow",
    )


class InteractionConfig(BaseModel):
    """Settings for permission and question requests."""

    model_config = ConfigDict(extra="forbid")

    default_timeout: float = Field(
        default=DEFAULT_INTERACTION_TIMEOUT,
        gt=0,
        description="Seconds to wait for a UI answer before denying/declining",
    )


class LogWatchConfig(BaseModel):
    """Settings for tailing the agent CLI's log directory."""

    model_config = ConfigDict(extra="forbid")

    log_dir: str = Field(
        default=str(DEFAULT_LOG_DIR),
        description="Directory holding *.log files; ~ and $VARS are expanded",
    )
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0,
        description="Seconds between log file polls",
    )
    file_notifications: bool = Field(
        default=True,
        description="Also react to filesystem change notifications",
    )


class AgentwireConfig(BaseModel):
    """Root configuration model for agentwire.yaml."""

    model_config = ConfigDict(extra="forbid")

    stream: StreamConfig = Field(default_factory=StreamConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    logwatch: LogWatchConfig = Field(default_factory=LogWatchConfig)
