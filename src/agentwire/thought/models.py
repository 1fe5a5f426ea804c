"""Pydantic v2 models for thought-stream telemetry events."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

ThoughtCategory = Literal["observation", "reasoning", "decision", "action"]

CheckpointStatus = Literal["progress", "complete", "stuck"]


class _TelemetryEvent(BaseModel):
    """Fields shared by thought and checkpoint events."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    task_id: StrictStr = Field(alias="taskId", min_length=1, description="Owning task")
    agent_name: StrictStr = Field(
        alias="agentName", min_length=1, description="Agent that produced the event"
    )
    timestamp: StrictInt | StrictFloat = Field(
        description="Epoch milliseconds supplied by the agent"
    )


class ThoughtEvent(_TelemetryEvent):
    """A single observation, reasoning step, decision or action."""

    content: StrictStr = Field(min_length=1, description="Thought text")
    category: ThoughtCategory = Field(description="Kind of thought")


class CheckpointEvent(_TelemetryEvent):
    """A progress report from an agent working on a task."""

    status: CheckpointStatus = Field(description="Where the agent stands")
    summary: StrictStr = Field(min_length=1, description="Summary of current state")
    next_planned: StrictStr | None = Field(
        default=None, alias="nextPlanned", description="Next step while progressing"
    )
    blocker: StrictStr | None = Field(
        default=None, description="What the agent is stuck on"
    )
