"""Tests for the thought stream task registry and event validation."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from agentwire.thought.handler import ThoughtStreamHandler
from agentwire.thought.models import CheckpointEvent, ThoughtEvent


def _thought(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "taskId": "task-1",
        "agentName": "builder",
        "timestamp": 1_700_000_000_000,
        "content": "Reading the config loader",
        "category": "observation",
    }
    data.update(overrides)
    return data


def _checkpoint(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "taskId": "task-1",
        "agentName": "builder",
        "timestamp": 1_700_000_000_000,
        "status": "progress",
        "summary": "Parser done",
        "nextPlanned": "Write tests",
    }
    data.update(overrides)
    return data


class TestTaskRegistry:
    def test_register_and_unregister(self) -> None:
        handler = ThoughtStreamHandler()

        handler.register_task("a")
        assert handler.is_task_active("a")

        handler.unregister_task("a")
        assert not handler.is_task_active("a")

    def test_register_twice_keeps_single_entry(self) -> None:
        handler = ThoughtStreamHandler()
        handler.register_task("a")
        handler.register_task("a")
        assert handler.get_active_task_ids() == ["a"]

    def test_unregister_unknown_is_noop(self) -> None:
        handler = ThoughtStreamHandler()
        handler.unregister_task("missing")
        assert handler.get_active_task_ids() == []

    def test_active_ids_sorted(self) -> None:
        handler = ThoughtStreamHandler()
        for task_id in ("c", "a", "b"):
            handler.register_task(task_id)
        assert handler.get_active_task_ids() == ["a", "b", "c"]

    def test_clear_all_tasks(self) -> None:
        handler = ThoughtStreamHandler()
        handler.register_task("a")
        handler.register_task("b")

        handler.clear_all_tasks()

        assert handler.get_active_task_ids() == []
        assert not handler.is_task_active("a")


class TestValidateThought:
    def test_valid_event(self) -> None:
        event = ThoughtStreamHandler().validate_thought_event(_thought())

        assert isinstance(event, ThoughtEvent)
        assert event.task_id == "task-1"
        assert event.agent_name == "builder"
        assert event.category == "observation"

    @pytest.mark.parametrize(
        "category", ["observation", "reasoning", "decision", "action"]
    )
    def test_all_categories_accepted(self, category: str) -> None:
        event = ThoughtStreamHandler().validate_thought_event(
            _thought(category=category)
        )
        assert event is not None

    def test_float_timestamp_accepted(self) -> None:
        event = ThoughtStreamHandler().validate_thought_event(
            _thought(timestamp=1.5e12)
        )
        assert event is not None

    def test_validation_ignores_task_activity(self) -> None:
        handler = ThoughtStreamHandler()
        assert not handler.is_task_active("task-1")
        assert handler.validate_thought_event(_thought()) is not None

    @pytest.mark.parametrize(
        "data",
        [
            _thought(category="musing"),
            _thought(content=""),
            _thought(content=None),
            _thought(taskId=""),
            _thought(taskId=5),
            _thought(agentName=""),
            _thought(timestamp="yesterday"),
            _thought(timestamp=True),
            {k: v for k, v in _thought().items() if k != "timestamp"},
        ],
    )
    def test_malformed_events_rejected(self, data: dict[str, Any]) -> None:
        assert ThoughtStreamHandler().validate_thought_event(data) is None

    @pytest.mark.parametrize("data", [None, "thought", 3, [_thought()]])
    def test_non_object_rejected(self, data: object) -> None:
        assert ThoughtStreamHandler().validate_thought_event(data) is None

    def test_rejection_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="agentwire.thought.handler"):
            ThoughtStreamHandler().validate_thought_event(_thought(category="x"))

        assert "Rejected thought event (category)" in caplog.text


class TestValidateCheckpoint:
    def test_valid_progress(self) -> None:
        event = ThoughtStreamHandler().validate_checkpoint_event(_checkpoint())

        assert isinstance(event, CheckpointEvent)
        assert event.status == "progress"
        assert event.next_planned == "Write tests"
        assert event.blocker is None

    def test_stuck_with_blocker(self) -> None:
        event = ThoughtStreamHandler().validate_checkpoint_event(
            _checkpoint(status="stuck", nextPlanned=None, blocker="No credentials")
        )
        assert event is not None
        assert event.blocker == "No credentials"

    def test_optional_fields_omitted(self) -> None:
        data = _checkpoint(status="complete")
        del data["nextPlanned"]
        assert ThoughtStreamHandler().validate_checkpoint_event(data) is not None

    @pytest.mark.parametrize(
        "data",
        [
            _checkpoint(status="paused"),
            _checkpoint(summary=""),
            _checkpoint(nextPlanned=3),
            _checkpoint(blocker=["x"]),
            _checkpoint(agentName=None),
        ],
    )
    def test_malformed_checkpoints_rejected(self, data: dict[str, Any]) -> None:
        assert ThoughtStreamHandler().validate_checkpoint_event(data) is None

    def test_wire_names_round_trip(self) -> None:
        event = ThoughtStreamHandler().validate_checkpoint_event(_checkpoint())
        assert event is not None
        dumped = event.model_dump(by_alias=True, exclude_none=True)
        assert dumped["taskId"] == "task-1"
        assert dumped["nextPlanned"] == "Write tests"
