"""Active task registry and thought/checkpoint event validation."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from agentwire.thought.models import CheckpointEvent, ThoughtEvent

logger = logging.getLogger(__name__)


class ThoughtStreamHandler:
    """Tracks which tasks are live and validates their telemetry payloads.

    Validation checks payload shape only.  Whether an event for an inactive
    task should be dropped is left to the caller, who can consult
    :meth:`is_task_active`.
    """

    def __init__(self) -> None:
        self._active_tasks: set[str] = set()

    # ------------------------------------------------------------------ #
    # Task registry
    # ------------------------------------------------------------------ #

    def register_task(self, task_id: str) -> None:
        self._active_tasks.add(task_id)

    def unregister_task(self, task_id: str) -> None:
        self._active_tasks.discard(task_id)

    def is_task_active(self, task_id: str) -> bool:
        return task_id in self._active_tasks

    def get_active_task_ids(self) -> list[str]:
        """Active task ids in sorted order."""
        return sorted(self._active_tasks)

    def clear_all_tasks(self) -> None:
        self._active_tasks.clear()

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate_thought_event(self, data: object) -> ThoughtEvent | None:
        """Parse *data* into a :class:`ThoughtEvent`, or ``None`` if malformed."""
        if not isinstance(data, dict):
            return None
        try:
            return ThoughtEvent.model_validate(data)
        except ValidationError as exc:
            _log_rejection("thought", exc)
            return None

    def validate_checkpoint_event(self, data: object) -> CheckpointEvent | None:
        """Parse *data* into a :class:`CheckpointEvent`, or ``None`` if malformed."""
        if not isinstance(data, dict):
            return None
        try:
            return CheckpointEvent.model_validate(data)
        except ValidationError as exc:
            _log_rejection("checkpoint", exc)
            return None


def _log_rejection(kind: str, exc: ValidationError) -> None:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err["loc"])
    logger.debug("Rejected %s event (%s): %s", kind, loc or "payload", err["msg"])
