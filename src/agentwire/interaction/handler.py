"""Correlates agent permission and question requests with UI answers."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from agentwire.constants import DEFAULT_INTERACTION_TIMEOUT
from agentwire.interaction.models import (
    CONTENT_PREVIEW_LIMIT,
    FilePermissionRequestData,
    InteractionKind,
    PermissionRequest,
    QuestionRequestData,
    QuestionResponse,
    ValidationResult,
)

logger = logging.getLogger(__name__)

#: Answer delivered when a question times out unanswered.
_DECLINED = QuestionResponse(denied=True)


@dataclass
class _PendingInteraction:
    """One outstanding request awaiting a UI decision."""

    request_id: str
    kind: InteractionKind
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None
    created_at: float = field(default_factory=time.monotonic)


class PermissionRequestHandler:
    """Creates, times out and resolves permission and question requests.

    Each ``create_*`` call returns a request id and an ``asyncio.Future``.
    The future settles exactly once: either when the UI calls the matching
    ``resolve_*`` method or when the timeout fires, whichever happens
    first.  Timeouts deny permissions and decline questions.

    All bookkeeping happens on the event loop thread, so no lock is needed.
    """

    def __init__(self, default_timeout: float = DEFAULT_INTERACTION_TIMEOUT) -> None:
        self._default_timeout = default_timeout
        self._pending_permissions: dict[str, _PendingInteraction] = {}
        self._pending_questions: dict[str, _PendingInteraction] = {}

    @property
    def default_timeout(self) -> float:
        """Seconds a request waits when no explicit timeout is given."""
        return self._default_timeout

    # ------------------------------------------------------------------ #
    # Request lifecycle
    # ------------------------------------------------------------------ #

    def create_permission_request(
        self, timeout: float | None = None
    ) -> tuple[str, asyncio.Future[bool]]:
        """Register a permission request.

        Must be called from a running event loop.  The returned future
        resolves to ``True``/``False`` from the UI, or ``False`` on timeout.
        """
        request_id = self._new_request_id("filereq", self._pending_permissions)
        future = self._register(
            self._pending_permissions, request_id, "permission", timeout, False
        )
        return request_id, future

    def create_question_request(
        self, timeout: float | None = None
    ) -> tuple[str, asyncio.Future[QuestionResponse]]:
        """Register a question request.

        The returned future resolves to the user's :class:`QuestionResponse`,
        or ``QuestionResponse(denied=True)`` on timeout.
        """
        request_id = self._new_request_id("questionreq", self._pending_questions)
        future = self._register(
            self._pending_questions, request_id, "question", timeout, _DECLINED
        )
        return request_id, future

    def resolve_permission_request(self, request_id: str, allowed: bool) -> bool:
        """Deliver the UI's permission decision.

        Returns ``False`` when *request_id* is unknown, already resolved or
        timed out; nothing else happens in that case.
        """
        return self._settle(self._pending_permissions, request_id, bool(allowed))

    def resolve_question_request(
        self,
        request_id: str,
        response: QuestionResponse | Mapping[str, Any],
    ) -> bool:
        """Deliver the UI's answer to a question.

        *response* may be a :class:`QuestionResponse` or its camelCase
        mapping (``selectedOptions``, ``customText``, ``denied``).  A
        malformed mapping is rejected with ``False`` and the request stays
        pending.
        """
        if request_id not in self._pending_questions:
            return False
        if not isinstance(response, QuestionResponse):
            try:
                response = QuestionResponse.model_validate(response)
            except ValidationError as exc:
                logger.warning(
                    "Rejected answer for question request %s: %s",
                    request_id,
                    _describe(exc),
                )
                return False
        return self._settle(self._pending_questions, request_id, response)

    # ------------------------------------------------------------------ #
    # Introspection & teardown
    # ------------------------------------------------------------------ #

    def has_pending_permissions(self) -> bool:
        return bool(self._pending_permissions)

    def has_pending_questions(self) -> bool:
        return bool(self._pending_questions)

    def get_pending_permission_count(self) -> int:
        return len(self._pending_permissions)

    def get_pending_question_count(self) -> int:
        return len(self._pending_questions)

    def clear_all(self) -> None:
        """Drop every pending request and cancel its timer.

        Futures are left unsettled: no timeout or resolution fires for a
        request once it has been cleared.
        """
        for registry in (self._pending_permissions, self._pending_questions):
            for pending in registry.values():
                if pending.timer is not None:
                    pending.timer.cancel()
            registry.clear()

    # ------------------------------------------------------------------ #
    # Validation & record building
    # ------------------------------------------------------------------ #

    def validate_file_permission_request(self, data: object) -> ValidationResult:
        """Check an untrusted file-permission payload.  Never raises."""
        return _validate(FilePermissionRequestData, data)

    def validate_question_request(self, data: object) -> ValidationResult:
        """Check an untrusted question payload.  Never raises."""
        return _validate(QuestionRequestData, data)

    def build_file_permission_request(
        self,
        request_id: str,
        task_id: str,
        data: FilePermissionRequestData | Mapping[str, Any],
    ) -> PermissionRequest:
        """Build the UI-facing record for a validated file-permission payload.

        Raises ``pydantic.ValidationError`` if *data* was not validated first.
        """
        if not isinstance(data, FilePermissionRequestData):
            data = FilePermissionRequestData.model_validate(data)

        preview = data.content_preview
        if preview is not None:
            preview = preview[:CONTENT_PREVIEW_LIMIT]

        return PermissionRequest(
            id=request_id,
            task_id=task_id,
            type="file",
            file_operation=data.operation,
            file_path=data.file_path,
            file_paths=list(data.file_paths) if data.file_paths else None,
            target_path=data.target_path,
            content_preview=preview,
            created_at=_iso_now(),
        )

    def build_question_request(
        self,
        request_id: str,
        task_id: str,
        data: QuestionRequestData | Mapping[str, Any],
    ) -> PermissionRequest:
        """Build the UI-facing record for a validated question payload."""
        if not isinstance(data, QuestionRequestData):
            data = QuestionRequestData.model_validate(data)

        return PermissionRequest(
            id=request_id,
            task_id=task_id,
            type="question",
            question=data.question,
            header=data.header,
            options=list(data.options) if data.options is not None else None,
            multi_select=data.multi_select,
            created_at=_iso_now(),
        )

    # ------------------------------------------------------------------ #
    # Internal
    # ------------------------------------------------------------------ #

    def _register(
        self,
        registry: dict[str, _PendingInteraction],
        request_id: str,
        kind: InteractionKind,
        timeout: float | None,
        timeout_result: object,
    ) -> asyncio.Future[Any]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        pending = _PendingInteraction(request_id=request_id, kind=kind, future=future)

        delay = self._default_timeout if timeout is None else timeout
        pending.timer = loop.call_later(
            delay, self._expire, registry, request_id, timeout_result
        )
        registry[request_id] = pending
        future.add_done_callback(
            functools.partial(self._discard_cancelled, registry, request_id)
        )

        logger.debug("Created %s request %s (timeout %.1fs)", kind, request_id, delay)
        return future

    def _settle(
        self,
        registry: dict[str, _PendingInteraction],
        request_id: str,
        result: object,
    ) -> bool:
        pending = registry.pop(request_id, None)
        if pending is None:
            return False
        if pending.timer is not None:
            pending.timer.cancel()
        if pending.future.done():
            return False
        pending.future.set_result(result)
        logger.debug("Resolved %s request %s", pending.kind, request_id)
        return True

    def _expire(
        self,
        registry: dict[str, _PendingInteraction],
        request_id: str,
        timeout_result: object,
    ) -> None:
        pending = registry.pop(request_id, None)
        if pending is None or pending.future.done():
            return
        elapsed = time.monotonic() - pending.created_at
        logger.info(
            "%s request %s timed out after %.1fs", pending.kind, request_id, elapsed
        )
        pending.future.set_result(timeout_result)

    @staticmethod
    def _discard_cancelled(
        registry: dict[str, _PendingInteraction],
        request_id: str,
        future: asyncio.Future[Any],
    ) -> None:
        """Forget a request whose awaiting caller cancelled the future."""
        if not future.cancelled():
            return
        pending = registry.get(request_id)
        if pending is None or pending.future is not future:
            return
        del registry[request_id]
        if pending.timer is not None:
            pending.timer.cancel()

    @staticmethod
    def _new_request_id(prefix: str, registry: Mapping[str, object]) -> str:
        while True:
            request_id = f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
            if request_id not in registry:
                return request_id


def _validate(
    model: type[FilePermissionRequestData | QuestionRequestData], data: object
) -> ValidationResult:
    if not isinstance(data, Mapping):
        return ValidationResult(valid=False, error="request data must be an object")
    try:
        model.model_validate(dict(data))
    except ValidationError as exc:
        return ValidationResult(valid=False, error=_describe(exc))
    return ValidationResult(valid=True)


def _describe(exc: ValidationError) -> str:
    """Render the first validation problem as ``field: message``."""
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err["loc"])
    message = err["msg"].removeprefix("Value error, ")
    return f"{loc}: {message}" if loc else message


def _iso_now() -> str:
    """Return the current UTC time as ISO 8601 with milliseconds."""
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
