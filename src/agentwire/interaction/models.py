"""Pydantic v2 models for permission and question interactions.

Incoming payloads use the agent's camelCase keys (``filePath``,
``multiSelect``, ...); attributes are snake_case and the camelCase names are
kept as aliases so records serialise back to the wire shape with
``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    model_validator,
)

FileOperation = Literal["create", "delete", "rename", "move", "modify", "overwrite"]

InteractionKind = Literal["permission", "question"]

#: Characters of ``contentPreview`` kept on a built permission record.
CONTENT_PREVIEW_LIMIT = 500


class _WireModel(BaseModel):
    """Immutable model for data arriving from the agent or the UI."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class QuestionOption(_WireModel):
    """One selectable answer offered by a question request."""

    label: StrictStr = Field(min_length=1, description="Text shown for the option")
    description: StrictStr | None = Field(
        default=None, description="Optional longer explanation"
    )


class FilePermissionRequestData(_WireModel):
    """Raw payload of a file-operation permission request."""

    operation: FileOperation = Field(description="Requested file operation")
    file_path: StrictStr | None = Field(
        default=None, alias="filePath", description="Single target file"
    )
    file_paths: list[StrictStr] | None = Field(
        default=None, alias="filePaths", description="Multiple target files"
    )
    target_path: StrictStr | None = Field(
        default=None,
        alias="targetPath",
        description="Destination for rename/move operations",
    )
    content_preview: StrictStr | None = Field(
        default=None,
        alias="contentPreview",
        description="Excerpt of content about to be written",
    )

    @model_validator(mode="after")
    def _require_path(self) -> FilePermissionRequestData:
        if not self.file_path and not self.file_paths:
            msg = "either 'filePath' or 'filePaths' is required"
            raise ValueError(msg)
        return self


class QuestionRequestData(_WireModel):
    """Raw payload of a question the agent wants the user to answer."""

    question: StrictStr = Field(min_length=1, description="Question text")
    header: StrictStr | None = Field(default=None, description="Short dialog title")
    options: list[QuestionOption] | None = Field(
        default=None, description="Choices; free text only when omitted"
    )
    multi_select: StrictBool | None = Field(
        default=None,
        alias="multiSelect",
        description="Whether several options may be selected",
    )


class QuestionResponse(_WireModel):
    """The user's answer to a question request."""

    selected_options: list[StrictStr] | None = Field(
        default=None, alias="selectedOptions", description="Chosen option labels"
    )
    custom_text: StrictStr | None = Field(
        default=None, alias="customText", description="Free-text answer"
    )
    denied: StrictBool | None = Field(
        default=None, description="True when the user declined to answer"
    )


class ValidationResult(BaseModel):
    """Outcome of validating an untrusted request payload."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: str | None = None


class PermissionRequest(BaseModel):
    """A fully built permission or question request, ready for the UI."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Correlation id returned by the handler")
    task_id: str = Field(alias="taskId", description="Owning task")
    type: Literal["file", "question"] = Field(description="Request shape")
    file_operation: FileOperation | None = Field(default=None, alias="fileOperation")
    file_path: str | None = Field(default=None, alias="filePath")
    file_paths: list[str] | None = Field(default=None, alias="filePaths")
    target_path: str | None = Field(default=None, alias="targetPath")
    content_preview: str | None = Field(default=None, alias="contentPreview")
    question: str | None = None
    header: str | None = None
    options: list[QuestionOption] | None = None
    multi_select: bool | None = Field(default=None, alias="multiSelect")
    created_at: str = Field(
        alias="createdAt", description="ISO 8601 timestamp with milliseconds"
    )
