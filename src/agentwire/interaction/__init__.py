"""Permission and question request correlation."""

from agentwire.interaction.handler import PermissionRequestHandler
from agentwire.interaction.models import (
    FileOperation,
    FilePermissionRequestData,
    PermissionRequest,
    QuestionOption,
    QuestionRequestData,
    QuestionResponse,
    ValidationResult,
)

__all__ = [
    "FileOperation",
    "FilePermissionRequestData",
    "PermissionRequest",
    "PermissionRequestHandler",
    "QuestionOption",
    "QuestionRequestData",
    "QuestionResponse",
    "ValidationResult",
]
