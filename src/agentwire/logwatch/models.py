"""Pydantic v2 model for errors detected in agent log files."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LogError(BaseModel):
    """An error classified from a single ``ERROR`` log line."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: str = Field(description="Timestamp token from the line, or now")
    service: str = Field(description="Value of the line's service= token")
    provider_id: str | None = Field(default=None, alias="providerID")
    model_id: str | None = Field(default=None, alias="modelID")
    session_id: str | None = Field(default=None, alias="sessionID")
    error_name: str = Field(alias="errorName", description="Error classification")
    status_code: int | None = Field(default=None, alias="statusCode")
    message: str | None = Field(default=None, description="Human-readable detail")
    raw: str = Field(description="The offending log line, verbatim")
    is_auth_error: bool = Field(
        default=False,
        alias="isAuthError",
        description="True when the user must re-authenticate",
    )

    @property
    def dedup_key(self) -> tuple[str, int | None, str]:
        """Identity used to report a persistent error once per watch session."""
        return (self.error_name, self.status_code, self.session_id or "")
