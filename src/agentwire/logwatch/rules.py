"""Ordered error-detection rules for agent CLI log lines."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from agentwire.logwatch.models import LogError

#: Literal marker present on every error-level log line.
ERROR_MARKER = "ERROR"

_TIMESTAMP_RE = re.compile(r"^(\w+)\s+(\S+)\s+(\+\d+ms)")
_SERVICE_RE = re.compile(r"service=(\S+)")
_PROVIDER_RE = re.compile(r"providerID=(\S+)")
_MODEL_RE = re.compile(r"modelID=(\S+)")
_SESSION_RE = re.compile(r"sessionID=(\S+)")


@dataclass(frozen=True)
class ErrorMatch:
    """Classification produced by a rule for one line."""

    error_name: str
    status_code: int | None
    message: str
    provider_id: str | None = None
    is_auth_error: bool = False


@dataclass(frozen=True)
class ErrorRule:
    """A pattern plus the function turning its match into an :class:`ErrorMatch`."""

    pattern: re.Pattern[str]
    extract: Callable[[re.Match[str]], ErrorMatch]


def _openai_auth(
    error_name: str, message: str
) -> Callable[[re.Match[str]], ErrorMatch]:
    return lambda _m: ErrorMatch(
        error_name=error_name,
        status_code=401,
        message=message,
        provider_id="openai",
        is_auth_error=True,
    )


_OPENAI_EXPIRED = "Your OpenAI session has expired. Please re-authenticate."

#: First match wins, so specific patterns must precede general ones.
ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        re.compile(
            r"openai.*(?:invalid_api_key|invalid_token|token.*expired"
            r"|oauth.*invalid|Incorrect API key)",
            re.IGNORECASE,
        ),
        _openai_auth("OAuthExpiredError", _OPENAI_EXPIRED),
    ),
    ErrorRule(
        re.compile(
            r'openai.*"status":\s*401|"status":\s*401.*openai'
            r"|providerID=openai.*statusCode.*401",
            re.IGNORECASE,
        ),
        _openai_auth("OAuthUnauthorizedError", _OPENAI_EXPIRED),
    ),
    ErrorRule(
        re.compile(
            r"openai.*authentication.*failed|authentication.*failed.*openai",
            re.IGNORECASE,
        ),
        _openai_auth(
            "OAuthAuthenticationError",
            "OpenAI authentication failed. Please re-authenticate.",
        ),
    ),
    ErrorRule(
        re.compile(r'ThrottlingException.*?"message":"([^"]+)"'),
        lambda m: ErrorMatch(
            error_name="ThrottlingException",
            status_code=429,
            message=m.group(1)
            or "Rate limit exceeded. Please wait before trying again.",
        ),
    ),
    ErrorRule(
        re.compile(
            r'"name":"AI_APICallError".*?"statusCode":(\d+).*?"message":"([^"]+)"'
        ),
        lambda m: ErrorMatch(
            error_name="AI_APICallError",
            status_code=int(m.group(1)),
            message=m.group(2),
        ),
    ),
    ErrorRule(
        re.compile(r'"name":"AI_APICallError".*?"statusCode":(\d+)'),
        lambda m: ErrorMatch(
            error_name="AI_APICallError",
            status_code=int(m.group(1)),
            message=f"API call failed with status {m.group(1)}",
        ),
    ),
    ErrorRule(
        re.compile(
            r"AccessDeniedException|UnauthorizedException|InvalidSignatureException"
        ),
        lambda _m: ErrorMatch(
            error_name="AuthenticationError",
            status_code=403,
            message="Authentication failed. Please check your credentials.",
        ),
    ),
    ErrorRule(
        re.compile(
            r"ModelNotFoundError|ResourceNotFoundException.*model", re.IGNORECASE
        ),
        lambda _m: ErrorMatch(
            error_name="ModelNotFoundError",
            status_code=404,
            message=(
                "The requested model was not found or is not available "
                "in your region."
            ),
        ),
    ),
    ErrorRule(
        re.compile(r'ValidationException.*?"message":"([^"]+)"'),
        lambda m: ErrorMatch(
            error_name="ValidationError",
            status_code=400,
            message=m.group(1) or "Invalid request parameters.",
        ),
    ),
)


def classify_line(
    line: str, rules: tuple[ErrorRule, ...] = ERROR_RULES
) -> LogError | None:
    """Classify an error log line with the first matching rule.

    Returns ``None`` for lines without the ``ERROR`` marker or matching no
    rule.  Provider, model and session ids come from the line's own
    ``key=value`` tokens; a provider fixed by the rule takes precedence.
    """
    if ERROR_MARKER not in line:
        return None

    for rule in rules:
        match = rule.pattern.search(line)
        if match is None:
            continue
        found = rule.extract(match)
        return LogError(
            timestamp=_token(_TIMESTAMP_RE, line, group=2) or _iso_now(),
            service=_token(_SERVICE_RE, line) or "unknown",
            provider_id=found.provider_id or _token(_PROVIDER_RE, line),
            model_id=_token(_MODEL_RE, line),
            session_id=_token(_SESSION_RE, line),
            error_name=found.error_name,
            status_code=found.status_code,
            message=found.message,
            raw=line,
            is_auth_error=found.is_auth_error,
        )
    return None


def _token(pattern: re.Pattern[str], line: str, group: int = 1) -> str | None:
    match = pattern.search(line)
    return match.group(group) if match else None


def _iso_now() -> str:
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
