"""Error taxonomy & redaction.

Exceptions raised by reviewbridge all derive from :class:`ReviewBridgeError`.
Only configuration problems and unknown issue keys are fatal; per-issue
transport failures are folded into the boolean result of batch operations
and reported through the logger after passing through :func:`classify_error`.

Public API:
- ReviewBridgeError, ConfigError, IssueNotFoundError, JiraAPIError, PlatformError
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"glpat-[A-Za-z0-9_\-]{20,}"),  # GitLab personal access tokens
    re.compile(r"ATATT[A-Za-z0-9_\-=]{20,}"),  # Atlassian API tokens
    re.compile(r"(?i)(authorization:\s*(?:basic|bearer)\s+)[A-Za-z0-9+/=._\-]+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429


class ReviewBridgeError(RuntimeError):
    """Base class for reviewbridge failures."""


class ConfigError(ReviewBridgeError):
    """A required connection parameter is missing or malformed."""


class PlatformError(ReviewBridgeError):
    """The review-platform context (event payload, CI variables) is unusable."""


class JiraAPIError(ReviewBridgeError):
    """Raised when the Jira REST API answers with an error status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class IssueNotFoundError(JiraAPIError):
    """A resolved issue key is unknown to the tracker."""

    def __init__(self, key: str, *, response_text: str | None = None):
        super().__init__(
            f"Jira issue {key} not found",
            status=HTTP_NOT_FOUND,
            response_text=response_text,
        )
        self.key = key


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace credential-looking substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - JiraAPIError 401/403 -> 'jira.auth'
    - JiraAPIError 404 -> 'jira.not_found'
    - JiraAPIError 429 or rate-limit wording -> 'jira.rate_limit'
    - timeouts / connection problems -> 'network'
    - YAML / JSON parse errors -> 'parse'
    - anything else -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, JiraAPIError) and exc.status is not None:
        details = {"status": exc.status}
        if exc.status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            return ErrorInfo("jira.auth", redact(msg), name, details=details)
        if exc.status == HTTP_NOT_FOUND:
            return ErrorInfo("jira.not_found", redact(msg), name, details=details)
        if exc.status == HTTP_TOO_MANY_REQUESTS:
            return ErrorInfo("jira.rate_limit", redact(msg), name, details=details)
    if "rate limit" in low:
        return ErrorInfo("jira.rate_limit", redact(msg), name)
    if any(k in low for k in ("timeout", "timed out", "connection", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name)
    if any(k in low for k in ("yaml", "json", "scannererror", "parsererror")):
        return ErrorInfo("parse", redact(msg), name)
    return ErrorInfo("generic", redact(msg), name)


__all__ = [
    "ConfigError",
    "ErrorInfo",
    "IssueNotFoundError",
    "JiraAPIError",
    "PlatformError",
    "ReviewBridgeError",
    "classify_error",
    "redact",
]
