"""Errors raised by the agency API client and their user-facing messages."""

from __future__ import annotations

from typing import Any, Optional

_UPLOAD_CODE_MESSAGES = {
    "LIMIT_FILE_SIZE": "File is too large. Maximum size is 10MB.",
    "LIMIT_FILE_COUNT": "Too many files uploaded.",
    "INVALID_FILE_TYPE": "Invalid file type. Only images are allowed.",
}


class ApiError(Exception):
    """Base class for failures talking to the agency API."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiTransportError(ApiError):
    """The request never produced a usable response (network, timeout, bad JSON)."""


class ApiBusinessError(ApiError):
    """The server answered with a failure envelope."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: Optional[str] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.body = body or {}


def _format_key_value(key_value: Any) -> str:
    if isinstance(key_value, dict) and key_value:
        return ", ".join(f"{key} '{value}'" for key, value in key_value.items())
    return ""


def _format_issues(issues: list[Any]) -> str:
    parts: list[str] = []
    for issue in issues:
        if not isinstance(issue, dict):
            parts.append(str(issue))
            continue
        path = issue.get("path") or issue.get("loc") or ""
        if isinstance(path, (list, tuple)):
            # FastAPI prefixes locations with "body"/"query"
            path = ".".join(str(p) for p in path if p not in ("body", "query", "path"))
        message = issue.get("message") or issue.get("msg") or "Invalid value"
        parts.append(f"{path}: {message}" if path else str(message))
    return "; ".join(parts)


def translate_error_body(body: Any, fallback: str) -> str:
    """Turn a failure envelope into a message fit for a toast.

    Handles duplicate-key reports, validation issue lists (ours and FastAPI's
    `detail` list), upload limit codes and plain `message`/`detail` strings.

    Args:
        body: Decoded JSON response body (anything; non-dicts use fallback)
        fallback: Message to use when the body carries nothing readable

    Returns:
        Human-readable message
    """
    if not isinstance(body, dict):
        return fallback

    code = body.get("code")
    if code == "DUPLICATE_KEY":
        described = _format_key_value(body.get("key_value"))
        if described:
            return f"A season with {described} already exists"
        return body.get("message") or "Duplicate entry"

    if code in _UPLOAD_CODE_MESSAGES:
        return body.get("message") or _UPLOAD_CODE_MESSAGES[code]

    issues = body.get("issues")
    if isinstance(issues, list) and issues:
        return _format_issues(issues)

    detail = body.get("detail")
    if isinstance(detail, list) and detail:
        return _format_issues(detail)
    if isinstance(detail, str) and detail:
        return detail

    message = body.get("message")
    if isinstance(message, str) and message:
        return message

    return fallback
