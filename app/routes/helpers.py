"""Shared helpers for the JSON API routes.

Every response is an envelope: {"success": true, "data": ...} on success,
{"success": false, "message": ...} on failure, plus any extra keys.
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, *, status_code: int = 200, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_response(message: str, *, status_code: int, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def validation_error_response(errors: dict[str, str]) -> JSONResponse:
    """400 envelope listing every invalid field."""
    return error_response(
        "Validation failed",
        status_code=400,
        issues=[{"path": path, "message": message} for path, message in errors.items()],
    )


def pagination_dict(page: int, limit: int, total: int, pages: int) -> dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": pages}
