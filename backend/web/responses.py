"""JSON response helpers shared by the API routers."""
from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from backend.scheduling.errors import SchedulingError

_PRIVATE = {"Cache-Control": "private, no-store"}


def json_private(payload: Any, *, status_code: int = 200) -> JSONResponse:
    """Return a JSONResponse with cache disabled for shared caches and browsers.

    Responses carry user- and role-scoped data, so proxies must not keep them.
    """
    return JSONResponse(content=payload, status_code=status_code, headers=dict(_PRIVATE))


def private_error(payload: dict, *, status_code: int) -> JSONResponse:
    return JSONResponse(content=payload, status_code=status_code, headers=dict(_PRIVATE))


def error_response(exc: SchedulingError) -> JSONResponse:
    """Map a scheduling error to `{"error": ..., "detail": ...}`.

    `detail` is omitted when it would only repeat the error class code.
    """
    body = {"error": exc.error}
    if exc.code and exc.code != exc.error:
        body["detail"] = exc.code
    return private_error(body, status_code=exc.status_code)


__all__ = ["json_private", "private_error", "error_response"]
