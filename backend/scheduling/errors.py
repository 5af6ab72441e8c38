"""
Error taxonomy for scheduling use cases.

Each error carries a machine-readable `code` and the HTTP status the web
adapter maps it to. They also subclass the builtin that matches their meaning
so framework-free callers can catch `PermissionError`/`LookupError`/`ValueError`.
"""
from __future__ import annotations


class SchedulingError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, code: str | None = None):
        super().__init__(code or self.error)
        self.code = code or self.error


class Unauthorized(SchedulingError):
    status_code = 401
    error = "unauthenticated"


class Forbidden(SchedulingError, PermissionError):
    status_code = 403
    error = "forbidden"


class NotFound(SchedulingError, LookupError):
    status_code = 404
    error = "not_found"


class InvalidArgument(SchedulingError, ValueError):
    status_code = 400
    error = "bad_request"


__all__ = ["SchedulingError", "Unauthorized", "Forbidden", "NotFound", "InvalidArgument"]
