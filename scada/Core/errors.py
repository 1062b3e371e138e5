"""
scada/Core/errors.py
==========================
Error Taxonomy
==========================

Every failure the core reports to a caller is one of these exceptions. Each
carries an HTTP status and a single human-readable message; the handler
registered in main.py renders them as {"error": message}.

    ScadaError
    ├── UnauthorizedError        401  missing / unrecognized token
    │   └── ForbiddenError       401 (403 with SPLIT_FORBIDDEN_STATUS)
    ├── NotFoundError            404
    ├── ValidationFailed         400
    │   ├── NoFieldsProvided
    │   └── InvalidFieldValue
    ├── ConflictError            409  unique-constraint violation
    └── InternalStorageError     500
        └── PostUpdateReadFailed

None of these are retried. Telemetry ingestion is the only place where a
storage failure (the history append) is logged and dropped.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scada.Core.config import settings


class ScadaError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(ScadaError):
    status_code = 401
    default_message = "Missing token"


class ForbiddenError(UnauthorizedError):
    """
    A recognized identity that lacks the required capability.

    Subclasses UnauthorizedError so callers that only care about "denied"
    can catch one type. The rendered status depends on
    settings.SPLIT_FORBIDDEN_STATUS.
    """

    default_message = "Access denied"

    @property
    def http_status(self) -> int:
        return 403 if settings.SPLIT_FORBIDDEN_STATUS else 401


class NotFoundError(ScadaError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(ScadaError):
    status_code = 400
    default_message = "Invalid request"


class NoFieldsProvided(ValidationFailed):
    default_message = "No fields to update"


class InvalidFieldValue(ValidationFailed):
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ConflictError(ScadaError):
    status_code = 409
    default_message = "Resource already exists"


class InternalStorageError(ScadaError):
    status_code = 500
    default_message = "Database error"


class PostUpdateReadFailed(InternalStorageError):
    default_message = "Update applied but the record could not be re-read"


def http_status_for(exc: ScadaError) -> int:
    if isinstance(exc, ForbiddenError):
        return exc.http_status
    return exc.status_code


# ============================================================
# FASTAPI EXCEPTION HANDLERS
# ============================================================

async def scada_error_handler(request: Request, exc: ScadaError) -> JSONResponse:
    return JSONResponse(status_code=http_status_for(exc), content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse FastAPI's error list into the single-message body used everywhere else."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "; ".join(parts) or "Invalid request"
    return JSONResponse(status_code=422, content={"error": message})
