"""
Application Exceptions.

Every client-visible failure is an EwersError subclass carrying a stable
error code and HTTP status. Handlers registered on the app render them in
one envelope:

    {"error": {"code", "message", "field", "details"}, "request_id"}

LLMError and ScoringError are internal to analysis and never reach here.
"""

from enum import Enum
from typing import Any, Dict, Optional

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


# ── Error codes ─────────────────────────────────────────────────────────


class ErrorCode(str, Enum):
    # General errors (1xxx)
    INTERNAL_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    NOT_FOUND = "E1002"

    # Authentication errors (2xxx)
    UNAUTHORIZED = "E2000"
    FORBIDDEN = "E2001"

    # Domain errors (4xxx)
    INSUFFICIENT_DATA = "E4000"
    INVALID_TRANSITION = "E4001"


# ── Envelope ────────────────────────────────────────────────────────────


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standard error response returned by every handled API error."""

    error: ErrorDetail
    request_id: Optional[str] = None


# ── Exceptions ──────────────────────────────────────────────────────────


class EwersError(Exception):
    """Base exception for the EWERS core."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.field = field
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.code.value,
                message=self.message,
                field=self.field,
                details=self.details or None,
            ),
            request_id=request_id,
        )


class ValidationFailedError(EwersError):
    """Request body or parameter failed validation."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details,
            field=field,
        )


class NotFoundError(EwersError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource.capitalize()} not found",
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details={"resource": resource, "id": str(resource_id)},
        )


class AuthenticationError(EwersError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, code=ErrorCode.UNAUTHORIZED, status_code=401)


class PermissionDeniedError(EwersError):
    def __init__(self, message: str = "Admin access required", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.FORBIDDEN,
            status_code=403,
            details=details,
        )


class InvalidTransitionError(EwersError):
    """A verification transition is not allowed from the incident's current state."""

    def __init__(self, incident_id: int, current_status: str, target_status: str):
        super().__init__(
            message=f"Incident {incident_id} cannot move from '{current_status}' to '{target_status}'",
            code=ErrorCode.INVALID_TRANSITION,
            status_code=409,
            details={
                "incident_id": incident_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class InsufficientDataError(EwersError):
    """Not enough incidents or indicators to produce an analysis."""

    def __init__(self, message: str = "Insufficient data for analysis", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.INSUFFICIENT_DATA,
            status_code=400,
            details=details,
        )


# ── Handlers ────────────────────────────────────────────────────────────


async def ewers_exception_handler(request: Request, exc: EwersError) -> JSONResponse:
    """Handle EwersError exceptions."""
    request_id = getattr(request.state, "request_id", None)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "ewers_error",
        error_code=exc.code.value,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(request_id).model_dump(),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported as 400 with field-level detail."""
    request_id = getattr(request.state, "request_id", None)
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.warning("request_validation_failed", errors=errors)

    error = ValidationFailedError(
        message="Request validation failed",
        field=errors[0]["field"] if errors else None,
        details={"errors": errors},
    )
    return JSONResponse(status_code=400, content=error.to_response(request_id).model_dump())


def register_exception_handlers(app) -> None:
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(EwersError, ewers_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
