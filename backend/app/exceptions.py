"""
Structured exceptions and error responses for Arbor.

Provides consistent error handling across the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import get_settings
from app.logging_config import get_logger

logger = get_logger("error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "name"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "invalid_parent")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# Documented on every router so the OpenAPI schema shows the error body
ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid request"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Not found"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Store failure"},
}


# =============================================================================
# Custom Exceptions
# =============================================================================

class ArborException(Exception):
    """Base exception for all Arbor errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(ArborException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidParentError(ArborException):
    """The parent referenced by a new task cannot hold it."""

    def __init__(self, parent_id: int, reason: Optional[str] = None):
        details = None
        if reason:
            details = [{"loc": ["body", "parentID"], "msg": reason, "type": "invalid_parent"}]
        super().__init__(
            message="Parent task not found" if reason is None else "Invalid parent task",
            error_code="invalid_parent",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )
        self.parent_id = parent_id


class InvalidRequestError(ArborException):
    """Missing or unusable request fields."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="invalid_request",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class TransactionError(ArborException):
    """The store failed in the middle of a multi-step mutation."""

    def __init__(self, operation: str, diagnostic: Optional[str] = None):
        super().__init__(
            message=f"Failed to {operation}",
            error_code="transaction_failed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        self.operation = operation
        self.diagnostic = diagnostic


# =============================================================================
# Exception Handlers
# =============================================================================

def _diagnostic_details(diagnostic: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """Diagnostics are only exposed outside production."""
    if not diagnostic or get_settings().is_production:
        return None
    return [{"loc": None, "msg": diagnostic, "type": "diagnostic"}]


async def arbor_exception_handler(request: Request, exc: ArborException) -> JSONResponse:
    """Handle ArborException and return structured response."""
    details = exc.details
    if isinstance(exc, TransactionError):
        details = _diagnostic_details(exc.diagnostic)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": details,
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as bad requests."""
    errors = exc.errors()
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing"]
    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = "Invalid request fields"

    logger.debug(f"Rejected request to {request.url.path}: {message}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_request",
            "message": message,
            "details": [
                {
                    "loc": [str(part) for part in err.get("loc", ())],
                    "msg": err.get("msg", ""),
                    "type": err.get("type", "value_error"),
                }
                for err in errors
            ],
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": _diagnostic_details(str(exc)),
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ArborException, arbor_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
