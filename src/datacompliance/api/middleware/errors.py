"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Callable
from uuid import UUID

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from datacompliance.api.schemas.errors import APIError, ErrorCode
from datacompliance.core.exceptions import (
    AuditAccessDenied,
    AuditEntryNotFound,
    AuditMutationDenied,
    AuditWriteFailed,
    ConcurrentOperationConflict,
    ConfigurationError,
    HoldVeto,
    StoreUnavailable,
)
from datacompliance.core.logging import get_logger, log_exception

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    "You may not delete this account right now" (409) and "the system could
    not complete deletion" (5xx) are always distinct responses.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        request_id = self._get_request_id(request)
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            log_exception(logger, exc, path=request.url.path, status_code=status_code)

        error = APIError(
            error_code=error_code,
            message=message,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(UTC),
        )

        return JSONResponse(
            status_code=status_code,
            content=error.model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    def _get_request_id(self, request: Request) -> str:
        """Extract request ID from state or generate placeholder."""
        if hasattr(request.state, "request_id"):
            rid = request.state.request_id
            return str(rid) if isinstance(rid, UUID) else rid
        return "unknown"

    def _map_exception(
        self, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        # Policy: a hold forbids deletion right now
        if isinstance(exc, HoldVeto):
            return (
                409,
                ErrorCode.ERASURE_VETOED.value,
                exc.user_message,
                {"hold": exc.hold_name},
            )

        if isinstance(exc, ConcurrentOperationConflict):
            return (
                409,
                ErrorCode.OPERATION_CONFLICT.value,
                exc.args[0],
                {"running": exc.running, "requested": exc.requested},
            )

        # Erasure happened but was not audited
        if isinstance(exc, AuditWriteFailed):
            return (
                500,
                ErrorCode.AUDIT_WRITE_FAILED.value,
                "The data was erased but the erasure could not be recorded in the audit trail",
                {"outcome": exc.outcome.model_dump(mode="json")},
            )

        # Audit trail
        if isinstance(exc, AuditAccessDenied):
            return (403, ErrorCode.FORBIDDEN.value, str(exc), None)

        if isinstance(exc, AuditMutationDenied):
            return (403, ErrorCode.AUDIT_IMMUTABLE.value, str(exc), {"task": exc.task})

        if isinstance(exc, AuditEntryNotFound):
            return (404, ErrorCode.NOT_FOUND.value, str(exc), {"entry_id": str(exc.entry_id)})

        # Infrastructure
        if isinstance(exc, StoreUnavailable):
            return (
                503,
                ErrorCode.STORE_UNAVAILABLE.value,
                "A data store is unavailable; retry later",
                {"domain": exc.domain, "operation": exc.operation},
            )

        if isinstance(exc, ConfigurationError):
            return (503, ErrorCode.SERVICE_UNAVAILABLE.value, str(exc), None)

        # Validation errors (Pydantic)
        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                {"errors": exc.errors(include_input=False)},
            )

        # Generic exceptions
        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self.debug else None,
        )
