"""Error response schemas for API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Authorization
    FORBIDDEN = "forbidden"
    AUDIT_IMMUTABLE = "audit_immutable"

    # Request errors
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"

    # Erasure policy
    ERASURE_VETOED = "erasure_vetoed"
    OPERATION_CONFLICT = "operation_conflict"

    # Erasure failures
    ERASURE_INCOMPLETE = "erasure_incomplete"
    AUDIT_WRITE_FAILED = "audit_write_failed"

    # System errors
    STORE_UNAVAILABLE = "store_unavailable"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"


class APIError(BaseModel):
    """Standardized API error response format."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error context"
    )
    request_id: str = Field(..., description="Request ID for tracing (UUIDv7)")
    timestamp: datetime = Field(..., description="When the error occurred")

    model_config = {"json_schema_extra": {"example": {
        "error_code": "erasure_vetoed",
        "message": "Deletion is not permitted right now: The user has 1 settled "
        "subscription(s) created within the last 90 days",
        "details": {"hold": "recent_settlement:subscriptions"},
        "request_id": "019478f2-1234-7000-8000-abcdef123456",
        "timestamp": "2026-01-30T12:00:00Z",
    }}}
