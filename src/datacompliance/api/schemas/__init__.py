"""API request and response schemas."""

from .compliance import AuditEntryListResponse, ErasureRequest, ExportFormat
from .errors import APIError, ErrorCode

__all__ = [
    "APIError",
    "AuditEntryListResponse",
    "ErasureRequest",
    "ErrorCode",
    "ExportFormat",
]
