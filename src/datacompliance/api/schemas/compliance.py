"""Request and response schemas for the erasure, export and audit endpoints."""

from enum import Enum

from pydantic import BaseModel, Field

from datacompliance.audit.types import AuditEntry
from datacompliance.types import RequestType


class ExportFormat(str, Enum):
    """Serialization of an export tree."""

    JSON = "json"
    XML = "xml"


class ErasureRequest(BaseModel):
    """Body of an erasure request."""

    request_type: RequestType = Field(
        default=RequestType.USER,
        description="Who or what initiated the erasure (user, admin, lifecycle)",
    )


class AuditEntryListResponse(BaseModel):
    """Page of audit entries, newest first."""

    entries: list[AuditEntry]
    limit: int
    offset: int
