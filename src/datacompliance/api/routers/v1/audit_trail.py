"""Audit trail endpoints.

Reading requires the view capability. Changing or removing an entry is
refused for every actor; the handlers exist only to answer with 403.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from datacompliance.api.dependencies import get_actor, get_audit_trail
from datacompliance.api.schemas.compliance import AuditEntryListResponse
from datacompliance.audit.trail import MAX_PAGE_SIZE, AuditTrail
from datacompliance.audit.types import AuditEntry
from datacompliance.core.context import Actor

router = APIRouter(prefix="/audit-trail", tags=["audit-trail"])

_immutable = {403: {"description": "Audit entries are immutable"}}


@router.get(
    "",
    response_model=AuditEntryListResponse,
    summary="List audit entries",
    responses={403: {"description": "The actor may not view the audit trail"}},
)
async def list_audit_entries(
    trail: Annotated[AuditTrail, Depends(get_audit_trail)],
    actor: Annotated[Actor, Depends(get_actor)],
    subject_id: Annotated[int | None, Query(description="Filter by erased user")] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> AuditEntryListResponse:
    entries = await trail.list_entries(actor, subject_id=subject_id, limit=limit, offset=offset)
    return AuditEntryListResponse(entries=entries, limit=limit, offset=offset)


@router.get(
    "/{entry_id}",
    response_model=AuditEntry,
    summary="Get one audit entry",
    responses={403: {"description": "The actor may not view the audit trail"}},
)
async def get_audit_entry(
    entry_id: UUID,
    trail: Annotated[AuditTrail, Depends(get_audit_trail)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> AuditEntry:
    return await trail.get_entry(actor, entry_id)


@router.put("/{entry_id}", summary="Always refused", responses=_immutable)
@router.patch("/{entry_id}", summary="Always refused", responses=_immutable)
async def update_audit_entry(
    entry_id: UUID,
    trail: Annotated[AuditTrail, Depends(get_audit_trail)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> None:
    await trail.update_entry(actor, entry_id)


@router.delete("/{entry_id}", summary="Always refused", responses=_immutable)
async def delete_audit_entry(
    entry_id: UUID,
    trail: Annotated[AuditTrail, Depends(get_audit_trail)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> None:
    await trail.delete_entry(actor, entry_id)
