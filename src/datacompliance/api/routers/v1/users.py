"""Per-user endpoints: hold query, erasure and export."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response
from fastapi.responses import JSONResponse

from datacompliance.api.dependencies import get_actor, get_service
from datacompliance.api.schemas.compliance import ErasureRequest, ExportFormat
from datacompliance.core.context import Actor
from datacompliance.core.logging import get_logger
from datacompliance.erasure.types import ErasureOutcome
from datacompliance.export.renderers import render_xml, tree_to_dict
from datacompliance.holds.types import HoldVerdict
from datacompliance.service import DataComplianceService

logger = get_logger(__name__)

router = APIRouter(prefix="/users/{user_id}", tags=["users"])

UserIdPath = Annotated[int, Path(description="Identifier of the data subject", ge=1)]


@router.get(
    "/holds",
    response_model=HoldVerdict,
    summary="Check whether the user may be deleted right now",
)
async def query_holds(
    user_id: UserIdPath,
    service: Annotated[DataComplianceService, Depends(get_service)],
) -> HoldVerdict:
    """Read-only hold check, for display before an erasure is requested."""
    return await service.query_holds(user_id)


@router.post(
    "/erasure",
    response_model=ErasureOutcome,
    summary="Erase the user's personal data",
    responses={
        200: {"description": "Every domain was erased"},
        409: {"description": "A hold vetoed the erasure, or the user is already being processed"},
        500: {"description": "Erasure ran but could not be audited"},
        502: {"description": "Erasure did not complete; the body is the recorded outcome"},
    },
)
async def request_erasure(
    user_id: UserIdPath,
    body: ErasureRequest,
    service: Annotated[DataComplianceService, Depends(get_service)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> ErasureOutcome | JSONResponse:
    outcome = await service.request_erasure(user_id, body.request_type, actor=actor)

    if not outcome.is_complete:
        logger.warning("erasure_incomplete_response", user_id=user_id, status=outcome.status.value)
        return JSONResponse(status_code=502, content=outcome.model_dump(mode="json"))

    return outcome


@router.get(
    "/export",
    summary="Export all personal data held about the user",
    responses={
        200: {
            "content": {"application/json": {}, "application/xml": {}},
            "description": "Export tree; sections of failed domains are empty and carry a warning",
        },
        409: {"description": "The user is being erased"},
    },
)
async def request_export(
    user_id: UserIdPath,
    service: Annotated[DataComplianceService, Depends(get_service)],
    format: Annotated[ExportFormat, Query(description="json or xml")] = ExportFormat.JSON,
) -> Response:
    tree = await service.request_export(user_id)

    if format == ExportFormat.XML:
        return Response(content=render_xml(tree), media_type="application/xml")
    return JSONResponse(content=tree_to_dict(tree))
