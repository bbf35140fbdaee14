from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from starlette.requests import Request

from discovery_api.platform.observability.request_logging import http_context
from discovery_api.platform.observability.smart_logger import SmartLogger

from ..contracts import InterviewCreate, InterviewUpdate, changes_of
from ..dependencies import get_service
from ..errors import MissingId
from ..service import DiscoveryService

router = APIRouter()


@router.get("/interviews")
async def list_interviews(
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> list[dict[str, Any]]:
    """GET /api/interviews - newest first, each with its evidences."""
    interviews = service.list_interviews()
    SmartLogger.log(
        "INFO",
        "Interviews listed.",
        category="api.interviews.list.done",
        params={**http_context(request), "count": len(interviews)},
    )
    return interviews


@router.post("/interviews", status_code=201)
async def create_interview(
    payload: InterviewCreate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    created = service.create_interview(payload)
    SmartLogger.log(
        "INFO",
        "Interview created.",
        category="api.interviews.create.done",
        params={**http_context(request), "id": created["id"]},
    )
    return created


@router.put("/interviews")
async def update_interview(
    payload: InterviewUpdate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    if not payload.id:
        raise MissingId("Interview")
    changes = changes_of(payload)
    SmartLogger.log(
        "INFO",
        "Interview update requested.",
        category="api.interviews.update.request",
        params={**http_context(request), "id": payload.id, "fields": sorted(changes)},
    )
    return service.update_interview(payload.id, changes)


@router.delete("/interviews/{interview_id}", status_code=204)
async def delete_interview(
    interview_id: str,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    """DELETE /api/interviews/{id} - its evidences go with it."""
    service.delete_interview(interview_id)
    SmartLogger.log(
        "INFO",
        "Interview deleted.",
        category="api.interviews.delete.done",
        params={**http_context(request), "id": interview_id},
    )
    return Response(status_code=204)
