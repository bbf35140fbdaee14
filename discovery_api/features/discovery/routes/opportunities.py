from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from starlette.requests import Request

from discovery_api.platform.observability.request_logging import http_context, summarize_for_log
from discovery_api.platform.observability.smart_logger import SmartLogger

from ..contracts import OpportunityCreate, OpportunityUpdate, changes_of
from ..dependencies import get_service
from ..errors import MissingId
from ..service import DiscoveryService

router = APIRouter()


@router.get("/opportunities")
async def list_opportunities(
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> list[dict[str, Any]]:
    """
    GET /api/opportunities

    Each opportunity carries its linked `evidences` (with their interview)
    and `_count.solutions`.
    """
    opportunities = service.list_opportunities()
    SmartLogger.log(
        "INFO",
        "Opportunities listed.",
        category="api.opportunities.list.done",
        params={**http_context(request), "count": len(opportunities)},
    )
    return opportunities


@router.post("/opportunities", status_code=201)
async def create_opportunity(
    payload: OpportunityCreate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    SmartLogger.log(
        "INFO",
        "Opportunity create requested.",
        category="api.opportunities.create.request",
        params={**http_context(request), "inputs": summarize_for_log(payload.model_dump(mode="json"))},
    )
    created = service.create_opportunity(payload)
    SmartLogger.log(
        "INFO",
        "Opportunity created.",
        category="api.opportunities.create.done",
        params={
            **http_context(request),
            "id": created["id"],
            "outcome_id": created.get("outcomeId"),
            "parent_id": created.get("parentId"),
        },
    )
    return created


@router.put("/opportunities")
async def update_opportunity(
    payload: OpportunityUpdate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    """
    PUT /api/opportunities

    - RICE score is recomputed when any RICE component is sent.
    - `evidenceIds` replaces the full set of linked evidence.
    """
    if not payload.id:
        raise MissingId("Opportunity")
    changes = changes_of(payload)
    SmartLogger.log(
        "INFO",
        "Opportunity update requested.",
        category="api.opportunities.update.request",
        params={**http_context(request), "id": payload.id, "fields": sorted(changes)},
    )
    updated = service.update_opportunity(payload.id, changes)
    SmartLogger.log(
        "INFO",
        "Opportunity updated.",
        category="api.opportunities.update.done",
        params={
            **http_context(request),
            "id": payload.id,
            "rice_score": updated.get("riceScore"),
            "evidence_count": len(updated.get("evidences") or []),
        },
    )
    return updated


@router.delete("/opportunities/{opportunity_id}", status_code=204)
async def delete_opportunity(
    opportunity_id: str,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    service.delete_opportunity(opportunity_id)
    SmartLogger.log(
        "INFO",
        "Opportunity deleted.",
        category="api.opportunities.delete.done",
        params={**http_context(request), "id": opportunity_id},
    )
    return Response(status_code=204)
