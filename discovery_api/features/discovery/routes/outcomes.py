from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from starlette.requests import Request

from discovery_api.platform.observability.request_logging import http_context, summarize_for_log
from discovery_api.platform.observability.smart_logger import SmartLogger

from ..contracts import OutcomeCreate, OutcomeUpdate, changes_of
from ..dependencies import get_service
from ..errors import MissingId
from ..service import DiscoveryService

router = APIRouter()


@router.get("/outcomes")
async def list_outcomes(request: Request, service: DiscoveryService = Depends(get_service)) -> list[dict[str, Any]]:
    """GET /api/outcomes - all outcomes (canvas roots)."""
    outcomes = service.list_outcomes()
    SmartLogger.log(
        "INFO",
        "Outcomes listed.",
        category="api.outcomes.list.done",
        params={**http_context(request), "count": len(outcomes)},
    )
    return outcomes


@router.post("/outcomes", status_code=201)
async def create_outcome(
    payload: OutcomeCreate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    SmartLogger.log(
        "INFO",
        "Outcome create requested.",
        category="api.outcomes.create.request",
        params={**http_context(request), "inputs": summarize_for_log(payload.model_dump(mode="json"))},
    )
    created = service.create_outcome(payload)
    SmartLogger.log(
        "INFO",
        "Outcome created.",
        category="api.outcomes.create.done",
        params={**http_context(request), "id": created["id"]},
    )
    return created


@router.put("/outcomes")
async def update_outcome(
    payload: OutcomeUpdate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    """PUT /api/outcomes - body `{id, ...fields}`."""
    if not payload.id:
        raise MissingId("Outcome")
    changes = changes_of(payload)
    SmartLogger.log(
        "INFO",
        "Outcome update requested.",
        category="api.outcomes.update.request",
        params={**http_context(request), "id": payload.id, "fields": sorted(changes)},
    )
    return service.update_outcome(payload.id, changes)


@router.delete("/outcomes/{outcome_id}", status_code=204)
async def delete_outcome(
    outcome_id: str,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    """
    DELETE /api/outcomes/{id}
    Opportunities that pointed at the outcome are kept with `outcomeId` cleared.
    """
    service.delete_outcome(outcome_id)
    SmartLogger.log(
        "INFO",
        "Outcome deleted; child opportunities orphaned.",
        category="api.outcomes.delete.done",
        params={**http_context(request), "id": outcome_id},
    )
    return Response(status_code=204)
