from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from starlette.requests import Request

from discovery_api.platform.observability.request_logging import http_context, summarize_for_log
from discovery_api.platform.observability.smart_logger import SmartLogger

from ..contracts import SolutionCreate, SolutionUpdate, changes_of
from ..dependencies import get_service
from ..errors import MissingId
from ..service import DiscoveryService

router = APIRouter()


@router.get("/solutions")
async def list_solutions(
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> list[dict[str, Any]]:
    solutions = service.list_solutions()
    SmartLogger.log(
        "INFO",
        "Solutions listed.",
        category="api.solutions.list.done",
        params={**http_context(request), "count": len(solutions)},
    )
    return solutions


@router.post("/solutions", status_code=201)
async def create_solution(
    payload: SolutionCreate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    """POST /api/solutions - the parent opportunity must exist (404 otherwise)."""
    SmartLogger.log(
        "INFO",
        "Solution create requested.",
        category="api.solutions.create.request",
        params={**http_context(request), "inputs": summarize_for_log(payload.model_dump(mode="json"))},
    )
    created = service.create_solution(payload)
    SmartLogger.log(
        "INFO",
        "Solution created.",
        category="api.solutions.create.done",
        params={
            **http_context(request),
            "id": created["id"],
            "opportunity_id": created.get("opportunityId"),
            "assumption_count": len(created.get("assumptions") or []),
        },
    )
    return created


@router.put("/solutions")
async def update_solution(
    payload: SolutionUpdate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    if not payload.id:
        raise MissingId("Solution")
    changes = changes_of(payload)
    SmartLogger.log(
        "INFO",
        "Solution update requested.",
        category="api.solutions.update.request",
        params={**http_context(request), "id": payload.id, "fields": sorted(changes)},
    )
    return service.update_solution(payload.id, changes)


@router.delete("/solutions/{solution_id}", status_code=204)
async def delete_solution(
    solution_id: str,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    service.delete_solution(solution_id)
    SmartLogger.log(
        "INFO",
        "Solution deleted.",
        category="api.solutions.delete.done",
        params={**http_context(request), "id": solution_id},
    )
    return Response(status_code=204)
