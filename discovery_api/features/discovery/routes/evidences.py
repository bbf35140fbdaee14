from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from starlette.requests import Request

from discovery_api.platform.observability.request_logging import http_context
from discovery_api.platform.observability.smart_logger import SmartLogger

from ..contracts import EvidenceCreate
from ..dependencies import get_service
from ..service import DiscoveryService

router = APIRouter()


@router.get("/evidences")
async def list_evidence(
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> list[dict[str, Any]]:
    evidence = service.list_evidence()
    SmartLogger.log(
        "INFO",
        "Evidence listed.",
        category="api.evidences.list.done",
        params={**http_context(request), "count": len(evidence)},
    )
    return evidence


@router.post("/evidences", status_code=201)
async def create_evidence(
    payload: EvidenceCreate,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    created = service.create_evidence(payload)
    SmartLogger.log(
        "INFO",
        "Evidence created.",
        category="api.evidences.create.done",
        params={
            **http_context(request),
            "id": created["id"],
            "interview_id": created.get("interviewId"),
            "type": created.get("type"),
        },
    )
    return created


@router.delete("/evidences/{evidence_id}")
async def delete_evidence(
    evidence_id: str,
    request: Request,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, str]:
    service.delete_evidence(evidence_id)
    SmartLogger.log(
        "INFO",
        "Evidence deleted.",
        category="api.evidences.delete.done",
        params={**http_context(request), "id": evidence_id},
    )
    return {"message": "Evidence deleted successfully"}
