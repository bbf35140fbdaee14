from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from starlette.requests import Request

from discovery_api.features.discovery.dependencies import get_repository
from discovery_api.platform.observability.request_logging import RequestTimer, error_context, http_context
from discovery_api.platform.observability.smart_logger import SmartLogger

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(request: Request, repo=Depends(get_repository)) -> dict[str, Any]:
    """Liveness plus a `RETURN 1` round-trip to Neo4j; never fails with 5xx."""
    timer = RequestTimer()
    try:
        repo.ping()
    except Exception as e:
        SmartLogger.log(
            "ERROR",
            "Health check: Neo4j unreachable.",
            category="api.health.error",
            params={**http_context(request), "error": error_context(e), "duration_ms": timer.ms()},
        )
        return {"status": "unhealthy", "error": str(e)}

    SmartLogger.log(
        "INFO",
        "Health check: Neo4j reachable.",
        category="api.health.ok",
        params={**http_context(request), "duration_ms": timer.ms()},
    )
    return {"status": "healthy", "neo4j": "connected"}
