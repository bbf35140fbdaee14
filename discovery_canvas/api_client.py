"""
Async client for the discovery REST API.

Thin wrapper over httpx: one method per endpoint the canvas needs. Any
non-2xx response becomes an `ApiError` carrying the server's `message`;
4xx and 5xx are not distinguished by callers.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import httpx

from discovery_api.platform.env import get_canvas_api_base_url, get_canvas_http_timeout
from discovery_api.platform.observability.request_logging import RequestTimer, error_context
from discovery_api.platform.observability.smart_logger import SmartLogger

from .types import COLLECTIONS, NodeType, Position, SolutionCandidate


class ApiError(Exception):
    """A failed API call. `status_code` is None for transport failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_message(response: httpx.Response) -> str:
    fallback = f"API Error: {response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


class EntityApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url or get_canvas_api_base_url(),
                headers={"Content-Type": "application/json"},
                timeout=timeout if timeout is not None else get_canvas_http_timeout(),
            )
        self.client = client

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "EntityApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        timer = RequestTimer()
        try:
            response = await self.client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            SmartLogger.log(
                "ERROR",
                "API request failed before a response was received.",
                category="canvas.api.transport_error",
                params={"method": method, "path": path, "error": error_context(e), "duration_ms": timer.ms()},
            )
            raise ApiError(f"API Error: {e}") from e

        if response.status_code >= 400:
            message = error_message(response)
            SmartLogger.log(
                "WARNING",
                "API request returned an error status.",
                category="canvas.api.error_status",
                params={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "message": message,
                    "duration_ms": timer.ms(),
                },
            )
            raise ApiError(message, status_code=response.status_code)

        SmartLogger.log(
            "DEBUG",
            "API request completed.",
            category="canvas.api.done",
            params={"method": method, "path": path, "status_code": response.status_code, "duration_ms": timer.ms()},
        )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"API Error: invalid JSON from {method} {path}", status_code=response.status_code) from e

    # ------------------------------------------------------------------
    # Canvas nodes
    # ------------------------------------------------------------------

    async def list_outcomes(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/outcomes") or []

    async def list_opportunities(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/opportunities") or []

    async def list_solutions(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/solutions") or []

    async def get_canvas_data(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]], List[Dict[str, Any]]]:
        outcomes, opportunities, solutions = await asyncio.gather(
            self.list_outcomes(),
            self.list_opportunities(),
            self.list_solutions(),
        )
        return outcomes, opportunities, solutions

    async def add_node(self, node_type: NodeType, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/{COLLECTIONS[NodeType(node_type)]}", data)

    async def update_node(self, node_type: NodeType, node_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/{COLLECTIONS[NodeType(node_type)]}", {"id": node_id, **data})

    async def delete_node(self, node_type: NodeType, node_id: str) -> None:
        await self._request("DELETE", f"/{COLLECTIONS[NodeType(node_type)]}/{node_id}")

    async def promote_idea_to_solution(
        self,
        candidate: SolutionCandidate,
        opportunity_id: str,
        position: Position,
    ) -> Dict[str, Any]:
        return await self.add_node(
            NodeType.SOLUTION,
            {
                "name": candidate.title,
                "opportunityId": opportunity_id,
                "x_position": position.x,
                "y_position": position.y,
                "assumptions": list(candidate.quickAssumptions),
            },
        )

    # ------------------------------------------------------------------
    # Research data
    # ------------------------------------------------------------------

    async def list_interviews(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/interviews") or []

    async def add_interview(self, interviewee: str, date: str) -> Dict[str, Any]:
        return await self._request("POST", "/interviews", {"interviewee": interviewee, "date": date})

    async def update_interview(self, interview_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/interviews", {"id": interview_id, **data})

    async def delete_interview(self, interview_id: str) -> None:
        await self._request("DELETE", f"/interviews/{interview_id}")

    async def list_evidence(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/evidences") or []

    async def add_evidence(self, evidence_type: str, content: str, interview_id: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/evidences",
            {"type": evidence_type, "content": content, "interviewId": interview_id},
        )

    async def delete_evidence(self, evidence_id: str) -> None:
        await self._request("DELETE", f"/evidences/{evidence_id}")

