"""
Log correlation helpers for the REST service and the canvas client.

A request id lives in a contextvar for the duration of one HTTP request, so
every SmartLogger record emitted while serving it can carry the same id.
Payloads are never logged raw: `summarize_for_log` bounds their size first.
"""

from __future__ import annotations

import contextvars
import hashlib
import json
import time
import uuid
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from starlette.requests import Request

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


def new_request_id(prefix: str = "req") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def set_request_id(request_id: str | None) -> None:
    _request_id.set(request_id)


def get_request_id() -> str | None:
    return _request_id.get()


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="replace")).hexdigest()


@dataclass(frozen=True)
class SummaryLimits:
    depth: int = 4
    text: int = 400
    items: int = 50
    keys: int = 100

    def deeper(self) -> "SummaryLimits":
        return replace(self, depth=self.depth - 1)


def _summarize_text(value: str, limits: SummaryLimits) -> Any:
    if len(value) <= limits.text:
        return value
    return {
        "__type__": "str",
        "__len__": len(value),
        "__sha256__": sha256_text(value),
        "__preview__": value[: limits.text // 2],
    }


def _summarize(value: Any, limits: SummaryLimits) -> Any:
    if limits.depth <= 0:
        return {"__truncated__": True, "__type__": type(value).__name__}
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _summarize_text(value, limits)
    if isinstance(value, (bytes, bytearray)):
        return {"__type__": type(value).__name__, "__len__": len(value)}

    inner = limits.deeper()
    if isinstance(value, Mapping):
        pairs = list(value.items())
        summary = {str(k): _summarize(v, inner) for k, v in pairs[: limits.keys]}
        if len(pairs) > limits.keys:
            summary["__truncated_items__"] = len(pairs) - limits.keys
        return summary
    if isinstance(value, Sequence):
        values = list(value)
        summary_list = [_summarize(v, inner) for v in values[: limits.items]]
        if len(values) > limits.items:
            summary_list.append({"__truncated_items__": len(values) - limits.items})
        return summary_list

    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return {"__type__": type(value).__name__, "__repr__": repr(value)[: limits.text]}
    return value


def summarize_for_log(value: Any, limits: SummaryLimits | None = None) -> Any:
    """
    Bounded copy of a payload for log params.

    Long strings (rich-text notes, evidence quotes) become length + sha256 +
    preview; long lists and dicts are cut with a count of what was dropped.
    """
    return _summarize(value, limits or SummaryLimits())


def error_context(exc: BaseException) -> dict[str, Any]:
    return {"type": type(exc).__name__, "message": str(exc)}


def http_context(request: Request) -> dict[str, Any]:
    """Request id plus method/path/params of the current request (headers are left out)."""
    client = getattr(request, "client", None)
    return {
        "request_id": get_request_id(),
        "http": {
            "method": request.method,
            "path": request.url.path,
            "query": dict(request.query_params),
            "path_params": dict(request.path_params),
            "client_host": getattr(client, "host", None),
        },
    }


class RequestTimer:
    """Milliseconds since construction."""

    def __init__(self) -> None:
        self._started = time.perf_counter()

    def ms(self) -> int:
        return int((time.perf_counter() - self._started) * 1000)
