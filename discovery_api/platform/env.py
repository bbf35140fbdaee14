"""
Configuration for the REST service and the canvas client.

Everything is read from the process environment, with a `.env` file in the
working directory loaded first (real environment variables take precedence).
Blank values count as unset.
"""

from __future__ import annotations

import os
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def env_str(key: str, default: str | None = None, *, strip: bool = True) -> str | None:
    raw = os.getenv(key)
    if raw is None:
        return default
    value = raw.strip() if strip else raw
    return value or default


def env_flag(key: str, default: bool = False) -> bool:
    raw = env_str(key)
    return default if raw is None else raw.lower() in _TRUE_VALUES


def _env_parsed(key: str, default: T, parse: Callable[[str], T]) -> T:
    """`parse(value)` of the variable; unset or unparsable values give `default`."""
    raw = env_str(key)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


def env_int(key: str, default: int) -> int:
    return _env_parsed(key, default, int)


def env_float(key: str, default: float) -> float:
    return _env_parsed(key, default, float)


# ---- Neo4j ------------------------------------------------------------------

def get_neo4j_uri() -> str:
    return env_str("NEO4J_URI") or "bolt://localhost:7687"


def get_neo4j_user() -> str:
    return env_str("NEO4J_USER") or "neo4j"


def get_neo4j_password() -> str:
    return env_str("NEO4J_PASSWORD") or "password"


def get_neo4j_database() -> str | None:
    """Target database; the lowercase `neo4j_database` spelling is accepted too."""
    return env_str("NEO4J_DATABASE") or env_str("neo4j_database")


# ---- REST service -----------------------------------------------------------

def get_api_host() -> str:
    return env_str("API_HOST") or "0.0.0.0"


def get_api_port() -> int:
    return env_int("API_PORT", 8000)


SCHEMA_INIT_ON_STARTUP = env_flag("SCHEMA_INIT_ON_STARTUP", True)


# ---- Canvas client ----------------------------------------------------------

def get_canvas_api_base_url() -> str:
    return (env_str("CANVAS_API_BASE_URL") or "http://localhost:8000/api").rstrip("/")


def get_canvas_http_timeout() -> float:
    return env_float("CANVAS_HTTP_TIMEOUT", 10.0)


def get_canvas_edit_debounce_seconds() -> float:
    return env_float("CANVAS_EDIT_DEBOUNCE_SECONDS", 0.8)
