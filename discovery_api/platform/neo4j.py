"""
Neo4j connectivity for the discovery service.

One process-wide driver, created lazily from the environment and closed by
the app lifespan. Repositories receive the driver and open their own
sessions on `NEO4J_DATABASE`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from neo4j import Driver, GraphDatabase

from discovery_api.platform.env import (
    get_neo4j_database,
    get_neo4j_password,
    get_neo4j_uri,
    get_neo4j_user,
)
from discovery_api.platform.observability.request_logging import RequestTimer
from discovery_api.platform.observability.smart_logger import SmartLogger


@dataclass(frozen=True)
class Neo4jSettings:
    uri: str
    user: str
    password: str
    database: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Neo4jSettings":
        return cls(
            uri=get_neo4j_uri(),
            user=get_neo4j_user(),
            password=get_neo4j_password(),
            database=get_neo4j_database(),
        )


SETTINGS = Neo4jSettings.from_env()
NEO4J_URI = SETTINGS.uri
NEO4J_DATABASE = SETTINGS.database

_driver: Optional[Driver] = None


def init_neo4j_driver(*, log: bool = True) -> Driver:
    """Create the shared driver on first use; later calls return the same one."""
    global _driver
    if _driver is None:
        timer = RequestTimer()
        _driver = GraphDatabase.driver(SETTINGS.uri, auth=(SETTINGS.user, SETTINGS.password))
        if log:
            SmartLogger.log(
                "INFO",
                "Neo4j driver created.",
                category="platform.neo4j.driver.init",
                params={
                    "neo4j_uri": SETTINGS.uri,
                    "neo4j_user": SETTINGS.user,
                    "neo4j_database": SETTINGS.database,
                    "duration_ms": timer.ms(),
                },
            )
    return _driver


def close_neo4j_driver(*, log: bool = True) -> None:
    global _driver
    driver, _driver = _driver, None
    if driver is None:
        return
    driver.close()
    if log:
        SmartLogger.log(
            "INFO",
            "Neo4j driver closed.",
            category="platform.neo4j.driver.close",
            params={"neo4j_uri": SETTINGS.uri},
        )


def get_driver() -> Driver:
    return init_neo4j_driver(log=False)

