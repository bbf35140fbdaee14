from __future__ import annotations

from fastapi import Depends

from discovery_api.platform.neo4j import NEO4J_DATABASE, get_driver

from .repository import DiscoveryRepository
from .service import DiscoveryService


def get_repository() -> DiscoveryRepository:
    return DiscoveryRepository(get_driver(), database=NEO4J_DATABASE)


def get_service(repo=Depends(get_repository)) -> DiscoveryService:
    return DiscoveryService(repo)
