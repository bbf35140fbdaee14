"""
Discovery graph persistence on Neo4j.

Entities are nodes labelled by type (Outcome, Opportunity, ...) keyed by `id`.
Foreign keys stay as node properties (`outcomeId`, `parentId`,
`opportunityId`, `interviewId`, `solutionId`) because the REST payloads carry
them verbatim; the many-to-many opportunity/evidence link is a relationship.
Nested documents (rich-text descriptions, notes, solution candidates) are
stored as JSON strings.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Optional

from neo4j import Driver

from discovery_api.platform.schema import ENTITY_LABELS

SUPPORTED_BY = "SUPPORTED_BY"  # (:Opportunity)-[:SUPPORTED_BY]->(:Evidence)

JSON_FIELDS = ("description", "notes", "solutionCandidates")

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RELATIONSHIPS = {SUPPORTED_BY}


def _label(label: str) -> str:
    if label not in ENTITY_LABELS:
        raise ValueError(f"Unknown label: {label}")
    return label


def _ident(name: str) -> str:
    if not _IDENT.match(name):
        raise ValueError(f"Invalid property name: {name!r}")
    return name


def _rel(rel: str) -> str:
    if rel not in _RELATIONSHIPS:
        raise ValueError(f"Unknown relationship: {rel}")
    return rel


def encode_props(props: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(props)
    for key in JSON_FIELDS:
        if key in out and out[key] is not None:
            out[key] = json.dumps(out[key], ensure_ascii=False)
    return out


def decode_props(props: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(props)
    for key in JSON_FIELDS:
        value = out.get(key)
        if isinstance(value, str):
            try:
                out[key] = json.loads(value)
            except ValueError:
                pass  # plain text written by an older client
    return out


class DiscoveryRepository:
    """Generic node/link storage used by `DiscoveryService`."""

    def __init__(self, driver: Driver, database: Optional[str] = None):
        self.driver = driver
        self.database = database

    def _session(self):
        if self.database:
            return self.driver.session(database=self.database)
        return self.driver.session()

    def ping(self) -> None:
        with self._session() as session:
            session.run("RETURN 1").consume()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def list_nodes(self, label: str) -> List[Dict[str, Any]]:
        query = f"""
        MATCH (n:{_label(label)})
        RETURN n {{.*}} AS n
        ORDER BY n.createdAt
        """
        with self._session() as session:
            return [decode_props(record["n"]) for record in session.run(query)]

    def get_node(self, label: str, node_id: str) -> Optional[Dict[str, Any]]:
        query = f"""
        MATCH (n:{_label(label)} {{id: $id}})
        RETURN n {{.*}} AS n
        """
        with self._session() as session:
            record = session.run(query, id=node_id).single()
            return decode_props(record["n"]) if record else None

    def create_node(self, label: str, props: Dict[str, Any]) -> Dict[str, Any]:
        query = f"""
        CREATE (n:{_label(label)})
        SET n = $props
        RETURN n {{.*}} AS n
        """
        with self._session() as session:
            record = session.run(query, props=encode_props(props)).single()
            return decode_props(record["n"])

    def update_node(self, label: str, node_id: str, props: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        # `+=` with a null value removes the property, which reads back as None.
        query = f"""
        MATCH (n:{_label(label)} {{id: $id}})
        SET n += $props
        RETURN n {{.*}} AS n
        """
        with self._session() as session:
            record = session.run(query, id=node_id, props=encode_props(props)).single()
            return decode_props(record["n"]) if record else None

    def delete_node(self, label: str, node_id: str) -> bool:
        query = f"""
        MATCH (n:{_label(label)} {{id: $id}})
        DETACH DELETE n
        RETURN count(*) AS deleted
        """
        with self._session() as session:
            record = session.run(query, id=node_id).single()
            return bool(record and record["deleted"])

    def delete_where(self, label: str, prop: str, value: Any) -> int:
        query = f"""
        MATCH (n:{_label(label)})
        WHERE n.{_ident(prop)} = $value
        DETACH DELETE n
        RETURN count(*) AS deleted
        """
        with self._session() as session:
            record = session.run(query, value=value).single()
            return int(record["deleted"]) if record else 0

    def clear_where(self, label: str, prop: str, value: Any) -> int:
        """Null out `prop` on every node whose `prop` equals `value`."""
        prop = _ident(prop)
        query = f"""
        MATCH (n:{_label(label)})
        WHERE n.{prop} = $value
        REMOVE n.{prop}
        RETURN count(n) AS updated
        """
        with self._session() as session:
            record = session.run(query, value=value).single()
            return int(record["updated"]) if record else 0

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def replace_links(
        self,
        rel: str,
        source_label: str,
        source_id: str,
        target_label: str,
        target_ids: Iterable[str],
    ) -> None:
        rel = _rel(rel)
        src = _label(source_label)
        tgt = _label(target_label)
        drop = f"""
        MATCH (s:{src} {{id: $source_id}})-[r:{rel}]->(:{tgt})
        DELETE r
        """
        link = f"""
        MATCH (s:{src} {{id: $source_id}})
        UNWIND $target_ids AS tid
        MATCH (t:{tgt} {{id: tid}})
        MERGE (s)-[:{rel}]->(t)
        """
        with self._session() as session:
            with session.begin_transaction() as tx:
                tx.run(drop, source_id=source_id)
                tx.run(link, source_id=source_id, target_ids=list(target_ids))
                tx.commit()

    def linked_ids(self, rel: str, source_label: str, target_label: str) -> Dict[str, List[str]]:
        query = f"""
        MATCH (s:{_label(source_label)})-[:{_rel(rel)}]->(t:{_label(target_label)})
        RETURN s.id AS source, collect(t.id) AS targets
        """
        with self._session() as session:
            return {record["source"]: list(record["targets"]) for record in session.run(query)}
