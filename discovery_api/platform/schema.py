"""
Neo4j schema management for the discovery graph.

Every entity label gets a uniqueness constraint on `id`; the REST service
relies on it for MERGE-free lookups and for the "ids are globally unique"
guarantee the canvas store keys its node map on.
"""

from __future__ import annotations

from typing import Optional

from neo4j import Driver

from discovery_api.platform.observability.smart_logger import SmartLogger

ENTITY_LABELS = (
    "Outcome",
    "Opportunity",
    "Solution",
    "Interview",
    "Evidence",
    "Assumption",
)


def constraint_name(label: str) -> str:
    return f"{label.lower()}_id_unique"


def constraint_statements(labels: tuple[str, ...] = ENTITY_LABELS) -> list[str]:
    """Idempotent CREATE CONSTRAINT statements, one per label."""
    return [
        f"CREATE CONSTRAINT {constraint_name(label)} IF NOT EXISTS "
        f"FOR (n:{label}) REQUIRE n.id IS UNIQUE"
        for label in labels
    ]


class SchemaManager:
    """Creates and verifies the uniqueness constraints."""

    def __init__(self, driver: Driver, database: Optional[str] = None):
        self.driver = driver
        self.database = database

    def _session(self):
        if self.database:
            return self.driver.session(database=self.database)
        return self.driver.session()

    def initialize_schema(self) -> dict:
        """
        Create missing constraints.

        Returns:
            dict with success_count, error_count, errors
        """
        success_count = 0
        errors: list[str] = []

        with self._session() as session:
            for statement in constraint_statements():
                try:
                    session.run(statement).consume()
                    success_count += 1
                except Exception as e:
                    errors.append(f"{statement[:60]}... failed: {e}")

        SmartLogger.log(
            "INFO" if not errors else "WARNING",
            "Schema initialization finished.",
            category="platform.schema.init",
            params={"success_count": success_count, "error_count": len(errors), "errors": errors},
        )
        return {
            "success_count": success_count,
            "error_count": len(errors),
            "errors": errors,
        }

    def verify_constraints(self) -> dict:
        """Which entity labels still lack a uniqueness constraint on `id`."""
        with self._session() as session:
            rows = [
                record.data()
                for record in session.run(
                    "SHOW CONSTRAINTS YIELD name, type, labelsOrTypes, properties "
                    "WHERE type = 'UNIQUENESS' RETURN name, labelsOrTypes, properties"
                )
            ]

        covered = {
            row["labelsOrTypes"][0].strip("`")
            for row in rows
            if row.get("labelsOrTypes") and [p.strip("`") for p in row.get("properties") or []] == ["id"]
        }
        missing = [label for label in ENTITY_LABELS if label not in covered]
        return {"constraints": rows, "missing": missing, "all_present": not missing}


def main():
    """CLI: initialize or verify the discovery schema."""
    import argparse

    from discovery_api.platform.neo4j import NEO4J_DATABASE, close_neo4j_driver, init_neo4j_driver

    parser = argparse.ArgumentParser(description="Discovery canvas Neo4j schema management")
    parser.add_argument("--action", choices=["init", "verify"], default="verify")
    args = parser.parse_args()

    manager = SchemaManager(init_neo4j_driver(), database=NEO4J_DATABASE)
    try:
        if args.action == "init":
            result = manager.initialize_schema()
            print(f"constraints created: {result['success_count']}, failed: {result['error_count']}")
        else:
            result = manager.verify_constraints()
            if result["all_present"]:
                print("all constraints present")
            else:
                print(f"missing constraints: {result['missing']}")
    finally:
        close_neo4j_driver()


if __name__ == "__main__":
    main()
