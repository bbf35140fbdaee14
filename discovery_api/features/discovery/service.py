"""
Discovery CRUD rules on top of the repository.

Keeps the behaviour the canvas relies on: server-generated ids, create
defaults, RICE recomputation, full replacement of linked evidence, and
orphaning (not cascading) child opportunities when a parent goes away.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from discovery_canvas.types import OutcomeStatus, WorkflowStatus

from .contracts import (
    EvidenceCreate,
    InterviewCreate,
    OpportunityCreate,
    OutcomeCreate,
    SolutionCreate,
)
from .errors import EntityNotFound, InvalidInput
from .repository import SUPPORTED_BY
from .scoring import default_rice, rescore

EMPTY_DOC = {"type": "doc", "content": [{"type": "paragraph"}]}
DEFAULT_NOTES = {"content": "Type your interview notes here..."}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


class DiscoveryService:
    def __init__(
        self,
        repo,
        *,
        clock: Callable[[], str] = _now,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.repo = repo
        self.clock = clock
        self.id_factory = id_factory

    def _stamp_new(self, props: Dict[str, Any]) -> Dict[str, Any]:
        now = self.clock()
        return {"id": self.id_factory(), **props, "createdAt": now, "updatedAt": now}

    def _require(self, label: str, node_id: Optional[str], entity: Optional[str] = None) -> Dict[str, Any]:
        node = self.repo.get_node(label, node_id) if node_id else None
        if node is None:
            raise EntityNotFound(entity or label)
        return node

    def _update(self, label: str, node_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        updated = self.repo.update_node(label, node_id, {**changes, "updatedAt": self.clock()})
        if updated is None:
            raise EntityNotFound(label)
        return updated

    # ==================================================================
    # Outcomes
    # ==================================================================

    def list_outcomes(self) -> List[Dict[str, Any]]:
        return self.repo.list_nodes("Outcome")

    def create_outcome(self, payload: OutcomeCreate) -> Dict[str, Any]:
        data = payload.model_dump(mode="json")
        props = {
            **data,
            "status": data.get("status") or OutcomeStatus.ON_TRACK.value,
            "x_position": data.get("x_position") or 0.0,
            "y_position": data.get("y_position") or 0.0,
            "description": data.get("description") or EMPTY_DOC,
        }
        return self.repo.create_node("Outcome", self._stamp_new(props))

    def update_outcome(self, outcome_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self._require("Outcome", outcome_id)
        return self._update("Outcome", outcome_id, changes)

    def delete_outcome(self, outcome_id: str) -> None:
        self._require("Outcome", outcome_id)
        self.repo.clear_where("Opportunity", "outcomeId", outcome_id)
        self.repo.delete_node("Outcome", outcome_id)

    # ==================================================================
    # Opportunities
    # ==================================================================

    def _evidence_index(self) -> Dict[str, Dict[str, Any]]:
        interviews = {i["id"]: i for i in self.repo.list_nodes("Interview")}
        index = {}
        for evidence in self.repo.list_nodes("Evidence"):
            index[evidence["id"]] = {**evidence, "interview": interviews.get(evidence.get("interviewId"))}
        return index

    def _solution_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = defaultdict(int)
        for solution in self.repo.list_nodes("Solution"):
            if solution.get("opportunityId"):
                counts[solution["opportunityId"]] += 1
        return counts

    def _opportunity_view(
        self,
        opportunity: Dict[str, Any],
        evidence_index: Dict[str, Dict[str, Any]],
        links: Dict[str, List[str]],
        counts: Dict[str, int],
    ) -> Dict[str, Any]:
        linked = [evidence_index[eid] for eid in links.get(opportunity["id"], []) if eid in evidence_index]
        return {
            **opportunity,
            "outcomeId": opportunity.get("outcomeId"),
            "parentId": opportunity.get("parentId"),
            "evidences": linked,
            "_count": {"solutions": counts.get(opportunity["id"], 0)},
        }

    def list_opportunities(self) -> List[Dict[str, Any]]:
        evidence_index = self._evidence_index()
        links = self.repo.linked_ids(SUPPORTED_BY, "Opportunity", "Evidence")
        counts = self._solution_counts()
        return [
            self._opportunity_view(o, evidence_index, links, counts)
            for o in self.repo.list_nodes("Opportunity")
        ]

    def get_opportunity(self, opportunity_id: str) -> Dict[str, Any]:
        opportunity = self._require("Opportunity", opportunity_id)
        links = self.repo.linked_ids(SUPPORTED_BY, "Opportunity", "Evidence")
        return self._opportunity_view(opportunity, self._evidence_index(), links, self._solution_counts())

    def _check_parents(self, outcome_id: Optional[str], parent_id: Optional[str]) -> None:
        if outcome_id:
            self._require("Outcome", outcome_id)
        if parent_id:
            self._require("Opportunity", parent_id, "Parent opportunity")

    def create_opportunity(self, payload: OpportunityCreate) -> Dict[str, Any]:
        data = payload.model_dump(mode="json")
        self._check_parents(data.get("outcomeId"), data.get("parentId"))
        props = {
            **data,
            "status": WorkflowStatus.BACKLOG.value,
            "description": EMPTY_DOC,
            **default_rice(),
        }
        created = self.repo.create_node("Opportunity", self._stamp_new(props))
        return self._opportunity_view(created, {}, {}, {})

    def update_opportunity(self, opportunity_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        existing = self._require("Opportunity", opportunity_id)
        changes = dict(changes)

        if changes.get("parentId") == opportunity_id:
            raise InvalidInput(errors=[{"loc": ["parentId"], "msg": "An opportunity cannot be its own parent"}])
        self._check_parents(changes.get("outcomeId"), changes.get("parentId"))

        score = rescore(existing, changes)
        if score is not None:
            changes["riceScore"] = score

        evidence_ids = changes.pop("evidenceIds", None)
        if evidence_ids is not None:
            self.repo.replace_links(SUPPORTED_BY, "Opportunity", opportunity_id, "Evidence", evidence_ids)

        self._update("Opportunity", opportunity_id, changes)
        return self.get_opportunity(opportunity_id)

    def delete_opportunity(self, opportunity_id: str) -> None:
        self._require("Opportunity", opportunity_id)
        self.repo.clear_where("Opportunity", "parentId", opportunity_id)
        for solution in self.repo.list_nodes("Solution"):
            if solution.get("opportunityId") == opportunity_id:
                self.delete_solution(solution["id"])
        self.repo.delete_node("Opportunity", opportunity_id)

    # ==================================================================
    # Solutions
    # ==================================================================

    def _assumptions_by_solution(self) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for assumption in self.repo.list_nodes("Assumption"):
            grouped[assumption.get("solutionId")].append({**assumption, "experiments": []})
        return grouped

    def list_solutions(self) -> List[Dict[str, Any]]:
        assumptions = self._assumptions_by_solution()
        return [
            {**s, "assumptions": assumptions.get(s["id"], [])}
            for s in self.repo.list_nodes("Solution")
        ]

    def create_solution(self, payload: SolutionCreate) -> Dict[str, Any]:
        data = payload.model_dump(mode="json")
        assumptions = data.pop("assumptions", None) or []
        self._require("Opportunity", data["opportunityId"])

        props = {**data, "status": WorkflowStatus.BACKLOG.value, "description": EMPTY_DOC}
        solution = self.repo.create_node("Solution", self._stamp_new(props))
        created = [
            self.repo.create_node(
                "Assumption",
                self._stamp_new({"description": text, "solutionId": solution["id"]}),
            )
            for text in assumptions
        ]
        return {**solution, "assumptions": [{**a, "experiments": []} for a in created]}

    def update_solution(self, solution_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self._require("Solution", solution_id)
        if changes.get("opportunityId"):
            self._require("Opportunity", changes["opportunityId"])
        return self._update("Solution", solution_id, changes)

    def delete_solution(self, solution_id: str) -> None:
        self._require("Solution", solution_id)
        self.repo.delete_where("Assumption", "solutionId", solution_id)
        self.repo.delete_node("Solution", solution_id)

    # ==================================================================
    # Interviews & evidence
    # ==================================================================

    def list_interviews(self) -> List[Dict[str, Any]]:
        grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for evidence in self.repo.list_nodes("Evidence"):
            grouped[evidence.get("interviewId")].append(evidence)
        interviews = [{**i, "evidences": grouped.get(i["id"], [])} for i in self.repo.list_nodes("Interview")]
        return sorted(interviews, key=lambda i: i.get("date") or "", reverse=True)

    def create_interview(self, payload: InterviewCreate) -> Dict[str, Any]:
        props = {**payload.model_dump(mode="json"), "notes": DEFAULT_NOTES}
        return self.repo.create_node("Interview", self._stamp_new(props))

    def update_interview(self, interview_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self._require("Interview", interview_id)
        return self._update("Interview", interview_id, changes)

    def delete_interview(self, interview_id: str) -> None:
        self._require("Interview", interview_id)
        self.repo.delete_where("Evidence", "interviewId", interview_id)
        self.repo.delete_node("Interview", interview_id)

    def list_evidence(self) -> List[Dict[str, Any]]:
        return list(self._evidence_index().values())

    def create_evidence(self, payload: EvidenceCreate) -> Dict[str, Any]:
        data = payload.model_dump(mode="json")
        self._require("Interview", data["interviewId"])
        return self.repo.create_node("Evidence", self._stamp_new(data))

    def delete_evidence(self, evidence_id: str) -> None:
        self._require("Evidence", evidence_id)
        self.repo.delete_node("Evidence", evidence_id)
