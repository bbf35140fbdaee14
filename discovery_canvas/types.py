"""
Discovery canvas type definitions.

Outcome / Opportunity / Solution are the three node payloads of the
opportunity-solution tree; `CanvasNode` tags exactly one of them with its
`NodeType`. Field names follow the REST payloads (camelCase, `x_position`).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ==========================================
# Enums
# ==========================================

class NodeType(str, Enum):
    OUTCOME = "outcome"
    OPPORTUNITY = "opportunity"
    SOLUTION = "solution"


class OutcomeStatus(str, Enum):
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    ACHIEVED = "ACHIEVED"
    ARCHIVED = "ARCHIVED"


class WorkflowStatus(str, Enum):
    BACKLOG = "BACKLOG"
    DISCOVERY = "DISCOVERY"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    BLOCKED = "BLOCKED"


class EvidenceType(str, Enum):
    VERBATIM = "VERBATIM"
    PAIN_POINT = "PAIN_POINT"
    DESIRE = "DESIRE"
    INSIGHT = "INSIGHT"


# REST collection per node type
COLLECTIONS = {
    NodeType.OUTCOME: "outcomes",
    NodeType.OPPORTUNITY: "opportunities",
    NodeType.SOLUTION: "solutions",
}


def _known(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in payload.items() if k in names}


def _coord(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class _Entity:
    """Shared payload conversion for the dataclasses below."""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]):
        return cls(**_known(cls, payload))

    def to_api(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def merge(self, payload: Dict[str, Any]):
        """Return a copy with the known fields of `payload` applied."""
        return type(self).from_api({**self.to_api(), **payload})


# ==========================================
# Research entities
# ==========================================

@dataclass
class Interview(_Entity):
    id: str
    interviewee: str = ""
    date: Optional[str] = None


@dataclass
class Evidence(_Entity):
    id: str
    type: str = EvidenceType.INSIGHT.value
    content: str = ""
    interviewId: Optional[str] = None
    interview: Optional[Interview] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Evidence":
        data = _known(cls, payload)
        interview = data.get("interview")
        if isinstance(interview, dict):
            data["interview"] = Interview.from_api(interview)
        return cls(**data)

    def to_api(self) -> Dict[str, Any]:
        data = super().to_api()
        if self.interview is not None:
            data["interview"] = self.interview.to_api()
        return data


# ==========================================
# Node payloads
# ==========================================

@dataclass
class Outcome(_Entity):
    id: str
    name: str
    status: str = OutcomeStatus.ON_TRACK.value
    targetMetric: Optional[str] = None
    currentValue: Optional[float] = None
    x_position: float = 0.0
    y_position: float = 0.0
    description: Any = None


@dataclass
class Opportunity(_Entity):
    id: str
    name: str
    status: str = WorkflowStatus.BACKLOG.value
    x_position: float = 0.0
    y_position: float = 0.0
    outcomeId: Optional[str] = None
    parentId: Optional[str] = None
    evidences: List[Evidence] = field(default_factory=list)
    riceReach: Optional[float] = None
    riceImpact: Optional[float] = None
    riceConfidence: Optional[float] = None
    riceEffort: Optional[float] = None
    riceScore: Optional[float] = None
    solutionCandidates: Any = None
    solutionCount: int = 0
    description: Any = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Opportunity":
        data = _known(cls, payload)
        data["evidences"] = [
            e if isinstance(e, Evidence) else Evidence.from_api(e)
            for e in (data.get("evidences") or [])
        ]
        counts = payload.get("_count")
        if isinstance(counts, dict) and "solutions" in counts:
            data["solutionCount"] = int(counts["solutions"] or 0)
        return cls(**data)

    def to_api(self) -> Dict[str, Any]:
        data = super().to_api()
        data["evidences"] = [e.to_api() for e in self.evidences]
        return data

    @property
    def evidence_ids(self) -> List[str]:
        return [e.id for e in self.evidences]


@dataclass
class Solution(_Entity):
    id: str
    name: str
    status: str = WorkflowStatus.BACKLOG.value
    x_position: float = 0.0
    y_position: float = 0.0
    opportunityId: Optional[str] = None
    assumptions: List[Dict[str, Any]] = field(default_factory=list)
    description: Any = None


NodeData = Union[Outcome, Opportunity, Solution]

ENTITY_CLASSES = {
    NodeType.OUTCOME: Outcome,
    NodeType.OPPORTUNITY: Opportunity,
    NodeType.SOLUTION: Solution,
}


# ==========================================
# Canvas graph
# ==========================================

@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class CanvasNode:
    """
    A node on the canvas: the type tag plus exactly one entity payload.

    `position` and `label` are projections of the payload, so they can never
    drift from `x_position`/`y_position`/`name`.
    """

    id: str
    type: NodeType
    data: NodeData

    @classmethod
    def from_api(cls, node_type: NodeType, payload: Dict[str, Any]) -> "CanvasNode":
        node_type = NodeType(node_type)
        data = ENTITY_CLASSES[node_type].from_api(payload)
        data.x_position = _coord(data.x_position)
        data.y_position = _coord(data.y_position)
        return cls(id=data.id, type=node_type, data=data)

    @property
    def position(self) -> Position:
        return Position(self.data.x_position, self.data.y_position)

    @property
    def label(self) -> str:
        return self.data.name

    def patched(self, payload: Dict[str, Any]) -> "CanvasNode":
        """New node with `payload` merged into its data (id and tag are kept)."""
        payload = {k: v for k, v in payload.items() if k != "id"}
        return replace(self, data=self.data.merge(payload))

    def moved(self, position: Position) -> "CanvasNode":
        return self.patched({"x_position": position.x, "y_position": position.y})


@dataclass(frozen=True)
class CanvasEdge:
    source: str
    target: str
    kind: str = "structural"  # "solution" edges are styled differently

    @property
    def id(self) -> str:
        return f"e-{self.source}-{self.target}"


@dataclass
class SolutionCandidate:
    """Lightweight idea kept on an opportunity until promoted to a Solution."""

    title: str
    quickAssumptions: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "SolutionCandidate":
        return cls(
            title=str(payload.get("title") or ""),
            quickAssumptions=[str(a) for a in (payload.get("quickAssumptions") or [])],
        )
