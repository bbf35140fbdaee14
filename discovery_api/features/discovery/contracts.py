from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from discovery_canvas.types import EvidenceType, OutcomeStatus, WorkflowStatus


# =============================================================================
# Outcomes
# =============================================================================

class OutcomeCreate(BaseModel):
    """POST /api/outcomes"""

    name: str = Field(min_length=1)
    description: Any = None
    status: Optional[OutcomeStatus] = None
    targetMetric: Optional[str] = None
    currentValue: Optional[float] = None
    x_position: Optional[float] = None
    y_position: Optional[float] = None


class OutcomeUpdate(BaseModel):
    """PUT /api/outcomes: `{id, ...fields}`; only the sent fields change."""

    id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Any = None
    status: Optional[OutcomeStatus] = None
    targetMetric: Optional[str] = None
    currentValue: Optional[float] = None
    x_position: Optional[float] = None
    y_position: Optional[float] = None


# =============================================================================
# Opportunities
# =============================================================================

class OpportunityCreate(BaseModel):
    name: str = Field(min_length=1)
    x_position: float
    y_position: float
    outcomeId: Optional[str] = None
    parentId: Optional[str] = None


class OpportunityUpdate(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Any = None
    riceReach: Optional[float] = None
    riceImpact: Optional[float] = None
    riceConfidence: Optional[float] = None
    riceEffort: Optional[float] = None
    status: Optional[WorkflowStatus] = None
    solutionCandidates: Any = None
    # Full replacement of the linked evidence set.
    evidenceIds: Optional[List[str]] = None
    outcomeId: Optional[str] = None
    parentId: Optional[str] = None
    x_position: Optional[float] = None
    y_position: Optional[float] = None


# =============================================================================
# Solutions
# =============================================================================

class SolutionCreate(BaseModel):
    name: str = Field(min_length=1)
    opportunityId: str = Field(min_length=1)
    x_position: float
    y_position: float
    assumptions: Optional[List[str]] = None


class SolutionUpdate(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Any = None
    status: Optional[WorkflowStatus] = None
    opportunityId: Optional[str] = Field(None, min_length=1)
    x_position: Optional[float] = None
    y_position: Optional[float] = None


# =============================================================================
# Research data
# =============================================================================

class InterviewCreate(BaseModel):
    interviewee: str = Field(min_length=1)
    date: datetime


class InterviewUpdate(BaseModel):
    id: Optional[str] = None
    interviewee: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime] = None
    notes: Any = None


class EvidenceCreate(BaseModel):
    type: EvidenceType
    content: str = Field(min_length=1)
    interviewId: str = Field(min_length=1)


def changes_of(payload: BaseModel) -> dict[str, Any]:
    """Fields the client actually sent (minus the id), JSON-ready."""
    return payload.model_dump(mode="json", exclude_unset=True, exclude={"id"})
