"""
Discovery canvas: client-side graph store for opportunity-solution trees.
"""

from .types import (
    CanvasEdge,
    CanvasNode,
    Evidence,
    EvidenceType,
    Interview,
    NodeType,
    Opportunity,
    Outcome,
    OutcomeStatus,
    Position,
    Solution,
    SolutionCandidate,
    WorkflowStatus,
)
from .api_client import ApiError, EntityApiClient
from .debounce import Debouncer
from .layout import CanvasLayout
from .notifications import Notification, NotificationLevel, Notifier
from .store import CanvasStore

__all__ = [
    "CanvasEdge",
    "CanvasNode",
    "Evidence",
    "EvidenceType",
    "Interview",
    "NodeType",
    "Opportunity",
    "Outcome",
    "OutcomeStatus",
    "Position",
    "Solution",
    "SolutionCandidate",
    "WorkflowStatus",
    "ApiError",
    "EntityApiClient",
    "Debouncer",
    "CanvasLayout",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "CanvasStore",
]
