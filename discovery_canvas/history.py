"""Local undo/redo snapshots of the canvas graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .types import CanvasEdge, CanvasNode


@dataclass(frozen=True)
class Snapshot:
    nodes: Dict[str, CanvasNode] = field(default_factory=dict)
    edges: List[CanvasEdge] = field(default_factory=list)

    @classmethod
    def capture(cls, nodes: Dict[str, CanvasNode], edges: List[CanvasEdge]) -> "Snapshot":
        # Nodes are immutable, so shallow copies of the containers suffice.
        return cls(nodes=dict(nodes), edges=list(edges))


class History:
    """
    Bounded past/future stacks. Undo and redo only move the local view;
    nothing is sent to the server.
    """

    def __init__(self, limit: int = 100):
        self.limit = limit
        self.past: List[Snapshot] = []
        self.future: List[Snapshot] = []

    def push(self, snapshot: Snapshot) -> None:
        self.past.append(snapshot)
        if len(self.past) > self.limit:
            del self.past[0]
        self.future.clear()

    def undo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self.past:
            return None
        previous = self.past.pop()
        self.future.insert(0, current)
        return previous

    def redo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self.future:
            return None
        following = self.future.pop(0)
        self.past.append(current)
        return following

    def clear(self) -> None:
        self.past.clear()
        self.future.clear()
