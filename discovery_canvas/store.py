"""
Canvas graph store.

Local mirror of the opportunity-solution tree for instant UI feedback, kept
consistent with the REST API:

- optimistic operations (field edits, moves) patch locally first and fall back
  to a full `load_canvas()` when the server rejects them;
- pessimistic operations (creates) wait for the server-assigned id and leave
  the graph untouched on failure;
- remote failures never propagate to the caller; they become notifications.

Each node id carries a generation counter that deletes bump, so a response
that arrives after its node was deleted is dropped instead of resurrecting it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Union

from discovery_api.platform.observability.request_logging import error_context
from discovery_api.platform.observability.smart_logger import SmartLogger

from .api_client import ApiError, EntityApiClient
from .graph import (
    build_graph,
    children_of,
    descendant_ids,
    edge_into,
    opportunity_children,
    outcome_of,
    relation_fields,
    structural_parent_id,
    would_create_cycle,
)
from .history import History, Snapshot
from .layout import CanvasLayout
from .notifications import Notifier
from .types import CanvasEdge, CanvasNode, NodeType, Position, SolutionCandidate

NodeRef = Union[CanvasNode, str]

DEFAULT_NAMES = {
    NodeType.OUTCOME: "New Outcome",
    NodeType.OPPORTUNITY: "New Opportunity",
}


class CanvasStore:
    def __init__(
        self,
        api: EntityApiClient,
        notifier: Optional[Notifier] = None,
        layout: Optional[CanvasLayout] = None,
        history_limit: int = 100,
    ):
        self.api = api
        self.notifier = notifier or Notifier()
        self.layout = layout or CanvasLayout()
        self.nodes: Dict[str, CanvasNode] = {}
        self.edges: List[CanvasEdge] = []
        self.is_dragging_evidence = False
        self.history = History(limit=history_limit)
        self._generations: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, node_id: str) -> Optional[CanvasNode]:
        return self.nodes.get(node_id)

    def children_of(self, node_id: str) -> List[CanvasNode]:
        return children_of(self.nodes, node_id)

    def parent_of(self, node_id: str) -> Optional[CanvasNode]:
        node = self.nodes.get(node_id)
        if node is None:
            return None
        parent_id = structural_parent_id(node)
        return self.nodes.get(parent_id) if parent_id else None

    def outcome_of(self, node_id: str) -> Optional[str]:
        return outcome_of(self.nodes, node_id)

    def edges_into(self, node_id: str) -> List[CanvasEdge]:
        return [e for e in self.edges if e.target == node_id]

    def set_is_dragging_evidence(self, is_dragging: bool) -> None:
        self.is_dragging_evidence = bool(is_dragging)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def take_snapshot(self) -> None:
        self.history.push(Snapshot.capture(self.nodes, self.edges))

    def undo(self) -> bool:
        previous = self.history.undo(Snapshot.capture(self.nodes, self.edges))
        if previous is None:
            return False
        self._restore(previous)
        return True

    def redo(self) -> bool:
        following = self.history.redo(Snapshot.capture(self.nodes, self.edges))
        if following is None:
            return False
        self._restore(following)
        return True

    def _restore(self, snapshot: Snapshot) -> None:
        self.nodes = dict(snapshot.nodes)
        self.edges = list(snapshot.edges)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load_canvas(self) -> bool:
        """
        Rebuild nodes and edges from the three listings.
        On failure the previous in-memory graph is kept as is.
        """
        try:
            outcomes, opportunities, solutions = await self.api.get_canvas_data()
        except ApiError as e:
            self.notifier.error("Failed to load canvas data.", params={"error": error_context(e)})
            return False

        nodes, edges = build_graph(outcomes, opportunities, solutions)
        self.nodes = nodes
        self.edges = edges
        self.history.clear()
        SmartLogger.log(
            "INFO",
            "Canvas loaded from API.",
            category="canvas.store.load.done",
            params={
                "outcomes": len(outcomes),
                "opportunities": len(opportunities),
                "solutions": len(solutions),
                "edges": len(edges),
            },
        )
        return True

    # ------------------------------------------------------------------
    # Creates (pessimistic: ids are server-assigned)
    # ------------------------------------------------------------------

    async def add_node(self, node_type: NodeType, parent: Optional[NodeRef] = None) -> Optional[CanvasNode]:
        node_type = self._node_type(node_type)
        if node_type is None:
            return None
        if node_type not in DEFAULT_NAMES:
            self.notifier.warning(f"Cannot add a {node_type.value} directly.")
            return None

        parent_node = self._resolve(parent) if parent is not None else None
        if parent is not None and not self._can_parent(node_type, parent_node):
            self.notifier.warning(f"Cannot add a {node_type.value} under this node.")
            return None

        payload: Dict[str, Any] = {"name": DEFAULT_NAMES[node_type]}
        if parent_node is None:
            position = self.layout.default_position()
        else:
            position = self._next_child_position(parent_node)
            payload.update(relation_fields(parent_node))
        payload.update({"x_position": position.x, "y_position": position.y})

        return await self._create(
            node_type,
            payload,
            loading=f"Creating new {node_type.value}...",
            success=f"New {node_type.value} created!",
            error=f"Failed to create {node_type.value}.",
        )

    async def create_opportunity_on_drop(
        self,
        source: NodeRef,
        position: Optional[Position] = None,
    ) -> Optional[CanvasNode]:
        """New opportunity under `source`, created where the connection was dropped."""
        source_node = self._resolve(source)
        if not self._can_parent(NodeType.OPPORTUNITY, source_node):
            self.notifier.warning("Opportunities can only be created from an outcome or an opportunity.")
            return None

        if position is None:
            position = self._next_child_position(source_node)
        payload = {
            "name": DEFAULT_NAMES[NodeType.OPPORTUNITY],
            "x_position": position.x,
            "y_position": position.y,
            **relation_fields(source_node),
        }
        return await self._create(
            NodeType.OPPORTUNITY,
            payload,
            loading="Creating new opportunity...",
            success="New opportunity created!",
            error="Failed to create opportunity.",
        )

    async def promote_idea_to_solution(
        self,
        candidate: SolutionCandidate,
        opportunity: NodeRef,
    ) -> Optional[CanvasNode]:
        opportunity_node = self._resolve(opportunity)
        if opportunity_node is None or opportunity_node.type != NodeType.OPPORTUNITY:
            self.notifier.warning("Ideas can only be promoted from an opportunity.")
            return None

        position = self.layout.below(opportunity_node.position)
        try:
            created = await self.notifier.track(
                self.api.promote_idea_to_solution(candidate, opportunity_node.id, position),
                loading="Promoting idea to solution...",
                success="Solution created on canvas!",
                error="Failed to create solution.",
            )
        except ApiError:
            return None

        node = self._insert(NodeType.SOLUTION, created)
        parent = self.nodes.get(opportunity_node.id)
        if parent is not None:
            self.nodes[parent.id] = parent.patched({"solutionCount": parent.data.solutionCount + 1})
        return node

    async def _create(
        self,
        node_type: NodeType,
        payload: Dict[str, Any],
        *,
        loading: str,
        success: str,
        error: str,
    ) -> Optional[CanvasNode]:
        try:
            created = await self.notifier.track(
                self.api.add_node(node_type, payload),
                loading=loading,
                success=success,
                error=error,
            )
        except ApiError:
            return None
        return self._insert(node_type, created)

    def _insert(self, node_type: NodeType, created: Dict[str, Any]) -> CanvasNode:
        # Snapshot only once the server accepted the create.
        self.take_snapshot()
        node = self._put_node(CanvasNode.from_api(node_type, created))
        self._generations.setdefault(node.id, 0)
        edge = edge_into(node)
        SmartLogger.log(
            "INFO",
            "Node created and added to canvas.",
            category="canvas.store.create.done",
            params={"id": node.id, "type": node.type.value, "parent": edge.source if edge else None},
        )
        return node

    # ------------------------------------------------------------------
    # Updates (optimistic)
    # ------------------------------------------------------------------

    async def update_node_data(
        self,
        node_id: str,
        node_type: NodeType,
        data: Dict[str, Any],
    ) -> Optional[CanvasNode]:
        node_type = self._node_type(node_type)
        node = self.nodes.get(node_id)
        if node_type is None:
            return None
        if node is None or node.type != node_type:
            self.notifier.warning(f"Cannot update unknown {node_type.value}.")
            return None

        self.take_snapshot()
        generation = self._generation(node_id)
        self._put_node(node.patched(data))

        try:
            updated = await self.api.update_node(node_type, node_id, data)
        except ApiError as e:
            self.notifier.error(f"Failed to save {node_type.value}.", params={"id": node_id, "error": error_context(e)})
            await self.load_canvas()
            return None

        return self._apply_server_patch(node_id, generation, updated)

    async def update_node_position(self, node_id: str, node_type: NodeType, position: Position) -> bool:
        node_type = self._node_type(node_type)
        node = self.nodes.get(node_id)
        if node_type is None:
            return False
        if node is None or node.type != node_type:
            self.notifier.warning(f"Cannot move unknown {node_type.value}.")
            return False

        # Drag feedback is local and immediate; the snapshot is taken by the caller on drag stop.
        self.nodes[node_id] = node.moved(position)
        try:
            await self.notifier.track(
                self.api.update_node(node_type, node_id, {"x_position": position.x, "y_position": position.y}),
                loading="Saving position...",
                success="Position saved!",
                error="Failed to save position.",
            )
        except ApiError:
            await self.load_canvas()
            return False
        return True

    async def on_connect(self, source_id: str, target_id: str) -> Optional[CanvasNode]:
        """
        Re-parent `target` under `source` when the user draws an edge.

        Opportunity targets take an outcome or opportunity source; solution
        targets take an opportunity source. Everything else is refused.
        """
        source = self.nodes.get(source_id)
        target = self.nodes.get(target_id)
        if source is None or target is None or source_id == target_id:
            self.notifier.warning("Cannot connect these nodes.")
            return None

        if target.type == NodeType.OPPORTUNITY and source.type in (NodeType.OUTCOME, NodeType.OPPORTUNITY):
            if would_create_cycle(self.nodes, source_id, target_id):
                self.notifier.warning("Cannot connect: the opportunity would become its own ancestor.")
                return None
            update = relation_fields(source)
        elif target.type == NodeType.SOLUTION and source.type == NodeType.OPPORTUNITY:
            update = {"opportunityId": source_id}
        else:
            self.notifier.warning(f"Cannot connect a {source.type.value} to a {target.type.value}.")
            return None

        self.take_snapshot()
        generation = self._generation(target_id)
        try:
            updated = await self.notifier.track(
                self.api.update_node(target.type, target_id, update),
                loading="Connecting nodes...",
                success="Nodes connected!",
                error="Failed to connect nodes.",
            )
        except ApiError:
            return None

        return self._apply_server_patch(target_id, generation, {**update, **(updated or {})})

    async def link_evidence_to_opportunity(self, evidence_id: str, opportunity_id: str) -> bool:
        """
        Add `evidence_id` to the opportunity's evidence set. Already linked
        evidence is a no-op. On success the canvas is reloaded so the linked
        evidence comes back with its interview details.
        """
        node = self.nodes.get(opportunity_id)
        if node is None or node.type != NodeType.OPPORTUNITY:
            return False

        current_ids = node.data.evidence_ids
        if evidence_id in current_ids:
            return False

        self.take_snapshot()
        try:
            await self.notifier.track(
                self.api.update_node(NodeType.OPPORTUNITY, opportunity_id, {"evidenceIds": [*current_ids, evidence_id]}),
                loading="Linking evidence...",
                success="Evidence linked!",
                error="Failed to link evidence.",
            )
        except ApiError:
            return False

        await self.load_canvas()
        return True

    def _apply_server_patch(self, node_id: str, generation: int, payload: Optional[Dict[str, Any]]) -> Optional[CanvasNode]:
        current = self.nodes.get(node_id)
        if current is None or self._generation(node_id) != generation:
            SmartLogger.log(
                "INFO",
                "Discarding stale API response for a node deleted in the meantime.",
                category="canvas.store.stale_response",
                params={"id": node_id, "generation": generation},
            )
            return None
        return self._put_node(current.patched(payload or {}))

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    async def on_nodes_delete(self, deleted: Iterable[NodeRef]) -> Dict[str, bool]:
        """
        Remove the nodes locally and fire one independent DELETE per node.
        Returns {id: succeeded}; a partial failure is reported per node only.
        """
        targets: List[CanvasNode] = []
        seen = set()
        for ref in deleted:
            node = self._resolve(ref)
            if node is not None and node.id not in seen:
                seen.add(node.id)
                targets.append(node)
        if not targets:
            return {}

        self.take_snapshot()
        ids = {n.id for n in targets}
        for node in targets:
            self._generations[node.id] = self._generation(node.id) + 1
            self.nodes.pop(node.id, None)
        self.edges = [e for e in self.edges if e.source not in ids and e.target not in ids]

        results = await asyncio.gather(*(self._delete_one(node) for node in targets))
        return {node.id: ok for node, ok in zip(targets, results)}

    async def delete_subtree(self, node_id: str) -> Dict[str, bool]:
        """Delete a node together with everything below it (each call independent)."""
        if node_id not in self.nodes:
            return {}
        subtree = [node_id, *descendant_ids(self.nodes, node_id)]
        # Solutions go with their opportunity on the server; no call of their own.
        doomed = set(subtree)
        refs = [
            ref
            for ref in subtree
            if not (self.nodes[ref].type == NodeType.SOLUTION and self.nodes[ref].data.opportunityId in doomed)
        ]
        return await self.on_nodes_delete(refs)

    async def _delete_one(self, node: CanvasNode) -> bool:
        try:
            await self.api.delete_node(node.type, node.id)
        except ApiError as e:
            self.notifier.error(f"Failed to delete {node.type.value}.", params={"id": node.id, "error": error_context(e)})
            return False
        self.notifier.success(f"{node.type.value.capitalize()} deleted.")
        self._mirror_server_delete(node)
        return True

    def _mirror_server_delete(self, deleted: CanvasNode) -> None:
        """
        Apply what the server did around a successful delete: child
        opportunities lose their link to the deleted outcome or opportunity,
        and the solutions of a deleted opportunity are deleted with it.
        """
        if deleted.type == NodeType.OUTCOME:
            field_name = "outcomeId"
        elif deleted.type == NodeType.OPPORTUNITY:
            field_name = "parentId"
            self._drop_solutions_of(deleted.id)
        else:
            return
        for node in list(self.nodes.values()):
            if node.type == NodeType.OPPORTUNITY and getattr(node.data, field_name) == deleted.id:
                self._put_node(node.patched({field_name: None}))

    def _drop_solutions_of(self, opportunity_id: str) -> None:
        gone = {
            node.id
            for node in self.nodes.values()
            if node.type == NodeType.SOLUTION and node.data.opportunityId == opportunity_id
        }
        for solution_id in gone:
            self._generations[solution_id] = self._generation(solution_id) + 1
            del self.nodes[solution_id]
        self.edges = [e for e in self.edges if e.source not in gone and e.target not in gone]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _put_node(self, node: CanvasNode) -> CanvasNode:
        """Store `node`, replacing its inbound edge when its parent changed."""
        previous = self.nodes.get(node.id)
        self.nodes[node.id] = node
        if previous is None or structural_parent_id(previous) != structural_parent_id(node):
            self.edges = [e for e in self.edges if e.target != node.id]
            edge = edge_into(node)
            if edge is not None:
                self.edges.append(edge)
        return node

    def _node_type(self, value: Union[NodeType, str]) -> Optional[NodeType]:
        try:
            return NodeType(value)
        except ValueError:
            self.notifier.warning(f"Unknown node type: {value!r}.")
            return None

    def _resolve(self, ref: Optional[NodeRef]) -> Optional[CanvasNode]:
        # Always read the live node: callers may hold a stale copy.
        if ref is None:
            return None
        node_id = ref.id if isinstance(ref, CanvasNode) else ref
        return self.nodes.get(node_id)

    @staticmethod
    def _can_parent(node_type: NodeType, parent: Optional[CanvasNode]) -> bool:
        if parent is None:
            return False
        if node_type == NodeType.OPPORTUNITY:
            return parent.type in (NodeType.OUTCOME, NodeType.OPPORTUNITY)
        return False

    def _next_child_position(self, parent: CanvasNode) -> Position:
        siblings = len(opportunity_children(self.nodes, parent.id))
        return self.layout.child_position(parent.position, siblings)

    def _generation(self, node_id: str) -> int:
        return self._generations.get(node_id, 0)
