"""
Pure graph derivations over the canvas node map.

Edges are never stored independently of the relational fields: an
opportunity hangs off its parent opportunity when `parentId` is set,
otherwise off its outcome; a solution hangs off its opportunity.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .types import CanvasEdge, CanvasNode, NodeType


def structural_parent_id(node: CanvasNode) -> Optional[str]:
    """Source id of the node's single inbound edge (None for outcomes and roots)."""
    if node.type == NodeType.OPPORTUNITY:
        return node.data.parentId or node.data.outcomeId or None
    if node.type == NodeType.SOLUTION:
        return node.data.opportunityId or None
    return None


def edge_into(node: CanvasNode) -> Optional[CanvasEdge]:
    source = structural_parent_id(node)
    if source is None:
        return None
    kind = "solution" if node.type == NodeType.SOLUTION else "structural"
    return CanvasEdge(source=source, target=node.id, kind=kind)


def derive_edges(nodes: Iterable[CanvasNode]) -> List[CanvasEdge]:
    edges: List[CanvasEdge] = []
    for node in nodes:
        edge = edge_into(node)
        if edge is not None:
            edges.append(edge)
    return edges


def build_graph(
    outcomes: Iterable[Dict[str, Any]],
    opportunities: Iterable[Dict[str, Any]],
    solutions: Iterable[Dict[str, Any]],
) -> Tuple[Dict[str, CanvasNode], List[CanvasEdge]]:
    """Rebuild the node map and edge list from the three REST listings."""
    nodes: Dict[str, CanvasNode] = {}
    for node_type, payloads in (
        (NodeType.OUTCOME, outcomes),
        (NodeType.OPPORTUNITY, opportunities),
        (NodeType.SOLUTION, solutions),
    ):
        for payload in payloads:
            node = CanvasNode.from_api(node_type, payload)
            nodes[node.id] = node
    return nodes, derive_edges(nodes.values())


def children_of(nodes: Mapping[str, CanvasNode], parent_id: str) -> List[CanvasNode]:
    return [n for n in nodes.values() if structural_parent_id(n) == parent_id]


def opportunity_children(nodes: Mapping[str, CanvasNode], parent_id: str) -> List[CanvasNode]:
    """Opportunities directly under `parent_id`; these share a placement row."""
    return [n for n in children_of(nodes, parent_id) if n.type == NodeType.OPPORTUNITY]


def ancestor_ids(nodes: Mapping[str, CanvasNode], node_id: str) -> List[str]:
    """Ids on the path from the node's parent up to its root, nearest first."""
    out: List[str] = []
    seen = {node_id}
    current = nodes.get(node_id)
    while current is not None:
        parent = structural_parent_id(current)
        if parent is None or parent in seen:
            break
        out.append(parent)
        seen.add(parent)
        current = nodes.get(parent)
    return out


def descendant_ids(nodes: Mapping[str, CanvasNode], node_id: str) -> List[str]:
    """Breadth-first ids of everything hanging below the node."""
    out: List[str] = []
    seen = {node_id}
    queue = [node_id]
    while queue:
        current = queue.pop(0)
        for child in children_of(nodes, current):
            if child.id not in seen:
                seen.add(child.id)
                out.append(child.id)
                queue.append(child.id)
    return out


def outcome_of(nodes: Mapping[str, CanvasNode], node_id: str) -> Optional[str]:
    node = nodes.get(node_id)
    if node is None:
        return None
    if node.type == NodeType.OUTCOME:
        return node.id
    for ancestor in ancestor_ids(nodes, node_id):
        candidate = nodes.get(ancestor)
        if candidate is not None and candidate.type == NodeType.OUTCOME:
            return candidate.id
    if node.type == NodeType.OPPORTUNITY:
        return node.data.outcomeId
    return None


def would_create_cycle(nodes: Mapping[str, CanvasNode], source_id: str, target_id: str) -> bool:
    """True when making `source_id` the parent of `target_id` closes a loop."""
    if source_id == target_id:
        return True
    return target_id in ancestor_ids(nodes, source_id)


def relation_fields(parent: CanvasNode) -> Dict[str, Any]:
    """
    Relational fields for a new opportunity under `parent`.

    Under an outcome: `outcomeId` is the outcome. Under an opportunity:
    `parentId` is that opportunity and `outcomeId` is inherited from it.
    """
    if parent.type == NodeType.OUTCOME:
        return {"outcomeId": parent.id, "parentId": None}
    if parent.type == NodeType.OPPORTUNITY:
        return {"outcomeId": parent.data.outcomeId, "parentId": parent.id}
    raise ValueError(f"{parent.type.value} nodes cannot parent an opportunity")
