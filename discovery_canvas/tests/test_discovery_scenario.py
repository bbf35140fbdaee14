"""
End-to-end: build a small tree and delete it again
"""

import pytest

from discovery_canvas.types import CanvasEdge, NodeType, Position


@pytest.mark.anyio
async def test_grow_retention_tree(server, store):
    outcome = await store.add_node(NodeType.OUTCOME)
    await store.update_node_data(outcome.id, NodeType.OUTCOME, {"name": "Grow retention"})
    await store.update_node_position(outcome.id, NodeType.OUTCOME, Position(0, 0))

    first = await store.add_node(NodeType.OPPORTUNITY, parent=outcome.id)
    await store.update_node_data(first.id, NodeType.OPPORTUNITY, {"name": "Onboarding friction"})
    first = store.get(first.id)

    assert store.get(outcome.id).label == "Grow retention"
    assert first.label == "Onboarding friction"
    assert first.position == Position(0, 150)
    assert first.data.outcomeId == outcome.id
    assert first.data.parentId is None
    assert store.edges == [CanvasEdge(outcome.id, first.id)]

    second = await store.add_node(NodeType.OPPORTUNITY, parent=outcome.id)

    assert second.position == Position(306, 150)
    assert store.edges_into(second.id) == [CanvasEdge(outcome.id, second.id)]

    results = await store.delete_subtree(outcome.id)

    deletes = sorted(path for _, path, _ in server.calls("DELETE"))
    assert deletes == sorted(
        [f"/outcomes/{outcome.id}", f"/opportunities/{first.id}", f"/opportunities/{second.id}"]
    )
    assert results == {outcome.id: True, first.id: True, second.id: True}
    assert store.nodes == {}
    assert store.edges == []


@pytest.mark.anyio
async def test_tree_survives_reload(server, store):
    outcome = await store.add_node(NodeType.OUTCOME)
    parent = await store.add_node(NodeType.OPPORTUNITY, parent=outcome)
    child = await store.add_node(NodeType.OPPORTUNITY, parent=parent)
    edges = sorted(e.id for e in store.edges)

    assert await store.load_canvas() is True

    assert sorted(e.id for e in store.edges) == edges
    assert store.get(child.id).data.outcomeId == outcome.id
