"""
CanvasStore.on_connect: relational field dispatch by target type
"""

import pytest

from discovery_canvas.notifications import NotificationLevel
from discovery_canvas.types import CanvasEdge


@pytest.fixture
def seeded(server):
    server.seed("outcomes", id="o1", name="Grow retention")
    server.seed("outcomes", id="o2", name="Reduce churn")
    server.seed("opportunities", id="p1", name="Onboarding", outcomeId="o1")
    server.seed("opportunities", id="p2", name="Setup", outcomeId="o1", parentId="p1")
    server.seed("opportunities", id="p3", name="Pricing", outcomeId="o2")
    server.seed("solutions", id="s1", name="Wizard", opportunityId="p2")
    return server


@pytest.mark.anyio
async def test_outcome_to_opportunity_sets_outcome(seeded, store):
    await store.load_canvas()

    node = await store.on_connect("o2", "p1")

    _, _, body = seeded.calls("PUT")[0]
    assert body == {"id": "p1", "outcomeId": "o2", "parentId": None}
    assert node.data.outcomeId == "o2"
    assert node.data.parentId is None
    assert store.edges_into("p1") == [CanvasEdge("o2", "p1")]


@pytest.mark.anyio
async def test_opportunity_to_opportunity_sets_parent(seeded, store):
    await store.load_canvas()

    node = await store.on_connect("p3", "p2")

    _, _, body = seeded.calls("PUT")[0]
    assert body == {"id": "p2", "outcomeId": "o2", "parentId": "p3"}
    assert node.data.parentId == "p3"
    assert store.edges_into("p2") == [CanvasEdge("p3", "p2")]


@pytest.mark.anyio
async def test_opportunity_to_solution_sets_only_opportunity(seeded, store):
    await store.load_canvas()

    node = await store.on_connect("p3", "s1")

    _, _, body = seeded.calls("PUT")[0]
    assert body == {"id": "s1", "opportunityId": "p3"}
    assert "outcomeId" not in body and "parentId" not in body
    assert node.data.opportunityId == "p3"
    assert store.edges_into("s1") == [CanvasEdge("p3", "s1", kind="solution")]


@pytest.mark.parametrize(
    "source, target",
    [
        ("p1", "o2"),  # into an outcome
        ("s1", "p3"),  # out of a solution
        ("o1", "s1"),  # outcome straight to solution
        ("p1", "p1"),
        ("p1", "missing"),
    ],
)
@pytest.mark.anyio
async def test_unsupported_connections_are_refused(seeded, store, notifier, source, target):
    await store.load_canvas()
    edges = list(store.edges)

    assert await store.on_connect(source, target) is None

    assert seeded.calls("PUT") == []
    assert store.edges == edges
    assert len(notifier.messages(NotificationLevel.WARNING)) == 1


@pytest.mark.anyio
async def test_connect_rejects_cycles(seeded, store, notifier):
    """p1 cannot become a child of its own descendant p2"""
    await store.load_canvas()

    assert await store.on_connect("p2", "p1") is None

    assert seeded.calls("PUT") == []
    assert store.get("p1").data.parentId is None
    assert notifier.messages(NotificationLevel.WARNING) == [
        "Cannot connect: the opportunity would become its own ancestor."
    ]


@pytest.mark.anyio
async def test_failed_connect_keeps_edges(seeded, store, notifier):
    await store.load_canvas()
    edges = list(store.edges)
    seeded.fail("PUT", "/opportunities", status=404, message="Outcome not found")

    assert await store.on_connect("o2", "p1") is None

    assert store.edges == edges
    assert store.get("p1").data.outcomeId == "o1"
    assert notifier.messages(NotificationLevel.ERROR) == ["Failed to connect nodes."]
