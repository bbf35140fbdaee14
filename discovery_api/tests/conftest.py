"""
Shared fixtures for the REST service tests.

The Neo4j repository is replaced by `InMemoryRepository`, which keeps the
same node/link semantics (`SET +=` with null removes a property, DETACH
DELETE drops links) without a database.
"""

import copy
from collections import defaultdict

import pytest
from fastapi.testclient import TestClient

from discovery_api.features.discovery.dependencies import get_repository
from discovery_api.main import app


class InMemoryRepository:
    def __init__(self):
        self.nodes = defaultdict(dict)  # label -> {id: props}
        self.links = defaultdict(set)  # rel -> {(source_id, target_id)}
        self.healthy = True

    def ping(self):
        if not self.healthy:
            raise ConnectionError("Neo4j unreachable")

    def list_nodes(self, label):
        return [copy.deepcopy(n) for n in self.nodes[label].values()]

    def get_node(self, label, node_id):
        node = self.nodes[label].get(node_id)
        return copy.deepcopy(node) if node is not None else None

    def create_node(self, label, props):
        self.nodes[label][props["id"]] = copy.deepcopy(props)
        return copy.deepcopy(props)

    def update_node(self, label, node_id, props):
        node = self.nodes[label].get(node_id)
        if node is None:
            return None
        for key, value in props.items():
            if value is None:
                node.pop(key, None)
            else:
                node[key] = copy.deepcopy(value)
        return copy.deepcopy(node)

    def delete_node(self, label, node_id):
        if self.nodes[label].pop(node_id, None) is None:
            return False
        for rel, pairs in self.links.items():
            self.links[rel] = {p for p in pairs if node_id not in p}
        return True

    def delete_where(self, label, prop, value):
        ids = [i for i, n in self.nodes[label].items() if n.get(prop) == value]
        for node_id in ids:
            self.delete_node(label, node_id)
        return len(ids)

    def clear_where(self, label, prop, value):
        matched = [n for n in self.nodes[label].values() if n.get(prop) == value]
        for node in matched:
            node.pop(prop, None)
        return len(matched)

    def replace_links(self, rel, source_label, source_id, target_label, target_ids):
        kept = {p for p in self.links[rel] if p[0] != source_id}
        existing = self.nodes[target_label]
        self.links[rel] = kept | {(source_id, t) for t in target_ids if t in existing}

    def linked_ids(self, rel, source_label, target_label):
        out = defaultdict(list)
        for source, target in sorted(self.links[rel]):
            out[source].append(target)
        return dict(out)


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def outcome(client):
    response = client.post("/api/outcomes", json={"name": "Grow retention"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def interview(client):
    response = client.post("/api/interviews", json={"interviewee": "Dana", "date": "2024-03-01T10:00:00Z"})
    assert response.status_code == 201
    return response.json()


def make_opportunity(client, name="Onboarding friction", **fields):
    body = {"name": name, "x_position": 0, "y_position": 150, **fields}
    response = client.post("/api/opportunities", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def new_opportunity(client):
    def _make(name="Onboarding friction", **fields):
        return make_opportunity(client, name, **fields)

    return _make
