"""
Shared fixtures for the canvas store tests.

`FakeDiscoveryServer` answers the REST calls of `EntityApiClient` from
in-memory collections through `httpx.MockTransport`, records every request,
and can be told to fail or hold back specific calls.
"""

import asyncio
import itertools
import json

import httpx
import pytest

from discovery_canvas.api_client import EntityApiClient
from discovery_canvas.notifications import Notifier
from discovery_canvas.store import CanvasStore

BASE_URL = "http://testserver/api"

_PREFIXES = {
    "outcomes": "out",
    "opportunities": "opp",
    "solutions": "sol",
    "interviews": "int",
    "evidences": "evi",
}


class FakeDiscoveryServer:
    def __init__(self):
        self.collections = {name: {} for name in _PREFIXES}
        self.requests = []
        self.failures = {}
        self.gates = {}
        self._ids = itertools.count(1)

    # -- test controls -------------------------------------------------

    def seed(self, collection, **payload):
        item = {"id": payload.pop("id", None) or self._new_id(collection), **payload}
        self.collections[collection][item["id"]] = item
        return item

    def fail(self, method, path, status=500, message="Internal server error"):
        self.failures[(method, path)] = (status, {"message": message} if message else None)

    def heal(self):
        self.failures.clear()

    def hold(self, method, path):
        """Delay the response of `method path` until the returned event is set."""
        event = asyncio.Event()
        self.gates[(method, path)] = event
        return event

    def calls(self, method=None, path=None):
        return [
            (m, p, body)
            for m, p, body in self.requests
            if (method is None or m == method) and (path is None or p == path)
        ]

    # -- transport -----------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        failure = self.failures.get((request.method, path))
        if failure is not None:
            status, payload = failure
            response = httpx.Response(status, json=payload) if payload else httpx.Response(status)
        else:
            response = self._route(request.method, path, body)

        gate = self.gates.pop((request.method, path), None)
        if gate is not None:
            await gate.wait()
        return response

    def _route(self, method, path, body):
        parts = path.strip("/").split("/")
        collection = parts[0]
        items = self.collections.get(collection)
        if items is None:
            return httpx.Response(404, json={"message": "Not found"})

        if len(parts) == 1 and method == "GET":
            return httpx.Response(200, json=[self._view(collection, item) for item in items.values()])

        if len(parts) == 1 and method == "POST":
            item = self.seed(collection, **body)
            return httpx.Response(201, json=self._view(collection, item))

        if len(parts) == 1 and method == "PUT":
            item = items.get(body.get("id"))
            if item is None:
                return httpx.Response(404, json={"message": "Not found"})
            changes = {k: v for k, v in body.items() if k != "id"}
            if "evidenceIds" in changes:
                item["evidenceIds"] = list(changes.pop("evidenceIds"))
            item.update(changes)
            return httpx.Response(200, json=self._view(collection, item))

        if len(parts) == 2 and method == "DELETE":
            if items.pop(parts[1], None) is None:
                return httpx.Response(404, json={"message": "Not found"})
            self._cascade(collection, parts[1])
            return httpx.Response(204)

        return httpx.Response(405)

    def _cascade(self, collection, deleted_id):
        """Same follow-up writes as the REST service performs on delete."""
        opportunities = self.collections["opportunities"].values()
        if collection == "outcomes":
            for item in opportunities:
                if item.get("outcomeId") == deleted_id:
                    item["outcomeId"] = None
        elif collection == "opportunities":
            for item in opportunities:
                if item.get("parentId") == deleted_id:
                    item["parentId"] = None
            solutions = self.collections["solutions"]
            for solution_id in [k for k, s in solutions.items() if s.get("opportunityId") == deleted_id]:
                del solutions[solution_id]
        elif collection == "interviews":
            evidences = self.collections["evidences"]
            for evidence_id in [k for k, e in evidences.items() if e.get("interviewId") == deleted_id]:
                del evidences[evidence_id]

    def _view(self, collection, item):
        if collection != "opportunities":
            return dict(item)
        evidences = []
        for evidence_id in item.get("evidenceIds", []):
            evidence = self.collections["evidences"].get(evidence_id)
            if evidence is not None:
                interview = self.collections["interviews"].get(evidence.get("interviewId"))
                evidences.append({**evidence, "interview": interview})
        count = sum(1 for s in self.collections["solutions"].values() if s.get("opportunityId") == item["id"])
        view = {k: v for k, v in item.items() if k != "evidenceIds"}
        return {**view, "evidences": evidences, "_count": {"solutions": count}}

    def _new_id(self, collection):
        return f"{_PREFIXES[collection]}-{next(self._ids)}"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def server():
    return FakeDiscoveryServer()


@pytest.fixture
def api(server):
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler), base_url=BASE_URL)
    return EntityApiClient(client=client)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def store(api, notifier):
    return CanvasStore(api, notifier=notifier)
