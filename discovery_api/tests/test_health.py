"""
/api/health and request correlation
"""


def test_health_ok(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "neo4j": "connected"}


def test_health_reports_unreachable_database(client, repo):
    repo.healthy = False

    body = client.get("/api/health").json()

    assert body["status"] == "unhealthy"
    assert "unreachable" in body["error"]


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-Id": "req_fixed"})

    assert response.headers["X-Request-Id"] == "req_fixed"
