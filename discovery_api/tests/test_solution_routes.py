"""
/api/solutions
"""


def _solution(client, opportunity_id, **fields):
    body = {"name": "Guided setup", "opportunityId": opportunity_id, "x_position": 0, "y_position": 300, **fields}
    return client.post("/api/solutions", json=body)


def test_create_solution_with_assumptions(client, new_opportunity):
    opportunity = new_opportunity()

    response = _solution(client, opportunity["id"], assumptions=["Users read tips", "Setup is the blocker"])

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "BACKLOG"
    assert body["opportunityId"] == opportunity["id"]
    assert [a["description"] for a in body["assumptions"]] == ["Users read tips", "Setup is the blocker"]
    assert all(a["experiments"] == [] for a in body["assumptions"])


def test_create_solution_requires_existing_opportunity(client):
    response = _solution(client, "missing")

    assert response.status_code == 404
    assert response.json() == {"message": "Opportunity not found"}


def test_create_solution_requires_opportunity_id(client):
    response = client.post("/api/solutions", json={"name": "Orphan", "x_position": 0, "y_position": 0})

    assert response.status_code == 400


def test_list_solutions_with_assumptions(client, new_opportunity):
    opportunity = new_opportunity()
    created = _solution(client, opportunity["id"], assumptions=["A"]).json()
    _solution(client, opportunity["id"], name="Plain")

    listed = {s["id"]: s for s in client.get("/api/solutions").json()}

    assert len(listed) == 2
    assert [a["description"] for a in listed[created["id"]]["assumptions"]] == ["A"]


def test_move_solution_to_another_opportunity(client, new_opportunity):
    first = new_opportunity("First")
    second = new_opportunity("Second")
    solution = _solution(client, first["id"]).json()

    body = client.put("/api/solutions", json={"id": solution["id"], "opportunityId": second["id"]}).json()

    assert body["opportunityId"] == second["id"]
    assert client.put("/api/solutions", json={"id": solution["id"], "opportunityId": "missing"}).status_code == 404


def test_update_solution_status(client, new_opportunity):
    solution = _solution(client, new_opportunity()["id"]).json()

    body = client.put("/api/solutions", json={"id": solution["id"], "status": "IN_PROGRESS"}).json()

    assert body["status"] == "IN_PROGRESS"
    assert client.put("/api/solutions", json={"status": "DONE"}).json() == {"message": "Solution ID is required"}


def test_delete_solution_removes_assumptions(client, repo, new_opportunity):
    solution = _solution(client, new_opportunity()["id"], assumptions=["A", "B"]).json()

    assert client.delete(f"/api/solutions/{solution['id']}").status_code == 204

    assert client.get("/api/solutions").json() == []
    assert repo.list_nodes("Assumption") == []
