"""
/api/interviews and /api/evidences
"""


def test_create_interview_with_default_notes(client):
    response = client.post("/api/interviews", json={"interviewee": "Dana", "date": "2024-03-01T10:00:00Z"})

    assert response.status_code == 201
    body = response.json()
    assert body["interviewee"] == "Dana"
    assert body["date"].startswith("2024-03-01T10:00:00")
    assert body["notes"] == {"content": "Type your interview notes here..."}


def test_interview_requires_valid_date(client):
    response = client.post("/api/interviews", json={"interviewee": "Dana", "date": "someday"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid input data"


def test_interviews_are_listed_newest_first(client):
    for name, date in (("Ann", "2024-01-01T00:00:00Z"), ("Ben", "2024-05-01T00:00:00Z"), ("Cy", "2024-03-01T00:00:00Z")):
        client.post("/api/interviews", json={"interviewee": name, "date": date})

    assert [i["interviewee"] for i in client.get("/api/interviews").json()] == ["Ben", "Cy", "Ann"]


def test_interview_lists_its_evidence(client, interview):
    client.post("/api/evidences", json={"type": "INSIGHT", "content": "Prefers email", "interviewId": interview["id"]})

    [listed] = client.get("/api/interviews").json()

    assert [e["content"] for e in listed["evidences"]] == ["Prefers email"]


def test_update_interview_notes(client, interview):
    notes = {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "hi"}]}]}

    body = client.put("/api/interviews", json={"id": interview["id"], "notes": notes}).json()

    assert body["notes"] == notes
    assert body["interviewee"] == "Dana"


def test_update_interview_requires_id(client):
    response = client.put("/api/interviews", json={"interviewee": "x"})

    assert response.json() == {"message": "Interview ID is required"}


def test_evidence_requires_existing_interview(client):
    response = client.post("/api/evidences", json={"type": "VERBATIM", "content": "quote", "interviewId": "missing"})

    assert response.status_code == 404
    assert response.json() == {"message": "Interview not found"}


def test_evidence_type_is_validated(client, interview):
    response = client.post("/api/evidences", json={"type": "RUMOR", "content": "quote", "interviewId": interview["id"]})

    assert response.status_code == 400


def test_evidence_listing_includes_interview(client, interview):
    client.post("/api/evidences", json={"type": "DESIRE", "content": "Templates", "interviewId": interview["id"]})

    [evidence] = client.get("/api/evidences").json()

    assert evidence["interview"]["interviewee"] == "Dana"


def test_delete_evidence(client, interview, new_opportunity):
    evidence = client.post(
        "/api/evidences", json={"type": "DESIRE", "content": "Templates", "interviewId": interview["id"]}
    ).json()
    opportunity = new_opportunity()
    client.put("/api/opportunities", json={"id": opportunity["id"], "evidenceIds": [evidence["id"]]})

    response = client.delete(f"/api/evidences/{evidence['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Evidence deleted successfully"}
    assert client.get("/api/evidences").json() == []
    assert client.get("/api/opportunities").json()[0]["evidences"] == []


def test_delete_interview_removes_its_evidence(client, interview):
    client.post("/api/evidences", json={"type": "DESIRE", "content": "Templates", "interviewId": interview["id"]})

    assert client.delete(f"/api/interviews/{interview['id']}").status_code == 204

    assert client.get("/api/interviews").json() == []
    assert client.get("/api/evidences").json() == []
