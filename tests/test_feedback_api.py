# tests/test_feedback_api.py
import uuid

from vahaan.identity import GuestIdentityResolver, Identity
from vahaan.main import app


def submit(client, **overrides):
    payload = {"type": "suggestion", "subject": "Dark mode", "message": "Please add a dark theme", "rating": 4}
    payload.update(overrides)
    return client.post("/api/feedback", json=payload)


def test_submit_and_read(client):
    resp = submit(client)
    assert resp.status_code == 201
    feedback = resp.json()["data"]["feedback"]
    assert feedback["status"] == "open"
    assert feedback["priority"] == "medium"
    assert feedback["isAnonymous"] is False

    resp = client.get(f"/api/feedback/{feedback['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["feedback"]["subject"] == "Dark mode"


def test_submit_validation(client):
    assert submit(client, rating=6).status_code == 400
    assert submit(client, type="praise").status_code == 400
    resp = submit(client, subject="")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


def test_types(client):
    resp = client.get("/api/feedback/meta/types")
    ids = [t["id"] for t in resp.json()["data"]["feedbackTypes"]]
    assert ids == ["general", "bug-report", "feature-request", "complaint", "suggestion"]


def test_my_feedback(client):
    submit(client)
    submit(client, type="bug-report", subject="Crash on upload")
    resp = client.get("/api/feedback/my-feedback")
    data = resp.json()["data"]
    assert len(data["feedback"]) == 2
    assert data["pagination"]["totalCount"] == 2


def test_update_and_delete_while_open(client):
    feedback = submit(client).json()["data"]["feedback"]
    path = f"/api/feedback/{feedback['id']}"

    resp = client.put(path, json={"message": "Please add a dark theme soon"})
    assert resp.status_code == 200
    assert resp.json()["data"]["feedback"]["message"] == "Please add a dark theme soon"

    resp = client.put(path, json={"rating": 9})
    assert resp.status_code == 400

    resp = client.delete(path)
    assert resp.status_code == 200
    assert client.get(path).status_code == 404


def test_processed_feedback_is_frozen(client):
    feedback = submit(client, status="in-review").json()["data"]["feedback"]
    path = f"/api/feedback/{feedback['id']}"
    resp = client.put(path, json={"subject": "Changed"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot update feedback that is already being processed"
    assert client.delete(path).status_code == 400


def test_other_users_feedback_is_forbidden(client):
    feedback = submit(client).json()["data"]["feedback"]
    original = app.state.identity_resolver
    app.state.identity_resolver = GuestIdentityResolver(Identity(id="other", name="Other", email="o@example.com"))
    try:
        resp = client.get(f"/api/feedback/{feedback['id']}")
        assert resp.status_code == 403
        assert resp.json()["message"] == "Not authorized to view this feedback"
    finally:
        app.state.identity_resolver = original


def test_feedback_ids(client):
    assert client.get("/api/feedback/xyz").json()["message"] == "Invalid feedback ID format"
    resp = client.get(f"/api/feedback/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Feedback not found"
