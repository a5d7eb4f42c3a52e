"""HTTP layer tests against an app served from a memory store."""

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import UPLOAD_DIR
from core.exceptions import StorageOperationError
from storage.memory_store import MemoryEntityStore


@pytest.fixture
def client():
    with TestClient(create_app(MemoryEntityStore())) as test_client:
        yield test_client


def _register(client, username="alice"):
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "name": "Alice", "password": "secret123"},
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def auth(client):
    body = _register(client)
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_register_login_and_me(client):
    body = _register(client)
    assert body["user"]["role"] == "employee"
    assert "password_hash" not in body["user"]

    resp = client.post(
        "/api/auth/login", json={"username": "alice", "password": "secret123"}
    )
    assert resp.status_code == 200
    token = resp.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "alice"


def test_duplicate_registration_rejected(client):
    _register(client)
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "name": "Other", "password": "secret123"},
    )
    assert resp.status_code == 400


def test_bad_login_is_401(client):
    _register(client)
    resp = client.post(
        "/api/auth/login", json={"username": "alice", "password": "wrong-pass"}
    )
    assert resp.status_code == 401


def test_protected_routes_require_token(client):
    assert client.get("/api/courses").status_code == 401
    assert client.get("/api/metrics").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/courses", headers=bad).status_code == 401


def test_validation_errors_are_400(client, auth):
    headers, user = auth
    resp = client.put(
        f"/api/users/{user['id']}/progress",
        json={"course_id": "c1", "progress": 150},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["errors"]


def test_courses_and_progress(client, auth):
    headers, user = auth
    resp = client.post(
        "/api/courses",
        json={
            "title": "Fire Safety",
            "description": "d",
            "duration": 45,
            "content": "c",
            "is_required": True,
        },
        headers=headers,
    )
    assert resp.status_code == 201
    course_id = resp.json()["id"]

    assert client.get(f"/api/courses/{course_id}", headers=headers).status_code == 200
    assert client.get("/api/courses/missing", headers=headers).status_code == 404

    resp = client.put(
        f"/api/users/{user['id']}/progress",
        json={"course_id": course_id, "progress": 100},
        headers=headers,
    )
    assert resp.json()["completed_at"] is not None
    rows = client.get(f"/api/users/{user['id']}/progress", headers=headers).json()
    assert [r["course_id"] for r in rows] == [course_id]


def test_assessment_auto_completes(client, auth):
    headers, user = auth
    resp = client.post(
        "/api/assessments",
        json={
            "title": "Lab check",
            "area": "Lab 1",
            "risk_level": "high",
            "items": [{"id": "1", "text": "Goggles"}, {"id": "2", "text": "Gloves"}],
        },
        headers=headers,
    )
    assert resp.status_code == 201
    assessment = resp.json()
    assert assessment["assessor_id"] == user["id"]

    resp = client.put(
        f"/api/assessments/{assessment['id']}",
        json={
            "status": "in_progress",
            "items": [
                {"id": "1", "text": "Goggles", "completed": True},
                {"id": "2", "text": "Gloves", "completed": True},
            ],
        },
        headers=headers,
    )
    assert resp.json()["status"] == "completed"

    completed = client.get("/api/assessments?status=completed", headers=headers).json()
    assert len(completed) == 1
    assert client.put(
        "/api/assessments/missing", json={"title": "x"}, headers=headers
    ).status_code == 404


def test_document_upload_and_search(client, auth):
    headers, user = auth
    resp = client.post(
        "/api/documents",
        data={"title": "Fire Plan", "category": "Procedures", "tags": "fire, drill"},
        files={"file": ("plan.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )
    assert resp.status_code == 201
    document = resp.json()
    assert document["uploaded_by"] == user["id"]
    assert document["tags"] == ["fire", "drill"]

    found = client.get("/api/documents?search=FIRE", headers=headers).json()
    assert [d["title"] for d in found] == ["Fire Plan"]
    by_category = client.get("/api/documents?category=Other", headers=headers).json()
    assert by_category == []


def test_document_upload_rejects_bad_extension(client, auth):
    headers, _ = auth
    resp = client.post(
        "/api/documents",
        data={"title": "Script", "category": "Misc"},
        files={"file": ("run.exe", b"MZ", "application/octet-stream")},
        headers=headers,
    )
    assert resp.status_code == 400


def test_incident_report_and_metrics(client, auth):
    headers, user = auth
    resp = client.post(
        "/api/incidents",
        json={
            "title": "Spill",
            "description": "Oil on floor",
            "severity": "medium",
            "area": "Dock",
        },
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["reported_by"] == user["id"]
    assert resp.json()["status"] == "open"

    metrics = client.get("/api/metrics", headers=headers).json()
    assert metrics["incidents_this_month"] == 1
    # No progress rows: 100 - 5 + 0.2 * (0 - 80) = 79
    assert metrics["safety_score"] == 79


def test_notifications_and_mark_read(client, auth):
    headers, user = auth
    client.post(
        "/api/notifications",
        json={"title": "All", "message": "m", "type": "info"},
        headers=headers,
    )
    client.post(
        "/api/notifications",
        json={"title": "Other", "message": "m", "type": "info", "user_id": "someone"},
        headers=headers,
    )
    mine = client.get("/api/notifications", headers=headers).json()
    assert [n["title"] for n in mine] == ["All"]

    notification_id = mine[0]["id"]
    for _ in range(2):
        resp = client.put(f"/api/notifications/{notification_id}/read", headers=headers)
        assert resp.json() == {"success": True}
    assert client.put("/api/notifications/missing/read", headers=headers).status_code == 404


def test_emergency_creates_notification_and_incident(client, auth):
    headers, user = auth
    resp = client.post(
        "/api/emergency",
        json={
            "title": "Gas leak",
            "message": "Evacuate now",
            "severity": "critical",
            "area": "Plant B",
        },
        headers=headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["notification"]["message"] == "Evacuate now (Area: Plant B)"
    assert body["notification"]["type"] == "error"
    assert body["notification"]["user_id"] is None
    assert body["incident"]["severity"] == "critical"
    assert body["incident"]["reported_by"] == user["id"]

    activity = client.get("/api/recent-activity", headers=headers).json()
    assert {a["type"] for a in activity} == {"incident", "notification"}
    assert len(activity) == 2


def test_recent_activity_excludes_other_users_notifications(client, auth):
    headers, user = auth
    for title, target in (("Broadcast", None), ("Mine", user["id"]), ("Theirs", "someone")):
        client.post(
            "/api/notifications",
            json={"title": title, "message": "m", "type": "info", "user_id": target},
            headers=headers,
        )

    activity = client.get("/api/recent-activity", headers=headers).json()
    assert {a["title"] for a in activity} == {"Broadcast", "Mine"}


class _FailingDocumentStore(MemoryEntityStore):
    async def create_document(self, data):
        raise StorageOperationError("Relational store operation failed")


def test_upload_removed_when_record_not_created():
    with TestClient(create_app(_FailingDocumentStore())) as failing_client:
        token = _register(failing_client)["token"]
        before = set(UPLOAD_DIR.iterdir()) if UPLOAD_DIR.exists() else set()
        resp = failing_client.post(
            "/api/documents",
            data={"title": "Fire Plan", "category": "Procedures"},
            files={"file": ("plan.pdf", b"%PDF-1.4", "application/pdf")},
            headers={"Authorization": f"Bearer {token}"},
        )
    assert resp.status_code == 500
    assert set(UPLOAD_DIR.iterdir()) == before
