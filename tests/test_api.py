import pytest
from fastapi.testclient import TestClient

from database import get_db
from models import ProfileRole
from server import app
from views import MemoryViewCache


@pytest.fixture
def client(session_factory, views):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    previous_cache = app.state.view_cache
    app.dependency_overrides[get_db] = override_get_db
    app.state.view_cache = views
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.view_cache = previous_cache


@pytest.fixture
def admin_headers(make_user, bearer):
    identity, _ = make_user(email="admin@example.com", role=ProfileRole.ADMIN)
    return bearer(identity)


@pytest.fixture
def member_headers(make_user, bearer):
    identity, _ = make_user(email="member@example.com", role=ProfileRole.MEMBER)
    return bearer(identity)


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_admin_routes_map_auth_failures_to_status_codes(client, member_headers):
    anonymous = client.post("/api/admin/events", json={"title": "Hack Night"})
    assert anonymous.status_code == 401
    assert anonymous.json() == {"success": False, "error": "Authentication required", "error_kind": "auth_required"}

    member = client.post("/api/admin/events", json={"title": "Hack Night"}, headers=member_headers)
    assert member.status_code == 403
    assert member.json()["error"] == "Insufficient permissions to create events"


def test_cached_admin_view_still_checks_the_caller(client, views, member_headers):
    views.set("/admin/events", {"success": True, "data": []})
    response = client.get("/api/admin/events", headers=member_headers)
    assert response.status_code == 403


def test_event_lifecycle_over_http(client, admin_headers, views):
    created = client.post("/api/admin/events", json={"title": "Robotics Day", "venue": "Lab"}, headers=admin_headers)
    assert created.status_code == 201
    event_id = created.json()["data"]["id"]

    assert client.get(f"/api/events/{event_id}").status_code == 404

    published = client.put(f"/api/admin/events/{event_id}/publish", json={"is_published": True}, headers=admin_headers)
    assert published.json()["message"] == "Event published successfully"

    first = client.get(f"/api/events/{event_id}")
    assert first.status_code == 200
    assert first.json()["data"]["title"] == "Robotics Day"
    assert views.get(f"/events/{event_id}") is not None

    renamed = client.put(f"/api/admin/events/{event_id}", json={"title": "Robotics Week"}, headers=admin_headers)
    assert renamed.status_code == 200
    assert views.get(f"/events/{event_id}") is None
    assert client.get(f"/api/events/{event_id}").json()["data"]["title"] == "Robotics Week"

    deleted = client.delete(f"/api/admin/events/{event_id}", headers=admin_headers)
    assert deleted.json() == {"success": True, "message": "Event deleted successfully"}
    assert client.delete(f"/api/admin/events/{event_id}", headers=admin_headers).status_code == 404


def test_failed_reads_are_not_cached(client, views):
    assert client.get("/api/events/missing").status_code == 404
    assert views.get("/events/missing") is None


def test_public_registration_and_status_codes(client, admin_headers, make_event, make_competition):
    event = make_event()
    competition = make_competition(event)
    body = {
        "name": "Rafi Ahmed",
        "institution": "City School",
        "id_at_institution": "S-101",
        "email": "rafi@example.com",
        "phone": "01700000000",
        "competitions": [competition.id],
    }
    registered = client.post(f"/api/events/{event.id}/register", json=body)
    assert registered.status_code == 201
    registration_id = registered.json()["data"]["registrations"][0]["id"]

    status = client.get(f"/api/registrations/{registration_id}/status")
    assert status.json()["data"]["status"] == "Pending"

    bad_status = client.put(
        f"/api/admin/registrations/{registration_id}/status", json={"status": "Lost"}, headers=admin_headers
    )
    assert bad_status.status_code == 400

    client.put("/api/admin/settings/duplicate-registration-check", json={"enabled": True}, headers=admin_headers)
    duplicate = client.post(f"/api/events/{event.id}/register", json=body)
    assert duplicate.status_code == 409


def test_participant_export_download(client, admin_headers, make_event):
    event = make_event()
    response = client.get(f"/api/admin/events/{event.id}/participants/export?format=csv", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.startswith("Registration ID")


def test_login_and_me(client, make_user):
    make_user(email="login@example.com", with_profile=False)
    login = client.post("/api/auth/login", json={"email": "login@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["data"]["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["profile"]["role"] == "member"
    assert client.get("/api/auth/me").status_code == 401


def test_view_cache_is_shared_across_requests(client, views):
    assert isinstance(views, MemoryViewCache)
    client.get("/api/about")
    assert "/about" in views.paths()
