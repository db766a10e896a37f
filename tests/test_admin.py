import pytest

from core.config import settings
from core.security import create_access_token


ADMIN_URL = "/api/v1/admin"
STATS_URL = "/api/v1/users/stats"


def test_create_login_and_read_stats(client, registrants):
    registrants.add("Jane", "jane@mail.com")
    registrants.add("John", "john@mail.com")

    created = client.post(f"{ADMIN_URL}/create", json={"name": "A", "email": "a@x.com", "password": "secret"})
    assert created.status_code == 201
    assert set(created.json()["data"]) == {"id", "name", "email", "role"}
    assert created.json()["data"]["role"] == "admin"

    login = client.post(f"{ADMIN_URL}/login", json={"email": "a@x.com", "password": "secret"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]
    assert login.json()["data"]["admin"]["email"] == "a@x.com"

    stats = client.get(STATS_URL, headers={"Authorization": f"Bearer {token}"})
    assert stats.status_code == 200
    assert stats.json()["data"]["overview"]["total"] == 2

    assert client.get(STATS_URL).status_code == 401


def test_create_duplicate_admin_conflicts(client, admin):
    resp = client.post(f"{ADMIN_URL}/create", json={"name": "Other", "email": "ADA@acme.io", "password": "secret123"})
    assert resp.status_code == 409


def test_create_admin_requires_fields(client):
    assert client.post(f"{ADMIN_URL}/create", json={"name": "No Mail", "password": "secret"}).status_code == 400
    assert client.post(f"{ADMIN_URL}/create", json={"name": "Short", "email": "s@x.com", "password": "abc"}).status_code == 400


def test_creation_token_guard(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_CREATION_TOKEN", "setup-token")
    payload = {"name": "Guarded", "email": "g@x.com", "password": "secret"}

    assert client.post(f"{ADMIN_URL}/create", json=payload).status_code == 403
    wrong = client.post(f"{ADMIN_URL}/create", json=payload, headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 403
    ok = client.post(f"{ADMIN_URL}/create", json=payload, headers={"Authorization": "Bearer setup-token"})
    assert ok.status_code == 201


@pytest.mark.parametrize("payload", [
    {"email": "ada@acme.io", "password": "wrong-password"},
    {"email": "nobody@acme.io", "password": "secret123"},
])
def test_login_bad_credentials(client, admin, payload):
    resp = client.post(f"{ADMIN_URL}/login", json=payload)
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


def test_login_missing_fields(client):
    assert client.post(f"{ADMIN_URL}/login", json={"email": "ada@acme.io"}).status_code == 400
    assert client.post(f"{ADMIN_URL}/login", json={"password": "x"}).status_code == 400


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Token abc"},
    {"Authorization": "Bearer"},
    {"Authorization": "Bearer not.a.jwt"},
])
def test_admin_routes_reject_missing_or_malformed_token(client, registrants, headers):
    jane = registrants.add("Jane", "jane@mail.com")

    resp = client.delete(f"/api/v1/users/{jane.id}", headers=headers)

    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert jane.id in registrants.docs


def test_expired_token_is_rejected_without_mutation(client, registrants, admin):
    jane = registrants.add("Jane", "jane@mail.com")
    expired = create_access_token(admin.id, admin.role, expires_minutes=-5)

    resp = client.put(
        f"/api/v1/users/{jane.id}/status",
        json={"status": "cancelled"},
        headers={"Authorization": f"Bearer {expired}"},
    )

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired token"
    assert registrants.docs[jane.id].status.value == "registered"


def test_token_for_deleted_admin_is_rejected(client, admins, admin, auth_headers):
    del admins.docs[admin.id]
    assert client.get(f"{ADMIN_URL}/profile", headers=auth_headers).status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, admin, monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "another-secret")
    forged = create_access_token(admin.id, admin.role)
    monkeypatch.undo()

    resp = client.get(f"{ADMIN_URL}/profile", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_profile_hides_password(client, admin, auth_headers):
    resp = client.get(f"{ADMIN_URL}/profile", headers=auth_headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["email"] == "ada@acme.io"
    assert "password" not in data
    assert "password_hash" not in data


def test_update_profile(client, admins, admin, auth_headers):
    admins.add("Bea", "bea@acme.io", "secret123")

    taken = client.put(f"{ADMIN_URL}/profile", json={"email": "BEA@acme.io"}, headers=auth_headers)
    assert taken.status_code == 409

    resp = client.put(f"{ADMIN_URL}/profile", json={"name": " Ada L ", "email": "Ada.L@Acme.io"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Ada L"
    assert resp.json()["data"]["email"] == "ada.l@acme.io"

    same = client.put(f"{ADMIN_URL}/profile", json={"email": "ada.l@acme.io"}, headers=auth_headers)
    assert same.status_code == 200


def test_change_password_keeps_existing_tokens(client, admin, auth_headers):
    wrong = client.put(
        f"{ADMIN_URL}/password",
        json={"currentPassword": "nope", "newPassword": "fresh-secret"},
        headers=auth_headers,
    )
    assert wrong.status_code == 401

    resp = client.put(
        f"{ADMIN_URL}/password",
        json={"currentPassword": "secret123", "newPassword": "fresh-secret"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Password changed successfully"}

    assert client.post(f"{ADMIN_URL}/login", json={"email": "ada@acme.io", "password": "secret123"}).status_code == 401
    assert client.post(f"{ADMIN_URL}/login", json={"email": "ada@acme.io", "password": "fresh-secret"}).status_code == 200
    # no revocation list
    assert client.get(f"{ADMIN_URL}/profile", headers=auth_headers).status_code == 200


def test_change_password_requires_fields(client, auth_headers):
    resp = client.put(f"{ADMIN_URL}/password", json={"currentPassword": "secret123"}, headers=auth_headers)
    assert resp.status_code == 400


def test_health_and_unknown_route(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "OK"

    missing = client.get("/api/v1/nothing-here")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Route not found"}
