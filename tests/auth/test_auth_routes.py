"""
Tests for the authentication endpoints.
"""
from clinic_auth.auth.models import AccountStatus, UserRole
from clinic_auth.core.audit_models import AuditLog
from clinic_auth.users.repository import delete_user, find_user_by_id, update_user

from conftest import DEFAULT_PASSWORD, bearer

REGISTRATION = {
    "username": "alice",
    "first_name": "Alice",
    "last_name": "Smith",
    "email": "alice@example.com",
    "password": DEFAULT_PASSWORD,
    "dob": "1990-04-12",
    "gender": "FEMALE",
}


def test_register_login_profile_logout(client):
    response = client.post("/api/v1/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    registered = response.json()
    assert registered["roles"] == [UserRole.USER.value]
    assert registered["health_id"].startswith("MRN")
    assert "password" not in registered
    assert "password_hash" not in registered

    response = client.post("/api/v1/auth/login", json={"login_id": "alice", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == registered["id"]
    tokens = data["tokens"]
    assert tokens["token_type"] == "bearer"

    response = client.get("/api/v1/auth/profile", headers=bearer(tokens["access_token"]))
    assert response.status_code == 200
    assert response.json()["username"] == "alice"

    response = client.post("/api/v1/auth/logout", headers=bearer(tokens["access_token"]))
    assert response.status_code == 200
    assert response.json() == {"message": "Successfully logged out"}

    response = client.post("/api/v1/auth/refresh", headers=bearer(tokens["refresh_token"]))
    assert response.status_code == 403


def test_login_with_email(client, make_user, login):
    make_user("alice")
    assert login("alice@example.com")["access_token"]


def test_duplicate_registration(client, make_user):
    make_user("alice")

    response = client.post("/api/v1/auth/register", json=REGISTRATION)
    assert response.status_code == 409

    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "username": "alice2"})
    assert response.status_code == 409


def test_weak_password_is_rejected(client):
    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "password": "password"})
    assert response.status_code == 422
    assert any(error["loc"][-1] == "password" for error in response.json()["errors"])


def test_failed_logins_are_indistinguishable(client, make_user):
    make_user("alice")
    make_user("bob", status=AccountStatus.DEACTIVATED)

    wrong_password = client.post("/api/v1/auth/login", json={"login_id": "alice", "password": "Wrong1!x"})
    unknown = client.post("/api/v1/auth/login", json={"login_id": "nobody", "password": DEFAULT_PASSWORD})
    deactivated = client.post("/api/v1/auth/login", json={"login_id": "bob", "password": DEFAULT_PASSWORD})

    assert wrong_password.status_code == unknown.status_code == deactivated.status_code == 401
    assert wrong_password.json() == unknown.json() == deactivated.json()


def test_refresh_rotates_tokens(client, make_user, login):
    make_user("alice")
    t0 = login("alice")

    response = client.post("/api/v1/auth/refresh", headers=bearer(t0["refresh_token"]))
    assert response.status_code == 200
    t1 = response.json()
    assert t1["refresh_token"] != t0["refresh_token"]

    response = client.post("/api/v1/auth/refresh", headers=bearer(t0["refresh_token"]))
    assert response.status_code == 403

    response = client.get("/api/v1/auth/profile", headers=bearer(t1["access_token"]))
    assert response.status_code == 200


def test_refresh_requires_refresh_token(client, make_user, login):
    make_user("alice")
    tokens = login("alice")

    assert client.post("/api/v1/auth/refresh").status_code == 401
    assert client.post("/api/v1/auth/refresh", headers=bearer("garbage")).status_code == 401
    assert client.post("/api/v1/auth/refresh", headers=bearer(tokens["access_token"])).status_code == 401


def test_refresh_for_deactivated_user(client, db, make_user, login):
    user = make_user("alice")
    tokens = login("alice")
    update_user(db, user.id, active=False)

    response = client.post("/api/v1/auth/refresh", headers=bearer(tokens["refresh_token"]))
    assert response.status_code == 403


def test_profile_requires_token(client):
    response = client.get("/api/v1/auth/profile")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile_hides_secrets(client, make_user, login):
    make_user("alice")
    tokens = login("alice")

    data = client.get("/api/v1/auth/profile", headers=bearer(tokens["access_token"])).json()
    for field in ("password", "password_hash", "refresh_token_hash", "last_login_at"):
        assert field not in data


def test_login_records_last_login(client, db, make_user, login):
    user = make_user("alice")
    login("alice")
    assert find_user_by_id(db, user.id).last_login_at is not None


def test_audit_logs_are_admin_only(client, make_user, login):
    make_user("admin", roles=(UserRole.ADMIN,))
    make_user("nurse", roles=(UserRole.NURSE,))
    admin_tokens = login("admin")
    nurse_tokens = login("nurse")

    response = client.get("/api/v1/auth/admin/audit-logs", headers=bearer(nurse_tokens["access_token"]))
    assert response.status_code == 403

    response = client.get("/api/v1/auth/admin/audit-logs", headers=bearer(admin_tokens["access_token"]))
    assert response.status_code == 200
    actions = [entry["action"] for entry in response.json()]
    assert actions.count("USER_LOGIN_SUCCESS") == 2


def test_audit_logs_filter_by_user(client, make_user, login):
    admin = make_user("admin", roles=(UserRole.ADMIN,))
    make_user("alice")
    admin_tokens = login("admin")
    login("alice")

    response = client.get(
        "/api/v1/auth/admin/audit-logs",
        params={"user_id": admin.id},
        headers=bearer(admin_tokens["access_token"]),
    )
    assert response.status_code == 200
    entries = response.json()
    assert entries
    assert all(entry["user_id"] == admin.id for entry in entries)
    assert all(entry["username"] == "admin" for entry in entries)


def test_refresh_after_user_deleted(client, db, make_user, login):
    user = make_user("gone")
    user_id = user.id
    tokens = login("gone")
    delete_user(db, user)

    response = client.post("/api/v1/auth/refresh", headers=bearer(tokens["refresh_token"]))
    assert response.status_code == 403

    denied = db.query(AuditLog).filter(AuditLog.action == "TOKEN_REFRESH_DENIED").one()
    assert denied.user_id is None
    assert denied.details == {"subject": user_id}


def test_login_id_is_trimmed(client, make_user):
    make_user("alice")

    response = client.post("/api/v1/auth/login", json={"login_id": "  alice ", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200

    response = client.post("/api/v1/auth/login", json={"login_id": "   ", "password": DEFAULT_PASSWORD})
    assert response.status_code == 422
