from fastapi.testclient import TestClient

from smartwater.main import app
from smartwater.models import Organization, User


def test_login_sets_session(admin, anon):
    response = anon.post("/api/auth/login", json={"username": "owner", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "owner"

    session = anon.get("/api/auth/session").json()
    assert session["isAuthenticated"] is True
    assert session["user"]["id"] == admin.id


def test_login_with_email(admin, anon):
    response = anon.post("/api/auth/login", json={"username": admin.email, "password": "password123"})
    assert response.status_code == 200


def test_login_rejects_bad_password(admin, anon):
    response = anon.post("/api/auth/login", json={"username": "owner", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


def test_login_rejects_inactive_account(make_user, org, anon):
    make_user(org, "manager", "retired", active=False)
    response = anon.post("/api/auth/login", json={"username": "retired", "password": "password123"})
    assert response.status_code == 401


def test_legacy_plaintext_password_is_upgraded(db, org, anon):
    user = User(username="legacy", email="legacy@example.com", password="plaintext", name="Legacy", role="manager", organization_id=org.id)
    db.add(user)
    db.commit()

    response = anon.post("/api/auth/login", json={"username": "legacy", "password": "plaintext"})
    assert response.status_code == 200

    db.refresh(user)
    assert user.password.startswith("$2")
    assert user.last_login_at is not None


def test_logout_clears_session(admin_client):
    assert admin_client.post("/api/auth/logout").json()["success"] is True
    assert admin_client.get("/api/auth/session").json() == {"isAuthenticated": False}
    assert admin_client.get("/api/clients").status_code == 401


def test_protected_route_requires_login(anon):
    assert anon.get("/api/clients").status_code == 401


def test_register_creates_organization_and_client_user(db, anon):
    response = anon.post(
        "/api/auth/register",
        json={
            "username": "newowner",
            "password": "longenough",
            "confirmPassword": "longenough",
            "email": "NewOwner@Example.com",
            "name": "New Owner",
            "organizationName": "Deep End Pools",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["role"] == "client"
    assert body["user"]["email"] == "newowner@example.com"

    organization = db.query(Organization).filter(Organization.slug == "deep-end-pools").one()
    assert body["user"]["organizationId"] == organization.id
    assert anon.get("/api/auth/session").json()["isAuthenticated"] is True


def test_register_collects_validation_errors(anon):
    response = anon.post(
        "/api/auth/register",
        json={
            "username": "shorty",
            "password": "short",
            "confirmPassword": "different",
            "email": "shorty@example.com",
            "name": "Shorty",
            "organizationName": "  ",
        },
    )
    assert response.status_code == 400
    errors = response.json()["detail"]["errors"]
    assert "Password must be at least 8 characters" in errors
    assert "Passwords don't match" in errors
    assert "Organization name is required" in errors


def test_register_rejects_duplicate_email(admin, anon):
    response = anon.post(
        "/api/auth/register",
        json={
            "username": "someoneelse",
            "password": "longenough",
            "confirmPassword": "longenough",
            "email": admin.email,
            "name": "Someone",
            "organizationName": "Other Pools",
        },
    )
    assert response.status_code == 400


def test_deactivated_user_loses_access_mid_session(db, admin, admin_client):
    admin.active = False
    db.commit()
    assert admin_client.get("/api/clients").status_code == 403


def test_sessions_are_independent(admin):
    assert TestClient(app).get("/api/auth/session").json() == {"isAuthenticated": False}
