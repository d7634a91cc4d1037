from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from smartwater.domain.auth import google_oauth
from smartwater.domain.auth.schemas import GoogleProfile
from smartwater.domain.auth.service import AuthService, GoogleAccountInactive
from smartwater.models import OAuthState, User
from smartwater.oauth_state import cleanup_expired_states, consume_oauth_state, create_oauth_state
from smartwater.security_utils import decrypt_secret


# ============================================================================
# OAuth state
# ============================================================================


def test_state_is_single_use(db):
    state = create_oauth_state(db, "session-a", "/clients")
    consumed = consume_oauth_state(db, state, "session-a")
    assert consumed.redirect_path == "/clients"
    assert consume_oauth_state(db, state, "session-a") is None


def test_state_bound_to_session(db):
    state = create_oauth_state(db, "session-a")
    assert consume_oauth_state(db, state, "session-b") is None
    # The mismatched attempt still burns the state
    assert db.query(OAuthState).count() == 0


def test_expired_state_is_rejected(db):
    db.add(OAuthState(state="old", session_id="s", expires_at=datetime.utcnow() - timedelta(minutes=1)))
    db.commit()
    assert consume_oauth_state(db, "old", "s") is None


def test_cleanup_expired_states(db):
    db.add(OAuthState(state="old", session_id="s", expires_at=datetime.utcnow() - timedelta(minutes=1)))
    db.commit()
    create_oauth_state(db, "s")
    assert cleanup_expired_states(db) == 1
    assert db.query(OAuthState).count() == 1


# ============================================================================
# Account resolution
# ============================================================================


def _profile(**overrides):
    data = {"id": "google-123", "email": "Swimmer@Example.com", "name": "Sam Swimmer", "picture": "https://img/x.png"}
    data.update(overrides)
    return GoogleProfile(**data)


def test_new_google_user_gets_own_organization(db):
    result = AuthService(db).sign_in_with_google(
        _profile(), {"access_token": "at", "refresh_token": "rt", "expires_in": 3600}
    )
    user = result.user
    assert result.is_new_user
    assert user.role == "client"
    assert user.password == ""
    assert user.auth_provider == "google"
    assert user.email == "swimmer@example.com"
    assert user.organization.name == "Sam Swimmer's Organization"
    assert decrypt_secret(user.gmail_access_token) == "at"
    assert decrypt_secret(user.gmail_refresh_token) == "rt"


def test_existing_email_is_linked_and_reactivated(db, make_user, org):
    existing = make_user(org, "manager", "swimmer", active=False)
    existing.email = "swimmer@example.com"
    db.commit()

    result = AuthService(db).sign_in_with_google(_profile())
    assert result.user.id == existing.id
    assert result.is_reactivated
    assert result.user.active
    assert result.user.google_id == "google-123"
    assert result.user.role == "manager"


def test_refresh_token_kept_when_google_omits_it(db):
    service = AuthService(db)
    first = service.sign_in_with_google(_profile(), {"access_token": "a1", "refresh_token": "r1"}).user
    second = service.sign_in_with_google(_profile(), {"access_token": "a2"}).user
    assert second.id == first.id
    assert decrypt_secret(second.gmail_access_token) == "a2"
    assert decrypt_secret(second.gmail_refresh_token) == "r1"


def test_inactive_linked_account_is_refused(db):
    service = AuthService(db)
    user = service.sign_in_with_google(_profile()).user
    user.active = False
    db.commit()
    with pytest.raises(GoogleAccountInactive):
        service.sign_in_with_google(_profile())


# ============================================================================
# Redirect flow
# ============================================================================


@pytest.fixture
def google_configured(monkeypatch):
    monkeypatch.setattr(google_oauth, "is_configured", lambda: True)


def _start_flow(client, redirect_to="/work-orders"):
    response = client.get("/api/auth/google", params={"redirectTo": redirect_to}, follow_redirects=False)
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


def test_google_login_not_configured(anon, monkeypatch):
    monkeypatch.setattr(google_oauth, "is_configured", lambda: False)
    assert anon.get("/api/auth/google", follow_redirects=False).status_code == 503


def test_callback_signs_in_and_redirects(anon, db, google_configured, monkeypatch):
    async def fake_exchange(code):
        assert code == "auth-code"
        return _profile(), {"access_token": "at"}

    monkeypatch.setattr(google_oauth, "exchange_code_for_profile", fake_exchange)

    state = _start_flow(anon)
    response = anon.get(
        "/api/auth/google/callback", params={"code": "auth-code", "state": state}, follow_redirects=False
    )
    assert response.status_code == 302
    assert response.headers["location"].endswith("/work-orders")
    assert anon.get("/api/auth/session").json()["user"]["email"] == "swimmer@example.com"


def test_callback_rejects_unknown_state(anon, google_configured):
    response = anon.get(
        "/api/auth/google/callback", params={"code": "c", "state": "forged"}, follow_redirects=False
    )
    assert response.headers["location"].endswith("/login?error=invalid_state")


def test_callback_redirects_when_google_is_unreachable(anon, google_configured, monkeypatch):
    async def timeout(self, url, **kwargs):
        raise httpx.ConnectTimeout("timed out")

    monkeypatch.setattr(httpx.AsyncClient, "post", timeout)
    state = _start_flow(anon)
    response = anon.get(
        "/api/auth/google/callback", params={"code": "c", "state": state}, follow_redirects=False
    )
    assert response.status_code == 302
    assert response.headers["location"].endswith("/login?error=google-oauth")


def test_callback_passes_through_google_error(anon):
    response = anon.get(
        "/api/auth/google/callback",
        params={"error": "access_denied", "error_description": "User said no"},
        follow_redirects=False,
    )
    assert "/login?error=google-oauth&details=User%20said%20no" in response.headers["location"]


def test_open_redirects_are_neutralized(anon, db, google_configured, monkeypatch):
    async def fake_exchange(code):
        return _profile(), {}

    monkeypatch.setattr(google_oauth, "exchange_code_for_profile", fake_exchange)
    state = _start_flow(anon, redirect_to="//evil.example.com")
    response = anon.get(
        "/api/auth/google/callback", params={"code": "c", "state": state}, follow_redirects=False
    )
    assert response.headers["location"].endswith("/dashboard")
    assert db.query(User).count() == 1
