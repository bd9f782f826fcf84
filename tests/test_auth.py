"""
Tests for the session gate: login, logout, current user and the route guard.
"""

import pytest
import requests
from firebase_admin import auth as firebase_auth
from firebase_admin.exceptions import InternalError, UnavailableError

from app.routes import admin as admin_routes
from app.services import auth_service
from app.services.auth_service import IdentityProvider, classify_provider_error

SIGN_IN_OK = {
    "localId": "uid-1",
    "email": "reviewer@example.org",
    "displayName": "Asha",
    "idToken": "id-token-1",
    "refreshToken": "refresh-1",
    "expiresIn": "3600",
}


@pytest.fixture
def provider(monkeypatch):
    """Identity provider with an API key and stubbed Admin SDK token calls."""
    instance = IdentityProvider(api_key="test-key")
    monkeypatch.setattr(auth_service, "_identity_provider", instance)

    def fake_verify(token, check_revoked=False):
        if token == "good":
            return {"uid": "uid-1", "email": "reviewer@example.org", "role": "admin", "department": "Excise"}
        if token == "revoked":
            raise firebase_auth.RevokedIdTokenError("The Firebase ID token has been revoked.")
        raise firebase_auth.InvalidIdTokenError("Could not verify token")

    monkeypatch.setattr(firebase_auth, "verify_id_token", fake_verify)
    return instance


# --- Route guard ---

def test_guard_redirects_browser_to_login(client, monkeypatch):
    """No session + browser → 303 to /login; protected handler never runs."""
    called = []
    monkeypatch.setattr(admin_routes, "get_reviewer_service", lambda: called.append(True))

    response = client.get("/admin/reports", headers={"Accept": "text/html"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert called == []


def test_guard_returns_401_for_api_clients(client, monkeypatch):
    called = []
    monkeypatch.setattr(admin_routes, "get_reviewer_service", lambda: called.append(True))

    response = client.post("/admin/reports/1/confirm", headers={"Accept": "application/json"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert called == []


@pytest.mark.parametrize("token", ["revoked", "garbage"])
def test_guard_rejects_bad_tokens(client, provider, token):
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_guard_accepts_valid_token(client, provider, seed_report):
    seed_report("r1")

    response = client.get("/admin/reports", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == ["r1"]


def test_guard_accepts_session_cookie(client, provider):
    client.cookies.set("session_token", "good")

    response = client.get("/auth/me")

    assert response.status_code == 200


def test_guard_unsubscribes_after_request(client, provider):
    client.get("/auth/me", headers={"Authorization": "Bearer good"})
    client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

    assert provider.listener_count() == 0


def test_guard_signing_keys_unavailable(client, provider, monkeypatch):
    def unreachable(token, check_revoked=False):
        raise firebase_auth.CertificateFetchError("Failed to fetch public key certificates", None)

    monkeypatch.setattr(firebase_auth, "verify_id_token", unreachable)

    response = client.get("/auth/me", headers={"Authorization": "Bearer good"})

    assert response.status_code == 503
    assert response.json()["category"] == "NetworkUnavailable"
    assert provider.listener_count() == 0


def test_guard_deleted_user_redirects_to_login(client, provider, monkeypatch):
    """A still-valid token of a deleted reviewer counts as no session."""
    def deleted(token, check_revoked=False):
        raise firebase_auth.UserNotFoundError("No user record found for the given identifier")

    monkeypatch.setattr(firebase_auth, "verify_id_token", deleted)

    browser = client.get(
        "/admin/reports",
        headers={"Accept": "text/html", "Authorization": "Bearer good"},
        follow_redirects=False,
    )
    api = client.get("/admin/reports", headers={"Authorization": "Bearer good"})

    assert browser.status_code == 303
    assert browser.headers["location"] == "/login"
    assert api.status_code == 401
    assert provider.listener_count() == 0


@pytest.mark.parametrize("error, status_code, category", [
    (UnavailableError("revocation lookup timed out"), 503, "NetworkUnavailable"),
    (InternalError("backend error"), 500, "Unknown"),
])
def test_guard_revocation_lookup_failure(client, provider, monkeypatch, error, status_code, category):
    def failing(token, check_revoked=False):
        raise error

    monkeypatch.setattr(firebase_auth, "verify_id_token", failing)

    response = client.get("/auth/me", headers={"Authorization": "Bearer good"})

    assert response.status_code == status_code
    assert response.json()["category"] == category
    assert "backend error" not in response.text


def test_me_returns_claims(client, provider):
    response = client.get("/auth/me", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    assert response.json()["id"] == "uid-1"
    assert response.json()["role"] == "admin"
    assert response.json()["department"] == "Excise"


# --- Login ---

def test_login_success(client, provider, fake_http):
    fake_http.route("accounts:signInWithPassword", json_body=SIGN_IN_OK)

    response = client.post("/auth/login", json={"email": "reviewer@example.org", "password": "pw"})

    assert response.status_code == 200
    session = response.json()["session"]
    assert session["id_token"] == "id-token-1"
    assert session["expires_in"] == 3600
    assert session["user"]["id"] == "uid-1"
    assert "session_token=id-token-1" in response.headers["set-cookie"]

    call = fake_http.calls_to("accounts:signInWithPassword")[0]
    assert call.params == {"key": "test-key"}
    assert call.json == {"email": "reviewer@example.org", "password": "pw", "returnSecureToken": True}


def test_login_invalid_credentials_hides_provider_message(client, provider, fake_http):
    fake_http.route(
        "accounts:signInWithPassword",
        status_code=400,
        json_body={"error": {"code": 400, "message": "INVALID_LOGIN_CREDENTIALS"}},
    )

    response = client.post("/auth/login", json={"email": "reviewer@example.org", "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password", "category": "InvalidCredentials"}
    assert "INVALID_LOGIN_CREDENTIALS" not in response.text


def test_login_network_unavailable(client, provider, fake_http):
    fake_http.route("accounts:signInWithPassword", exc=requests.ConnectionError("dns failure"))

    response = client.post("/auth/login", json={"email": "reviewer@example.org", "password": "pw"})

    assert response.status_code == 503
    assert response.json()["category"] == "NetworkUnavailable"
    assert len(fake_http.calls) == 1


def test_login_without_api_key(client, monkeypatch, fake_http):
    monkeypatch.setattr(auth_service.settings, "FIREBASE_WEB_API_KEY", None)
    monkeypatch.setattr(auth_service, "_identity_provider", IdentityProvider(api_key=""))

    response = client.post("/auth/login", json={"email": "reviewer@example.org", "password": "pw"})

    assert response.status_code == 500
    assert response.json()["category"] == "Unknown"
    assert fake_http.calls == []


@pytest.mark.parametrize("message, category", [
    ("EMAIL_NOT_FOUND", "InvalidCredentials"),
    ("INVALID_PASSWORD", "InvalidCredentials"),
    ("USER_DISABLED: The user account has been disabled by an administrator.", "InvalidCredentials"),
    ("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled", "Unknown"),
    ("", "Unknown"),
])
def test_classify_provider_error(message, category):
    assert classify_provider_error(message) == category


# --- Logout ---

def test_logout_revokes_tokens(client, provider, monkeypatch):
    revoked = []
    monkeypatch.setattr(firebase_auth, "revoke_refresh_tokens", lambda uid: revoked.append(uid))

    response = client.post("/auth/logout", headers={"Authorization": "Bearer good"})

    assert response.status_code == 200
    assert revoked == ["uid-1"]
    assert provider.listener_count() == 0


def test_logout_failure(client, provider, monkeypatch):
    def broken(uid):
        raise ValueError("bad uid")

    monkeypatch.setattr(firebase_auth, "revoke_refresh_tokens", broken)

    response = client.post("/auth/logout", headers={"Authorization": "Bearer good"})

    assert response.status_code == 500
    assert response.json()["category"] == "Unknown"
