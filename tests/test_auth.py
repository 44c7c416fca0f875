import base64
import hashlib

from portfolio_site.admin.auth_routes import VERIFIER_COOKIE
from portfolio_site.shared import oauth_state
from portfolio_site.shared.encryption import decrypt_value, encrypt_value
from portfolio_site.shared.oauth_state import generate_pkce_pair, generate_state, validate_state

from conftest import ADMIN_TOKEN, VISITOR_TOKEN


def test_state_validates_and_rejects_tampering():
    state = generate_state()
    assert validate_state(state)

    decoded = base64.urlsafe_b64decode(state).decode()
    tampered = base64.urlsafe_b64encode((decoded[:-1] + ("0" if decoded[-1] != "0" else "1")).encode()).decode()
    assert not validate_state(tampered)
    assert not validate_state("garbage")


def test_state_expires(monkeypatch):
    state = generate_state()
    real_time = oauth_state.time.time
    monkeypatch.setattr(oauth_state.time, "time", lambda: real_time() + oauth_state.STATE_EXPIRY + 5)
    assert not validate_state(state)


def test_pkce_challenge_matches_verifier():
    verifier, challenge = generate_pkce_pair()
    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).decode().rstrip("=")
    assert challenge == expected
    assert 43 <= len(verifier) <= 128


def test_encrypted_cookie_values():
    token = encrypt_value("verifier-value")
    assert token != "verifier-value"
    assert decrypt_value(token) == "verifier-value"
    assert decrypt_value(token[:-4] + "AAAA") is None
    assert decrypt_value("") is None


def test_login_returns_session_for_admins(client, admin_headers):
    response = client.post("/auth/login", json={"email": "admin@example.com", "password": "secret"})
    assert response.status_code == 200
    assert response.json()["access_token"] == ADMIN_TOKEN


def test_login_refuses_non_admins(client, supabase, admin_headers):
    response = client.post("/auth/login", json={"email": "visitor@example.com", "password": "hunter2"})
    assert response.status_code == 403
    assert ("sign_out", VISITOR_TOKEN) in supabase.calls


def test_login_with_wrong_password(client, admin_headers):
    response = client.post("/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["category"] == "security"


def test_session_check(client, admin_headers):
    assert client.get("/auth/session", headers=admin_headers).json()["is_admin"] is True
    anonymous = client.get("/auth/session", headers={"Authorization": "Bearer unknown"}).json()
    assert anonymous["authenticated"] is False


def test_logout(client, supabase, admin_headers):
    response = client.post("/auth/logout", headers=admin_headers)
    assert response.status_code == 204
    assert ("sign_out", ADMIN_TOKEN) in supabase.calls


def test_oauth_start_sets_verifier_cookie(client):
    response = client.get("/auth/oauth/github", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].startswith("https://test.supabase.co/auth/v1/authorize?provider=github")
    assert decrypt_value(response.cookies[VERIFIER_COOKIE])


def test_oauth_unknown_provider(client):
    assert client.get("/auth/oauth/myspace", follow_redirects=False).status_code == 404


def test_oauth_callback_rejects_bad_state(client):
    response = client.get("/auth/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False)
    assert response.status_code == 400
    assert response.json()["category"] == "security"


def test_oauth_callback_exchanges_code(client, supabase, admin_headers):
    verifier, _ = generate_pkce_pair()
    client.cookies.set(VERIFIER_COOKIE, encrypt_value(verifier))

    response = client.get(
        "/auth/callback",
        params={"code": "auth-code", "state": generate_state()},
        follow_redirects=False,
    )

    assert response.status_code == 307
    assert f"access_token={ADMIN_TOKEN}" in response.headers["location"]
    assert ("exchange_code", "auth-code", verifier) in supabase.calls
