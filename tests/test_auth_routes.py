import urllib.parse

import pytest
from fastapi.testclient import TestClient

from spotify_proxy.config import Settings
from spotify_proxy.main import create_app

from conftest import TOKEN_URL, FakeResponse


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"message": "ok"}


def test_login_redirects_to_authorize(client):
    resp = client.get("/login", follow_redirects=False)

    assert resp.status_code == 302
    location = urllib.parse.urlparse(resp.headers["location"])
    assert location.netloc == "accounts.spotify.com"
    assert location.path == "/authorize"

    query = urllib.parse.parse_qs(location.query)
    assert query["response_type"] == ["code"]
    assert query["client_id"] == ["client-id"]
    assert query["redirect_uri"] == ["http://127.0.0.1:8888/spotify/callback"]
    assert "user-modify-playback-state" in query["scope"][0].split()
    assert "user-follow-read" in query["scope"][0].split()
    state = query["state"][0]
    assert len(state) == 16
    assert state.isalnum()


def test_login_state_changes(client):
    first = client.get("/login", follow_redirects=False).headers["location"]
    second = client.get("/login", follow_redirects=False).headers["location"]
    assert first != second


def test_login_without_client_id(session):
    app = create_app(settings=Settings(client_id=""), session=session)
    resp = TestClient(app).get("/login", follow_redirects=False)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Spotify env vars not configured"}


def test_callback_exchanges_code(client, store, session):
    session.add("POST", TOKEN_URL, FakeResponse(200, {
        "access_token": "A1",
        "refresh_token": "R1",
        "expires_in": 3600,
    }))

    resp = client.get("/spotify/callback", params={"code": "the-code", "state": "xyz"})

    assert resp.status_code == 200
    assert resp.text == "Authorization successful. You can now use the API endpoints."
    assert store.get_access_token() == "A1"
    assert store.get_refresh_token() == "R1"
    assert session.calls[0]["data"] == {
        "grant_type": "authorization_code",
        "code": "the-code",
        "redirect_uri": "http://127.0.0.1:8888/spotify/callback",
    }


def test_callback_token_exchange_fails(client, store, session):
    body = {"error": "invalid_grant", "error_description": "Invalid authorization code"}
    session.add("POST", TOKEN_URL, FakeResponse(400, body))

    resp = client.get("/spotify/callback", params={"code": "stale"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to get tokens", "details": body}
    assert store.is_authorized() is False


@pytest.mark.parametrize("params, message", [
    ({}, "Missing code in callback"),
    ({"error": "access_denied"}, "Spotify auth error: access_denied"),
])
def test_callback_bad_request(client, session, params, message):
    resp = client.get("/spotify/callback", params=params)

    assert resp.status_code == 400
    assert resp.json() == {"error": message}
    assert session.calls == []


def test_refresh_token_endpoint(client, logged_in, session):
    session.add("POST", TOKEN_URL, FakeResponse(200, {"access_token": "A2"}))

    resp = client.get("/refresh_token")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Token refreshed successfully"}
    assert logged_in.get_access_token() == "A2"
    assert logged_in.get_refresh_token() == "R1"


def test_refresh_token_endpoint_without_refresh_token(client, session):
    resp = client.get("/refresh_token")

    assert resp.status_code == 400
    assert resp.json() == {"error": "No refresh token available"}
    assert session.calls == []


def test_refresh_token_endpoint_rejected(client, logged_in, session):
    body = {"error": "invalid_grant", "error_description": "Refresh token revoked"}
    session.add("POST", TOKEN_URL, FakeResponse(400, body))

    resp = client.get("/refresh_token")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to refresh token", "details": body}
    assert logged_in.get_access_token() == "A1"


def test_callback_without_access_token_keeps_tokens(client, logged_in, session):
    session.add("POST", TOKEN_URL, FakeResponse(200, {"token_type": "Bearer"}))

    resp = client.get("/spotify/callback", params={"code": "the-code"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to get tokens", "details": {"token_type": "Bearer"}}
    assert logged_in.get_access_token() == "A1"
    assert logged_in.get_refresh_token() == "R1"


def test_callback_unreadable_token_response(client, store, session):
    session.add("POST", TOKEN_URL, FakeResponse(200, text="<html>oops</html>"))

    resp = client.get("/spotify/callback", params={"code": "the-code"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to get tokens", "details": "<html>oops</html>"}
    assert store.is_authorized() is False
