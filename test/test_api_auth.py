import pytest
from fastapi.testclient import TestClient

import integration.google_oauth as google_oauth
from api.dependencies import get_settings, get_token_store
from api.main import app
from test_authorization_flow import FakeFlow
from workbench.config import Settings


@pytest.fixture
def client(settings, token_store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_store] = lambda: token_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_login_returns_auth_url(client):
    r = client.get("/api/auth/google")
    assert r.status_code == 200
    assert "prompt=consent" in r.json()["authUrl"]


def test_login_unconfigured_is_500(client):
    app.dependency_overrides[get_settings] = lambda: Settings()
    r = client.get("/api/auth/google")
    assert r.status_code == 500


def test_callback_success_redirects_with_session(client, token_store, monkeypatch):
    FakeFlow.fail_with = None
    monkeypatch.setattr(google_oauth, "Flow", FakeFlow)

    r = client.get("/api/auth/google/callback", params={"code": "4/code"}, follow_redirects=False)

    assert r.status_code == 307
    location = r.headers["location"]
    assert location.startswith("http://localhost:8080/workbench?auth=success&session=session_")
    session_id = location.split("session=")[1]
    assert session_id in token_store


def test_callback_failed_exchange(client, token_store, monkeypatch):
    FakeFlow.fail_with = ValueError("invalid_grant")
    monkeypatch.setattr(google_oauth, "Flow", FakeFlow)

    r = client.get("/api/auth/google/callback", params={"code": "bad"}, follow_redirects=False)

    assert r.headers["location"] == "http://localhost:8080/workbench?error=auth_failed"
    assert len(token_store) == 0


@pytest.mark.parametrize(
    "params, reason",
    [({"error": "access_denied"}, "access_denied"), ({}, "no_code")],
)
def test_callback_errors(client, params, reason):
    r = client.get("/api/auth/google/callback", params=params, follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == f"http://localhost:8080/workbench?error={reason}"


def test_callback_unconfigured(client):
    app.dependency_overrides[get_settings] = lambda: Settings()
    r = client.get("/api/auth/google/callback", params={"code": "x"}, follow_redirects=False)
    assert r.headers["location"].endswith("error=oauth_not_configured")


def test_status_and_disconnect(client, token_store, credential):
    token_store.save("s1", credential)

    assert client.get("/api/auth/google/status", params={"sessionId": "s1"}).json() == {
        "connected": True,
        "expired": False,
    }

    r = client.post("/api/auth/google/disconnect", json={"sessionId": "s1"})
    assert r.json() == {"status": "disconnected"}
    assert client.get("/api/auth/google/status", params={"sessionId": "s1"}).json()["connected"] is False


def test_disconnect_unknown_sessions_leaves_no_locks(client, token_store):
    for i in range(50):
        r = client.post("/api/auth/google/disconnect", json={"sessionId": f"junk-{i}"})
        assert r.json() == {"status": "disconnected"}
    assert token_store.lock_count == 0
