import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_provider_selector, get_settings, get_token_store
from api.main import app
from llm.provider_selector import ProviderSelector
from llm.providers.mock_provider import MockProvider


@pytest.fixture
def client(settings, token_store):
    # no candidates: every request gets the demo provider, nothing touches the network
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_provider_selector] = lambda: ProviderSelector([])
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_reports_provider_and_oauth(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {
        "ok": True,
        "provider": MockProvider.name,
        "hasKey": False,
        "oauthConfigured": True,
    }


def test_metrics_endpoint_exposes_prometheus_text(client) -> None:
    r = client.get("/metrics")
    assert r.status_code == 200
    # Prometheus text exposition format content-type
    assert "text/plain" in r.headers.get("content-type", "")
    body = r.text
    assert "workbench_requests_total" in body
    assert "workbench_request_latency_seconds" in body
    assert "workbench_active_sessions" in body


def test_plan_increments_request_counter(client) -> None:
    r = client.post("/api/pm/automation/plan", json={"goal": "Ship v1"})
    assert r.status_code == 200
    assert r.json()["data"]["source"] == "fallback"

    body = client.get("/metrics").text
    # Look for a concrete sample line rather than parsing the exposition format.
    found = any(
        line.startswith(
            'workbench_requests_total{endpoint="/api/pm/automation/plan",status="fallback"}'
        )
        for line in body.splitlines()
    )
    assert found, "Expected workbench_requests_total sample line for /api/pm/automation/plan"


def test_active_sessions_gauge_tracks_token_store(client, token_store, credential) -> None:
    token_store.save("s1", credential)
    token_store.save("s2", credential)

    depth = None
    for line in client.get("/metrics").text.splitlines():
        if line.startswith("workbench_active_sessions "):
            depth = line.split(" ", 1)[1].strip()
            break

    assert depth is not None, "workbench_active_sessions metric not found"
    assert int(float(depth)) == 2


def test_rejected_sync_is_counted(client) -> None:
    r = client.post("/api/pm/automation/sync-calendar", json={"customerMessages": []})
    assert r.status_code == 400

    body = client.get("/metrics").text
    assert any(
        line.startswith(
            'workbench_requests_total{endpoint="/api/pm/automation/sync-calendar",status="invalid"}'
        )
        for line in body.splitlines()
    )
