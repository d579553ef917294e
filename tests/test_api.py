"""
Tests for the offline cache API.
"""

import pytest
from conftest import ORIGIN
from fastapi.testclient import TestClient

from floodguard_cache.api.app import app
from floodguard_cache.api.dependencies import get_proxy_handler, get_worker_handler
from floodguard_cache.handlers import ProxyHandler, WorkerHandler, infer_destination
from floodguard_cache.services.lifecycle import STATIC_ASSETS


@pytest.fixture
def client(worker):
    """Create a test client wired to the in-memory worker."""
    app.dependency_overrides[get_worker_handler] = lambda: WorkerHandler(worker=worker, origin_url=ORIGIN)
    app.dependency_overrides[get_proxy_handler] = lambda: ProxyHandler(worker=worker, origin_url=ORIGIN)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def active_client(client, fetcher):
    """Client whose worker has installed the static assets and activated."""
    for path in STATIC_ASSETS:
        fetcher.respond(f"{ORIGIN}{path}", f"asset {path}")
    assert client.post("/__worker__/install").status_code == 200
    assert client.post("/__worker__/activate").status_code == 200
    return client


def test_root(client):
    """Test worker index endpoint."""
    response = client.get("/__worker__")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "FloodGuard Offline Cache"
    assert "sync" in data["endpoints"]


def test_install_and_activate(client, fetcher):
    fetcher.respond(f"{ORIGIN}/", "<html>app</html>")

    response = client.post("/__worker__/install")
    assert response.status_code == 200
    data = response.json()
    assert data["cache_name"] == "static-v1"
    assert data["cached"] == [f"{ORIGIN}/"]
    assert len(data["failed"]) == len(STATIC_ASSETS) - 1
    assert data["skip_waiting"] is True

    response = client.post("/__worker__/activate")
    assert response.status_code == 200
    assert response.json()["clients_claimed"] is True


def test_push_and_click(client):
    response = client.post("/__worker__/push", content=b"Water level rising")
    assert response.status_code == 200
    notification = response.json()
    assert notification["title"] == "FloodGuard Alert"
    assert notification["body"] == "Water level rising"
    assert notification["data"] == {"url": "/alerts"}

    listed = client.get("/__worker__/notifications").json()
    assert [n["id"] for n in listed] == [notification["id"]]

    response = client.post(f"/__worker__/notifications/{notification['id']}/click", json={"action": "view"})
    assert response.status_code == 200
    assert response.json()["open_url"] == "/alerts"

    # Closed by the first click
    response = client.post(f"/__worker__/notifications/{notification['id']}/click", json={})
    assert response.status_code == 404


def test_push_without_payload(client):
    response = client.post("/__worker__/push")
    assert response.status_code == 200
    assert response.json()["body"] == "New flood alert received"


def test_queue_and_sync(client, fetcher):
    fetcher.respond(f"{ORIGIN}/api/flood-reports", '{"id":"r1"}', status=201)

    response = client.post(
        "/__worker__/queue",
        json={"method": "POST", "url": "/api/flood-reports", "body": '{"level":3}', "idempotency_key": "k-1"},
    )
    assert response.status_code == 201
    write = response.json()
    assert write["url"] == f"{ORIGIN}/api/flood-reports"
    assert write["idempotency_key"] == "k-1"
    assert write["status"] == "pending"

    status = client.get("/__worker__/queue").json()
    assert status["total"] == 1
    assert status["pending"] == 1

    response = client.post("/__worker__/sync?wait=true", json={"tag": "flood-report-sync"})
    assert response.status_code == 200
    result = response.json()
    assert result["succeeded"] == 1
    assert result["remaining"] == 0
    assert fetcher.calls[-1].header("idempotency-key") == "k-1"

    assert client.get("/__worker__/queue").json()["total"] == 0


def test_queue_rejects_unsupported_method(client):
    response = client.post("/__worker__/queue", json={"method": "GET", "url": "/api/alerts"})
    assert response.status_code == 422


def test_queue_rejects_unsendable_url(client):
    response = client.post("/__worker__/queue", json={"method": "POST", "url": "ftp://origin.test/api/flood-reports"})

    assert response.status_code == 422
    assert "http" in response.json()["detail"]
    assert client.get("/__worker__/queue").json()["total"] == 0


def test_sync_scheduled(client):
    response = client.post("/__worker__/sync")
    assert response.status_code == 202
    assert response.json() == {"tag": "flood-report-sync", "scheduled": True}


def test_sync_unknown_tag(client):
    response = client.post("/__worker__/sync", json={"tag": "other"})
    assert response.status_code == 404


def test_cache_stats(active_client):
    response = active_client.get("/__worker__/caches")
    assert response.status_code == 200
    data = response.json()
    assert data["backend"] == "memory"
    assert data["state"] == "activated"
    assert data["static_cache"] == "static-v1"
    assert data["caches"] == {"static-v1": len(STATIC_ASSETS)}


def test_health(client, fetcher):
    assert client.get("/__worker__/health").json()["status"] == "healthy"

    fetcher.offline = True
    data = client.get("/__worker__/health").json()
    assert data["status"] == "degraded"
    assert data["origin_reachable"] is False


# Proxy


def test_proxy_api_works_offline_after_first_fetch(active_client, fetcher):
    fetcher.respond(f"{ORIGIN}/api/alerts", '{"alerts":[]}', headers={"Content-Type": "application/json"})

    online = active_client.get("/api/alerts")
    fetcher.offline = True
    offline = active_client.get("/api/alerts")

    assert online.status_code == 200
    assert offline.status_code == 200
    assert offline.content == online.content == b'{"alerts":[]}'
    assert offline.headers["content-type"] == "application/json"


def test_proxy_keeps_users_cached_responses_apart(active_client, fetcher):
    url = f"{ORIGIN}/api/emergency/mine"
    fetcher.respond(url, '{"owner":"alice"}', headers={"Content-Type": "application/json"})

    online = active_client.get("/api/emergency/mine", headers={"Authorization": "Bearer alice"})
    fetcher.offline = True
    alice = active_client.get("/api/emergency/mine", headers={"Authorization": "Bearer alice"})
    bob = active_client.get("/api/emergency/mine", headers={"Authorization": "Bearer bob"})

    assert online.status_code == 200
    assert alice.json() == {"owner": "alice"}
    assert bob.status_code == 503
    assert bob.json()["offline"] is True


def test_proxy_static_asset_offline_with_session_cookie(active_client, fetcher):
    fetcher.offline = True

    response = active_client.get("/static/js/bundle.js", headers={"Cookie": "session=abc"})

    assert response.status_code == 200
    assert response.text == "asset /static/js/bundle.js"


def test_proxy_api_offline_miss(active_client, fetcher):
    fetcher.offline = True

    response = active_client.get("/api/weather?city=jakarta")

    assert response.status_code == 503
    assert response.json()["offline"] is True


def test_proxy_offline_image_placeholder(active_client, fetcher):
    fetcher.offline = True

    response = active_client.get("/uploads/flood.png", headers={"Sec-Fetch-Dest": "image"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml"


def test_proxy_offline_document_uses_root(active_client, fetcher):
    fetcher.offline = True

    response = active_client.get("/alerts", headers={"Accept": "text/html"})

    assert response.status_code == 200
    assert response.text == "asset /"


def test_proxy_post_passes_through(active_client, fetcher):
    fetcher.respond(f"{ORIGIN}/api/flood-reports", '{"id":"r1"}', status=201)

    response = active_client.post("/api/flood-reports", json={"level": 3})
    assert response.status_code == 201
    assert fetcher.calls[-1].method == "POST"

    fetcher.offline = True
    response = active_client.post("/api/flood-reports", json={"level": 3})
    assert response.status_code == 502
    assert response.text == "Network unavailable"


def test_proxy_unsendable_request_is_bad_request(active_client, fetcher):
    fetcher.invalid.add(f"{ORIGIN}/api/flood-reports")

    response = active_client.post("/api/flood-reports", json={"level": 3})

    assert response.status_code == 400


def test_proxy_forwards_query_string(active_client, fetcher):
    fetcher.respond(f"{ORIGIN}/api/alerts?region=north", '{"alerts":[1]}')

    response = active_client.get("/api/alerts?region=north")

    assert response.json() == {"alerts": [1]}


@pytest.mark.parametrize(
    "headers,expected",
    [
        ({"sec-fetch-dest": "document"}, "document"),
        ({"sec-fetch-dest": "image"}, "image"),
        ({"sec-fetch-dest": "empty", "accept": "text/html"}, ""),
        ({"accept": "text/html,application/xhtml+xml"}, "document"),
        ({"accept": "image/webp,*/*"}, "image"),
        ({"accept": "application/json"}, ""),
        ({}, ""),
    ],
)
def test_infer_destination(headers, expected):
    assert infer_destination(headers) == expected
