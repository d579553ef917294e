"""
Tests for the caching strategies.
"""

import asyncio

import pytest
from conftest import DYNAMIC_CACHE, ORIGIN, STATIC_CACHE

from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import NetworkUnavailableError
from floodguard_cache.services import (
    ApiStrategy,
    DocumentStrategy,
    ImageStrategy,
    StaticStrategy,
    TaskTracker,
)
from floodguard_cache.services.fallbacks import OFFLINE_MESSAGE, PLACEHOLDER_SVG

ALERTS_URL = f"{ORIGIN}/api/alerts"


@pytest.fixture
def tasks():
    return TaskTracker()


@pytest.fixture
def api(store, fetcher, tasks):
    return ApiStrategy(store, fetcher, DYNAMIC_CACHE, tasks, vary_headers=())


@pytest.fixture
def document(store, fetcher):
    return DocumentStrategy(store, fetcher, DYNAMIC_CACHE, vary_headers=())


@pytest.fixture
def image(store, fetcher):
    return ImageStrategy(store, fetcher, DYNAMIC_CACHE, vary_headers=())


@pytest.fixture
def static(store, fetcher):
    return StaticStrategy(store, fetcher, STATIC_CACHE, vary_headers=())


# API strategy


@pytest.mark.asyncio
async def test_api_hit_returns_cached_without_waiting_for_network(api, store, fetcher, tasks):
    """A cached API response is returned at once; the refresh runs afterwards."""
    request = FetchRequest.get(ALERTS_URL)
    store.put(DYNAMIC_CACHE, request.cache_key(), CachedResponse.build('{"alerts":["old"]}'))
    fetcher.respond(ALERTS_URL, '{"alerts":["new"]}')
    fetcher.gate = asyncio.Event()

    response = await api.handle(request)

    assert response.text() == '{"alerts":["old"]}'
    await asyncio.sleep(0)
    assert fetcher.urls == [ALERTS_URL]

    fetcher.gate.set()
    outcomes = await tasks.drain()
    assert all(o.ok for o in outcomes)
    assert store.match(DYNAMIC_CACHE, request.cache_key()).text() == '{"alerts":["new"]}'


@pytest.mark.asyncio
async def test_api_miss_fetches_then_serves_cached_copy_offline(api, store, fetcher, tasks):
    """A miss is fetched and stored; the same body comes back once offline."""
    fetcher.respond(ALERTS_URL, '{"alerts":[]}', headers={"Content-Type": "application/json"})
    request = FetchRequest.get(ALERTS_URL)

    first = await api.handle(request)
    assert first.status == 200
    assert first.json() == {"alerts": []}

    fetcher.offline = True
    second = await api.handle(request)
    await tasks.drain()

    assert second.body == first.body
    assert store.count(DYNAMIC_CACHE) == 1


@pytest.mark.asyncio
async def test_api_offline_miss_returns_503_json(api, fetcher):
    fetcher.offline = True

    response = await api.handle(FetchRequest.get(ALERTS_URL))

    assert response.status == 503
    assert response.content_type == "application/json"
    assert response.json() == {"success": False, "message": OFFLINE_MESSAGE, "offline": True}


@pytest.mark.asyncio
async def test_api_error_status_is_returned_but_not_cached(api, store, fetcher):
    fetcher.respond(ALERTS_URL, "boom", status=500)

    response = await api.handle(FetchRequest.get(ALERTS_URL))

    assert response.status == 500
    assert store.count(DYNAMIC_CACHE) == 0


@pytest.mark.asyncio
async def test_api_failed_refresh_keeps_cached_copy(api, store, fetcher, tasks):
    request = FetchRequest.get(ALERTS_URL)
    store.put(DYNAMIC_CACHE, request.cache_key(), CachedResponse.build('{"alerts":["old"]}'))
    fetcher.offline = True

    response = await api.handle(request)
    outcomes = await tasks.drain()

    assert response.text() == '{"alerts":["old"]}'
    assert len(outcomes) == 1
    assert isinstance(outcomes[0].error, NetworkUnavailableError)
    assert store.match(DYNAMIC_CACHE, request.cache_key()).text() == '{"alerts":["old"]}'


# Document strategy


@pytest.mark.asyncio
async def test_document_network_first_and_cached(document, store, fetcher):
    url = f"{ORIGIN}/reports"
    fetcher.respond(url, "<html>reports</html>")

    response = await document.handle(FetchRequest.get(url, destination="document"))

    assert response.text() == "<html>reports</html>"
    assert fetcher.urls == [url]
    assert store.count(DYNAMIC_CACHE) == 1


@pytest.mark.asyncio
async def test_document_offline_serves_cached_page(document, store, fetcher):
    request = FetchRequest.get(f"{ORIGIN}/reports", destination="document")
    store.put(DYNAMIC_CACHE, request.cache_key(), CachedResponse.build("<html>cached</html>"))
    fetcher.offline = True

    response = await document.handle(request)

    assert response.text() == "<html>cached</html>"


@pytest.mark.asyncio
async def test_document_offline_falls_back_to_root_in_any_cache(document, store, fetcher):
    """The precached root document is found in the static cache."""
    store.put(STATIC_CACHE, FetchRequest.get(f"{ORIGIN}/").cache_key(), CachedResponse.build("<html>app</html>"))
    fetcher.offline = True

    response = await document.handle(FetchRequest.get(f"{ORIGIN}/map?zoom=3", destination="document"))

    assert response.text() == "<html>app</html>"


@pytest.mark.asyncio
async def test_document_offline_with_nothing_cached_raises(document, fetcher):
    fetcher.offline = True

    with pytest.raises(NetworkUnavailableError):
        await document.handle(FetchRequest.get(f"{ORIGIN}/reports", destination="document"))


# Image strategy


@pytest.mark.asyncio
async def test_image_hit_is_byte_identical_without_network(image, store, fetcher):
    request = FetchRequest.get(f"{ORIGIN}/uploads/flood.png", destination="image")
    stored = CachedResponse.build(b"\x89PNG\r\n\x1a\n\x00\xff", headers={"Content-Type": "image/png"})
    store.put(DYNAMIC_CACHE, request.cache_key(), stored)

    response = await image.handle(request)

    assert response.body == stored.body
    assert response.headers == stored.headers
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_image_offline_miss_returns_svg_placeholder(image, fetcher):
    fetcher.offline = True

    response = await image.handle(FetchRequest.get(f"{ORIGIN}/uploads/flood.png", destination="image"))

    assert response.status == 200
    assert response.content_type == "image/svg+xml"
    assert response.text() == PLACEHOLDER_SVG


# Static strategy


@pytest.mark.asyncio
async def test_static_hit_from_static_cache(static, store, fetcher):
    request = FetchRequest.get(f"{ORIGIN}/static/js/bundle.js")
    store.put(STATIC_CACHE, request.cache_key(), CachedResponse.build("console.log(1)"))

    response = await static.handle(request)

    assert response.text() == "console.log(1)"
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_static_miss_is_fetched_into_static_cache(static, store, fetcher):
    url = f"{ORIGIN}/static/css/extra.css"
    fetcher.respond(url, "body{}")

    await static.handle(FetchRequest.get(url))

    assert store.count(STATIC_CACHE) == 1
    assert store.count(DYNAMIC_CACHE) == 0


@pytest.mark.asyncio
async def test_static_offline_miss_returns_404_text(static, fetcher):
    fetcher.offline = True

    response = await static.handle(FetchRequest.get(f"{ORIGIN}/static/js/chunk.js"))

    assert response.status == 404
    assert response.content_type == "text/plain; charset=utf-8"
    assert response.text() == "Asset unavailable offline"


@pytest.mark.asyncio
async def test_vary_headers_separate_cache_entries(store, fetcher):
    tasks = TaskTracker()
    api = ApiStrategy(store, fetcher, DYNAMIC_CACHE, tasks, vary_headers=("accept-language",))
    fetcher.respond(ALERTS_URL, "en")
    await api.handle(FetchRequest.get(ALERTS_URL, headers={"Accept-Language": "en"}))
    fetcher.respond(ALERTS_URL, "id")
    await api.handle(FetchRequest.get(ALERTS_URL, headers={"Accept-Language": "id"}))

    assert store.count(DYNAMIC_CACHE) == 2


@pytest.mark.asyncio
async def test_credentials_keep_users_apart_offline(store, fetcher):
    tasks = TaskTracker()
    api = ApiStrategy(store, fetcher, DYNAMIC_CACHE, tasks, vary_headers=("authorization", "cookie"))
    url = f"{ORIGIN}/api/emergency/mine"
    fetcher.respond(url, '{"owner":"alice"}', headers={"Content-Type": "application/json"})
    await api.handle(FetchRequest.get(url, headers={"Authorization": "Bearer alice"}))
    fetcher.offline = True

    alice = await api.handle(FetchRequest.get(url, headers={"Authorization": "Bearer alice"}))
    bob = await api.handle(FetchRequest.get(url, headers={"Authorization": "Bearer bob"}))
    await tasks.drain()

    assert alice.text() == '{"owner":"alice"}'
    assert bob.status == 503
    assert "alice" not in bob.text()


@pytest.mark.asyncio
async def test_static_assets_are_shared_across_credentials(store, fetcher):
    static = StaticStrategy(store, fetcher, STATIC_CACHE, vary_headers=("authorization", "cookie"))
    request = FetchRequest.get(f"{ORIGIN}/static/js/bundle.js")
    store.put(STATIC_CACHE, request.cache_key(), CachedResponse.build("console.log(1)"))
    fetcher.offline = True

    response = await static.handle(FetchRequest.get(request.url, headers={"Cookie": "session=abc"}))

    assert response.text() == "console.log(1)"


@pytest.mark.asyncio
async def test_document_root_fallback_ignores_credentials(store, fetcher):
    document = DocumentStrategy(store, fetcher, DYNAMIC_CACHE, vary_headers=("authorization", "cookie"))
    store.put(STATIC_CACHE, FetchRequest.get(f"{ORIGIN}/").cache_key(), CachedResponse.build("<html>shell</html>"))
    fetcher.offline = True

    response = await document.handle(
        FetchRequest.get(f"{ORIGIN}/reports", headers={"Cookie": "session=abc"}, destination="document")
    )

    assert response.text() == "<html>shell</html>"
