"""
Tests for install and activate.
"""

import pytest
from conftest import DYNAMIC_CACHE, ORIGIN, STATIC_CACHE

from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import CacheBackendError
from floodguard_cache.services import STATIC_ASSETS, LifecycleManager, WorkerState


def serve_static_assets(fetcher) -> None:
    for path in STATIC_ASSETS:
        fetcher.respond(f"{ORIGIN}{path}", f"asset {path}")


@pytest.fixture
def lifecycle(store, fetcher):
    return LifecycleManager(
        store,
        fetcher,
        static_cache_name=STATIC_CACHE,
        dynamic_cache_name=DYNAMIC_CACHE,
        origin_url=ORIGIN,
    )


@pytest.mark.asyncio
async def test_install_seeds_static_cache(lifecycle, store, fetcher):
    serve_static_assets(fetcher)

    result = await lifecycle.install()

    assert result.cache_name == STATIC_CACHE
    assert result.complete
    assert result.skip_waiting
    assert store.count(STATIC_CACHE) == len(STATIC_ASSETS)
    assert store.match(STATIC_CACHE, FetchRequest.get(f"{ORIGIN}/manifest.json").cache_key()) is not None
    assert lifecycle.state is WorkerState.INSTALLED


@pytest.mark.asyncio
async def test_install_is_best_effort(lifecycle, store, fetcher):
    """A failed asset is reported, the others are cached, and waiting is still skipped."""
    serve_static_assets(fetcher)
    fetcher.failing.add(f"{ORIGIN}/icons/icon-512x512.png")
    fetcher.respond(f"{ORIGIN}/manifest.json", "gone", status=404)

    result = await lifecycle.install()

    assert set(result.failed) == {f"{ORIGIN}/icons/icon-512x512.png", f"{ORIGIN}/manifest.json"}
    assert len(result.cached) == len(STATIC_ASSETS) - 2
    assert store.count(STATIC_CACHE) == len(STATIC_ASSETS) - 2
    assert result.skip_waiting
    assert not result.complete


@pytest.mark.asyncio
async def test_activate_deletes_previous_versions(lifecycle, store):
    response = CachedResponse.build("x")
    key = FetchRequest.get(f"{ORIGIN}/").cache_key()
    for name in ("static-v0", "dynamic-v0", "static-v1", "dynamic-v1"):
        store.put(name, key, response)

    result = await lifecycle.activate()

    assert sorted(result.deleted) == ["dynamic-v0", "static-v0"]
    assert sorted(store.cache_names()) == ["dynamic-v1", "static-v1"]
    assert sorted(result.retained) == ["dynamic-v1", "static-v1"]
    assert result.clients_claimed


@pytest.mark.asyncio
async def test_activate_deletes_unrelated_caches(lifecycle, store):
    store.put("floodguard-v1.0.0", FetchRequest.get(f"{ORIGIN}/").cache_key(), CachedResponse.build("x"))

    result = await lifecycle.activate()

    assert result.deleted == ("floodguard-v1.0.0",)
    assert store.cache_names() == []


@pytest.mark.asyncio
async def test_state_transitions(lifecycle, fetcher):
    assert lifecycle.state is WorkerState.PARSED
    assert not lifecycle.controlling

    await lifecycle.install()
    assert lifecycle.state is WorkerState.INSTALLED
    assert not lifecycle.controlling

    await lifecycle.activate()
    assert lifecycle.state is WorkerState.ACTIVATED
    assert lifecycle.controlling


@pytest.mark.asyncio
async def test_worker_start_installs_and_activates(worker, store, fetcher):
    serve_static_assets(fetcher)
    store.put("static-v0", FetchRequest.get(f"{ORIGIN}/").cache_key(), CachedResponse.build("old"))

    installed, activated = await worker.start()

    assert installed.complete
    assert activated.deleted == ("static-v0",)
    assert worker.lifecycle.controlling
    assert worker.cache_stats()["state"] == "activated"


@pytest.mark.asyncio
async def test_offline_document_served_from_precached_root(worker, fetcher):
    serve_static_assets(fetcher)
    await worker.start()
    fetcher.offline = True

    response = await worker.fetch(FetchRequest.get(f"{ORIGIN}/alerts", destination="document"))

    assert response.text() == "asset /"


@pytest.mark.asyncio
async def test_install_backend_failure_restores_state(lifecycle, store, fetcher, monkeypatch):
    serve_static_assets(fetcher)

    def broken_put(cache_name, key, response):
        raise CacheBackendError("redis down")

    monkeypatch.setattr(store, "put", broken_put)

    with pytest.raises(CacheBackendError):
        await lifecycle.install()

    assert lifecycle.state is WorkerState.PARSED

    monkeypatch.undo()
    result = await lifecycle.install()
    assert result.complete
    assert lifecycle.state is WorkerState.INSTALLED


@pytest.mark.asyncio
async def test_activate_backend_failure_restores_state(lifecycle, store, fetcher, monkeypatch):
    serve_static_assets(fetcher)
    await lifecycle.install()
    store.put("static-v0", FetchRequest.get(f"{ORIGIN}/").cache_key(), CachedResponse.build("old"))

    def broken_delete(cache_name):
        raise CacheBackendError("redis down")

    monkeypatch.setattr(store, "delete_cache", broken_delete)

    with pytest.raises(CacheBackendError):
        await lifecycle.activate()

    assert lifecycle.state is WorkerState.INSTALLED
    assert not lifecycle.controlling
