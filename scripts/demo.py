#!/usr/bin/env python3
"""
Demo script for the offline cache.

Runs the worker against a simulated FloodGuard origin (an in-process
``httpx.MockTransport``) and an in-memory cache, then switches the network
off to show what the app still gets.
"""

import asyncio
import json

import httpx

from floodguard_cache.entities import FetchRequest
from floodguard_cache.repositories import HttpxFetcher, MemoryCacheStore, MemoryNotificationCenter, MemorySyncQueue
from floodguard_cache.services import STATIC_ASSETS, SYNC_TAG, OfflineCacheWorker

ORIGIN = "http://floodguard.local"


class SimulatedOrigin:
    """Serves the static assets and a few API routes; can be switched off."""

    def __init__(self) -> None:
        self.online = True
        self.reports: dict[str, dict] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if request.method == "POST" and path == "/api/flood-reports":
            key = request.headers.get("idempotency-key", "")
            self.reports.setdefault(key, json.loads(request.content))
            return httpx.Response(201, json={"success": True, "id": key})
        if path == "/api/alerts":
            return httpx.Response(200, json={"alerts": [{"id": 1, "level": "warning", "area": "Sector 4"}]})
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})
        if path in STATIC_ASSETS:
            return httpx.Response(200, text=f"asset {path}")
        return httpx.Response(404, text="Not Found")


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def build_worker(origin: SimulatedOrigin) -> OfflineCacheWorker:
    fetcher = HttpxFetcher(origin_url=ORIGIN, transport=httpx.MockTransport(origin))
    return OfflineCacheWorker.create(
        store=MemoryCacheStore(),
        fetcher=fetcher,
        queue=MemorySyncQueue(),
        notifications=MemoryNotificationCenter(),
        origin_url=ORIGIN,
    )


async def demo_lifecycle(worker: OfflineCacheWorker) -> None:
    """Demonstrate install and activate."""
    print_section("Install & Activate")

    installed, activated = await worker.start()
    print(f"\n📦 Static cache: {installed.cache_name}")
    for url in installed.cached:
        print(f"  ✓ Cached: {url}")
    for url in installed.failed:
        print(f"  ✗ Failed: {url}")
    print(f"\n🧹 Old caches deleted: {list(activated.deleted) or 'none'}")
    print(f"  State: {worker.lifecycle.state.value}")


async def demo_offline_fetch(worker: OfflineCacheWorker, origin: SimulatedOrigin) -> None:
    """Demonstrate the strategies online, then offline."""
    print_section("Fetching Online, Then Offline")

    requests = [
        FetchRequest.get(f"{ORIGIN}/api/alerts"),
        FetchRequest.get(f"{ORIGIN}/api/weather"),
        FetchRequest.get(f"{ORIGIN}/reports", destination="document"),
        FetchRequest.get(f"{ORIGIN}/uploads/river.png", destination="image"),
        FetchRequest.get(f"{ORIGIN}/static/js/chunk-42.js"),
    ]

    print("\n🌐 Online:")
    for request in requests:
        response = await worker.fetch(request)
        print(f"  [{worker.classify(request):<8}] {request.path:<24} → {response.status}")

    await worker.tasks.drain()
    origin.online = False

    print("\n📴 Offline:")
    for request in requests:
        try:
            response = await worker.fetch(request)
        except Exception as e:
            print(f"  [{worker.classify(request):<8}] {request.path:<24} → ✗ {e}")
            continue
        print(
            f"  [{worker.classify(request):<8}] {request.path:<24} → {response.status} "
            f"({response.content_type or 'no content type'})"
        )
    await worker.tasks.drain()


async def demo_background_sync(worker: OfflineCacheWorker, origin: SimulatedOrigin) -> None:
    """Demonstrate queueing a report offline and replaying it."""
    print_section("Background Sync")

    write = worker.enqueue(
        "POST",
        f"{ORIGIN}/api/flood-reports",
        headers={"Content-Type": "application/json"},
        body=json.dumps({"level": 3, "location": "Sector 4"}),
    )
    print(f"\n📝 Queued report {write.id} (Idempotency-Key: {write.idempotency_key})")

    result = await worker.run_sync(SYNC_TAG)
    print(f"  Offline sync: interrupted={result.interrupted}, remaining={result.remaining}")

    origin.online = True
    result = await worker.run_sync(SYNC_TAG)
    print(f"  Online sync:  succeeded={result.succeeded}, remaining={result.remaining}")
    print(f"  Reports stored by origin: {len(origin.reports)}")


async def demo_push(worker: OfflineCacheWorker) -> None:
    """Demonstrate push notifications."""
    print_section("Push Notifications")

    for payload in (b"River level critical in Sector 4", None):
        notification = await worker.push(payload)
        print(f"\n🔔 {notification.title}: {notification.body}")

    latest = worker.notifications()[0]
    outcome = worker.notification_click(latest.id, "view")
    print(f"\n  Clicked 'view' → open {outcome.open_url}")
    print(f"  Active notifications: {len(worker.notifications())}")


async def run() -> None:
    origin = SimulatedOrigin()
    worker = build_worker(origin)
    try:
        await demo_lifecycle(worker)
        await demo_offline_fetch(worker, origin)
        await demo_background_sync(worker, origin)
        await demo_push(worker)

        print_section("Cache Statistics")
        for name, count in worker.cache_stats()["caches"].items():
            print(f"  {name}: {count} entries")
    finally:
        await worker.shutdown()


def main() -> None:
    """Run all demos."""
    print("\n🚀 FloodGuard Offline Cache Demo")
    print("=" * 70)
    print("This demo runs the offline cache against a simulated origin")

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")


if __name__ == "__main__":
    main()
