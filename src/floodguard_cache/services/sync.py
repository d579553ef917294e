"""Background sync: replaying writes that failed while offline.

Mutating API calls that fail offline are queued with an idempotency key.
When the ``flood-report-sync`` trigger fires, the queue is drained in FIFO
order; every replay carries the same ``Idempotency-Key`` header so the
origin can drop duplicates.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from urllib.parse import urlsplit

from floodguard_cache.config import settings
from floodguard_cache.entities import PendingWrite, normalize_headers
from floodguard_cache.exceptions import InvalidRequestError, NetworkUnavailableError
from floodguard_cache.protocols import Fetcher, SyncQueue

logger = logging.getLogger(__name__)

SYNC_TAG = "flood-report-sync"


def validate_write_url(url: str) -> None:
    """Reject URLs a replay could never be sent to.

    Raises:
        ValueError: If the URL is not absolute http(s) or contains whitespace or control characters
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"Write URL must be an absolute http(s) URL, got {url!r}")
    if any(ch.isspace() or ord(ch) < 32 or ord(ch) == 127 for ch in url):
        raise ValueError(f"Write URL contains whitespace or control characters: {url!r}")


@dataclass
class SyncResult:
    """Result of one drain of the queue."""

    tag: str
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    remaining: int = 0
    interrupted: bool = False
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.interrupted


class BackgroundSyncService:
    """Queues failed writes and replays them on the sync trigger.

    Example:
        ```python
        sync = BackgroundSyncService(queue=MemorySyncQueue(), fetcher=fetcher)
        sync.enqueue("POST", "http://origin/api/flood-reports", body='{"level": 3}')
        result = await sync.on_sync("flood-report-sync")
        ```
    """

    def __init__(
        self,
        queue: SyncQueue,
        fetcher: Fetcher,
        max_retries: int | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            queue: Durable pending-write queue
            fetcher: Outbound network
            max_retries: Failed replays before a write is marked failed. Defaults to settings.
        """
        self._queue = queue
        self._fetcher = fetcher
        self._max_retries = max_retries or settings.sync_max_retries
        self._lock = asyncio.Lock()
        self._last_result: SyncResult | None = None

    def enqueue(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
        idempotency_key: str | None = None,
    ) -> PendingWrite:
        """Queue a mutating request for replay.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            body: Request body text
            idempotency_key: Key sent on every replay. Generated if not given.

        Returns:
            The queued write

        Raises:
            ValueError: If the URL could never be replayed
        """
        validate_write_url(url)
        write = PendingWrite(
            method=method.upper(),
            url=url,
            headers=normalize_headers(headers),
            body=body,
            max_retries=self._max_retries,
        )
        if idempotency_key:
            write = replace(write, idempotency_key=idempotency_key)

        self._queue.enqueue(write)
        logger.info("Queued %s %s for background sync (%s)", write.method, write.url, write.id)
        return write

    def queued(self) -> list[PendingWrite]:
        return self._queue.all()

    async def on_sync(self, tag: str) -> SyncResult | None:
        """Handle a sync trigger.

        Args:
            tag: Sync tag; only ``flood-report-sync`` is handled

        Returns:
            SyncResult, or None for an unknown tag
        """
        logger.info("Background sync triggered: %s", tag)
        if tag != SYNC_TAG:
            logger.warning("Ignoring unknown sync tag: %s", tag)
            return None
        return await self.sync_pending(tag)

    async def sync_pending(self, tag: str = SYNC_TAG) -> SyncResult:
        """Replay every pending write once, oldest first.

        A 2xx response removes the write. Any other status counts as a failed
        attempt. A write that can never be sent is marked failed at once. A
        network failure stops the drain and consumes no attempt, since every
        later write would fail the same way.

        Triggers that arrive while a drain is running wait for it and share
        its result, so no write is replayed twice for one outage.
        """
        if self._lock.locked():
            async with self._lock:
                logger.info("Sync already running, sharing its result")
                if self._last_result is not None:
                    return self._last_result

        async with self._lock:
            self._last_result = None
            self._last_result = await self._drain(tag)
            return self._last_result

    async def _drain(self, tag: str) -> SyncResult:
        start = time.time()
        result = SyncResult(tag=tag)

        for write in self._queue.pending():
            try:
                response = await self._fetcher.fetch(write.to_request())
            except NetworkUnavailableError as e:
                logger.info("Still offline, stopping sync: %s", e)
                result.interrupted = True
                break
            except InvalidRequestError as e:
                result.processed += 1
                result.failed += 1
                result.errors.append(f"{write.id}: {e}")
                self._queue.record_failure(write.id, str(e), permanent=True)
                logger.error("Dropping unsendable write %s: %s", write.id, e)
                continue

            result.processed += 1
            if response.ok:
                self._queue.remove(write.id)
                result.succeeded += 1
                logger.info("Synced %s %s (%s)", write.method, write.url, write.id)
                continue

            error = f"HTTP {response.status}"
            updated = self._queue.record_failure(write.id, error)
            result.failed += 1
            result.errors.append(f"{write.id}: {error}")
            if updated is not None:
                logger.warning(
                    "Failed to sync %s (%d/%d retries): %s",
                    write.id,
                    updated.retries,
                    updated.max_retries,
                    error,
                )

        result.remaining = len(self._queue.pending())
        result.duration_seconds = time.time() - start
        logger.info(
            "Sync summary: processed=%d succeeded=%d failed=%d remaining=%d",
            result.processed,
            result.succeeded,
            result.failed,
            result.remaining,
        )
        return result

    async def run_periodic(self, interval: float) -> None:
        """Fire the sync trigger whenever the origin is reachable and work is queued.

        A failed round is logged and the loop carries on. Runs until cancelled.
        """
        while True:
            await asyncio.sleep(interval)
            try:
                if self._queue.pending() and await self._fetcher.is_available():
                    await self.on_sync(SYNC_TAG)
            except Exception:
                logger.exception("Periodic sync round failed")
