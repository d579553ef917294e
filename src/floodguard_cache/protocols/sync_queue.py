"""Sync queue protocol.

Defines the interface for the durable FIFO of writes waiting to be
replayed by background sync.
"""

from typing import Protocol, runtime_checkable

from floodguard_cache.entities import PendingWrite


@runtime_checkable
class SyncQueue(Protocol):
    """Protocol for pending-write queues."""

    def enqueue(self, write: PendingWrite) -> str:
        """Append a write to the queue.

        Returns:
            The write's id
        """
        ...

    def pending(self) -> list[PendingWrite]:
        """Return writes still eligible for replay, oldest first."""
        ...

    def all(self) -> list[PendingWrite]:
        """Return every queued write (pending and failed), oldest first."""
        ...

    def get(self, write_id: str) -> PendingWrite | None:
        ...

    def remove(self, write_id: str) -> bool:
        """Remove a write (after a successful replay).

        Returns:
            True if removed, False if unknown
        """
        ...

    def record_failure(self, write_id: str, error: str, permanent: bool = False) -> PendingWrite | None:
        """Count one failed replay attempt.

        A permanent failure marks the write failed at once.

        Returns:
            The updated write, or None if unknown
        """
        ...

    def count(self) -> int:
        """Number of queued writes, pending and failed."""
        ...
