"""In-memory implementation of SyncQueue."""

from floodguard_cache.entities import PendingWrite


class MemorySyncQueue:
    """Dict-backed FIFO of pending writes. Satisfies the SyncQueue protocol."""

    def __init__(self) -> None:
        self._items: dict[str, PendingWrite] = {}

    def enqueue(self, write: PendingWrite) -> str:
        self._items[write.id] = write
        return write.id

    def all(self) -> list[PendingWrite]:
        return list(self._items.values())

    def pending(self) -> list[PendingWrite]:
        return [write for write in self._items.values() if write.is_pending]

    def get(self, write_id: str) -> PendingWrite | None:
        return self._items.get(write_id)

    def remove(self, write_id: str) -> bool:
        return self._items.pop(write_id, None) is not None

    def record_failure(self, write_id: str, error: str, permanent: bool = False) -> PendingWrite | None:
        write = self._items.get(write_id)
        if write is None:
            return None
        # Reassigning an existing key keeps its FIFO position
        self._items[write_id] = write.with_failure(error, permanent)
        return self._items[write_id]

    def count(self) -> int:
        return len(self._items)
