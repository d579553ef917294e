"""Cache storage protocol.

Defines the interface for a durable store of named caches, each mapping a
request key to a captured response (the server-side equivalent of the
browser's ``CacheStorage``).

Implementations can include:
- Redis (default)
- In-process memory (development and tests)
"""

from typing import Protocol, runtime_checkable

from floodguard_cache.entities import CachedResponse, CacheKey


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for named-cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from floodguard_cache.protocols import CacheStore

        store: CacheStore = RedisCacheStore.create()
        store: CacheStore = MemoryCacheStore()
        ```
    """

    def match(self, cache_name: str, key: CacheKey) -> CachedResponse | None:
        """Look up an entry in one named cache.

        Args:
            cache_name: Name of the cache to search
            key: The request key

        Returns:
            The stored response, or None on a miss
        """
        ...

    def match_any(self, key: CacheKey) -> CachedResponse | None:
        """Look up an entry across all named caches, oldest cache first.

        Args:
            key: The request key

        Returns:
            The first stored response found, or None
        """
        ...

    def put(self, cache_name: str, key: CacheKey, response: CachedResponse) -> None:
        """Store or overwrite an entry, creating the named cache if needed.

        Args:
            cache_name: Name of the cache to write
            key: The request key
            response: The response to store
        """
        ...

    def cache_names(self) -> list[str]:
        """List named caches in creation order.

        Returns:
            Cache names
        """
        ...

    def delete_cache(self, cache_name: str) -> bool:
        """Delete a whole named cache.

        Args:
            cache_name: Name of the cache to delete

        Returns:
            True if the cache existed, False otherwise
        """
        ...

    def count(self, cache_name: str) -> int:
        """Count entries in one named cache.

        Returns:
            Number of entries (0 for an unknown cache)
        """
        ...

    def health_check(self) -> bool:
        """Check if the backend is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...

    def get_stats(self) -> dict:
        """Get backend statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
