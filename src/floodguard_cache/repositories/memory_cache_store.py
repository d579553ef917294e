"""In-memory implementation of CacheStore.

Selected with ``CACHE_BACKEND=memory``. Contents live as long as the process,
so this backend suits development and tests rather than production.
"""

from floodguard_cache.entities import CachedResponse, CacheKey


class MemoryCacheStore:
    """Dict-backed named caches.

    Satisfies the CacheStore protocol. Dict insertion order doubles as
    cache creation order.
    """

    def __init__(self) -> None:
        self._caches: dict[str, dict[str, CachedResponse]] = {}

    def match(self, cache_name: str, key: CacheKey) -> CachedResponse | None:
        return self._caches.get(cache_name, {}).get(key.as_string())

    def match_any(self, key: CacheKey) -> CachedResponse | None:
        field = key.as_string()
        for entries in self._caches.values():
            if field in entries:
                return entries[field]
        return None

    def put(self, cache_name: str, key: CacheKey, response: CachedResponse) -> None:
        self._caches.setdefault(cache_name, {})[key.as_string()] = response

    def cache_names(self) -> list[str]:
        return list(self._caches)

    def delete_cache(self, cache_name: str) -> bool:
        return self._caches.pop(cache_name, None) is not None

    def count(self, cache_name: str) -> int:
        return len(self._caches.get(cache_name, {}))

    def health_check(self) -> bool:
        return True

    def get_stats(self) -> dict:
        return {
            "backend": "memory",
            "caches": {name: len(entries) for name, entries in self._caches.items()},
        }
