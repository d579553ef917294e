"""Exceptions raised by the offline cache layers."""


class OfflineCacheError(Exception):
    """Base class for errors raised by this package."""


class NetworkUnavailableError(OfflineCacheError):
    """The origin could not be reached.

    Connection refused, DNS failure, timeouts and every other transport-level
    failure collapse into this one condition. HTTP error statuses are not
    network failures; they come back as ordinary responses.
    """

    def __init__(self, url: str, reason: str | None = None) -> None:
        self.url = url
        self.reason = reason
        message = f"Network unavailable for {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CacheBackendError(OfflineCacheError):
    """The cache or queue backend failed (e.g. Redis is unreachable)."""


class InvalidRequestError(OfflineCacheError):
    """The request itself can never be sent (malformed URL, unsupported scheme).

    Unlike NetworkUnavailableError this says nothing about connectivity;
    retrying the same request will fail the same way.
    """

    def __init__(self, url: str, reason: str | None = None) -> None:
        self.url = url
        self.reason = reason
        message = f"Invalid request for {url!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
