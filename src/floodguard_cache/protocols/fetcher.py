"""Network fetcher protocol.

Defines the interface for sending a request to the origin server.
"""

from typing import Protocol, runtime_checkable

from floodguard_cache.entities import CachedResponse, FetchRequest


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for the outbound network.

    Example:
        ```python
        fetcher: Fetcher = HttpxFetcher.create()
        response = await fetcher.fetch(FetchRequest.get("http://origin/api/alerts"))
        ```
    """

    async def fetch(self, request: FetchRequest) -> CachedResponse:
        """Send a request and capture the full response.

        Args:
            request: The request to send

        Returns:
            The response, whatever its status

        Raises:
            InvalidRequestError: If the request can never be sent
            NetworkUnavailableError: If the origin cannot be reached
        """
        ...

    async def is_available(self) -> bool:
        """Check whether the origin is reachable.

        Returns:
            True if reachable, False otherwise
        """
        ...
