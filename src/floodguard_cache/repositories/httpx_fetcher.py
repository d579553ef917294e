"""httpx-based network fetcher.

Sends requests to the origin server with a shared ``httpx.AsyncClient`` and
captures the whole response body, so it can be cached and replayed.
"""

import logging
from urllib.parse import urljoin

import httpx

from floodguard_cache.config import settings
from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import InvalidRequestError, NetworkUnavailableError

logger = logging.getLogger(__name__)

# Connection-scoped headers plus the ones httpx recomputes itself
# (bodies are decoded, so the original encoding and length no longer apply)
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
        "content-encoding",
    }
)


class HttpxFetcher:
    """httpx implementation of the Fetcher protocol.

    Example:
        ```python
        fetcher = HttpxFetcher.create(origin_url="http://localhost:5000")
        response = await fetcher.fetch(FetchRequest.get("http://localhost:5000/api/alerts"))
        print(response.status)
        ```
    """

    def __init__(
        self,
        origin_url: str | None = None,
        timeout: float | None = None,
        health_path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            origin_url: Origin base URL. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            health_path: Path probed by is_available(). Defaults to settings.
            transport: Custom httpx transport (e.g. ``httpx.MockTransport``).
        """
        self._origin_url = origin_url or settings.origin_url
        self._timeout = timeout or settings.fetch_timeout
        self._health_path = health_path or settings.origin_health_path
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        origin_url: str | None = None,
        timeout: float | None = None,
    ) -> "HttpxFetcher":
        """Factory method to create HttpxFetcher with defaults."""
        return cls(origin_url=origin_url, timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                transport=self._transport,
            )
        return self._client

    @property
    def origin_url(self) -> str:
        return self._origin_url

    async def fetch(self, request: FetchRequest) -> CachedResponse:
        """Send a request and capture the full response.

        Args:
            request: The request to send

        Returns:
            The captured response, whatever its status

        Raises:
            InvalidRequestError: If the URL is malformed or not http(s)
            NetworkUnavailableError: On any other transport failure
        """
        headers = [(name, value) for name, value in request.headers if name not in _HOP_BY_HOP]

        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.warning("Cannot send %s %s: %s", request.method, request.url, e)
            raise InvalidRequestError(request.url, str(e) or type(e).__name__) from e
        except httpx.TransportError as e:
            logger.debug("Network failure for %s %s: %r", request.method, request.url, e)
            raise NetworkUnavailableError(request.url, str(e) or type(e).__name__) from e

        return CachedResponse(
            status=response.status_code,
            headers=tuple(
                (name.lower(), value)
                for name, value in response.headers.multi_items()
                if name.lower() not in _HOP_BY_HOP
            ),
            body=response.content,
            status_text=response.reason_phrase,
            url=request.url,
        )

    async def is_available(self) -> bool:
        """Check if the origin answers its health endpoint.

        Returns:
            True if the origin responded without a server error, False otherwise
        """
        try:
            response = await self.fetch(FetchRequest.get(urljoin(self._origin_url, self._health_path)))
        except NetworkUnavailableError:
            return False
        return response.status < 500

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
