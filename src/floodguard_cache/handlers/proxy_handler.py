"""HTTP handler for proxied page requests.

Converts incoming Starlette requests into FetchRequest entities, lets the
worker produce the response, and converts the result back.
"""

import logging

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse

from floodguard_cache.config import settings
from floodguard_cache.entities import CachedResponse, FetchRequest
from floodguard_cache.exceptions import InvalidRequestError, NetworkUnavailableError
from floodguard_cache.services import OfflineCacheWorker

logger = logging.getLogger(__name__)

_SKIPPED_REQUEST_HEADERS = frozenset(
    {"host", "connection", "keep-alive", "transfer-encoding", "upgrade", "te", "content-length"}
)
_SKIPPED_RESPONSE_HEADERS = frozenset({"content-length", "transfer-encoding", "connection"})

OFFLINE_TEXT = "Network unavailable"


def infer_destination(headers: dict[str, str]) -> str:
    """Fetch destination of a request.

    Browsers send ``Sec-Fetch-Dest``. For other clients the destination is
    guessed from ``Accept``: HTML means a document, image types mean an image.
    """
    destination = headers.get("sec-fetch-dest")
    if destination:
        return "" if destination == "empty" else destination

    accept = headers.get("accept", "")
    if "text/html" in accept:
        return "document"
    if accept.startswith("image/"):
        return "image"
    return ""


class ProxyHandler:
    """Catch-all handler that puts the offline cache in front of the origin.

    Example:
        ```python
        handler = ProxyHandler(worker=worker)

        @app.api_route("/{path:path}", methods=["GET", "POST"])
        async def proxy(request: Request) -> Response:
            return await handler.handle(request)
        ```
    """

    def __init__(self, worker: OfflineCacheWorker, origin_url: str | None = None) -> None:
        """Initialize the proxy handler.

        Args:
            worker: The offline cache worker (required).
            origin_url: Origin base URL. Defaults to settings.
        """
        self._worker = worker
        self._origin_url = (origin_url or settings.origin_url).rstrip("/")

    async def build_request(self, request: Request) -> FetchRequest:
        """Translate an incoming request into the request the page meant to send."""
        url = f"{self._origin_url}{request.url.path}"
        if request.url.query:
            url = f"{url}?{request.url.query}"

        headers = dict(request.headers)
        body = await request.body()
        return FetchRequest(
            method=request.method.upper(),
            url=url,
            destination=infer_destination(headers),
            headers=tuple(
                (name, value) for name, value in request.headers.items() if name not in _SKIPPED_REQUEST_HEADERS
            ),
            body=body or None,
        )

    @staticmethod
    def to_response(cached: CachedResponse) -> Response:
        response = Response(content=cached.body, status_code=cached.status)
        response.raw_headers.extend(
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in cached.headers
            if name not in _SKIPPED_RESPONSE_HEADERS
        )
        return response

    async def handle(self, request: Request) -> Response:
        """Handle any proxied request.

        Returns:
            The worker's response, a 502 when the network is down and the
            cache layer has nothing to stand in, or a 400 for a URL that
            cannot be sent
        """
        fetch_request = await self.build_request(request)
        try:
            cached = await self._worker.fetch(fetch_request)
        except NetworkUnavailableError as e:
            logger.info("No response available for %s %s: %s", fetch_request.method, fetch_request.url, e)
            return PlainTextResponse(OFFLINE_TEXT, status_code=status.HTTP_502_BAD_GATEWAY)
        except InvalidRequestError as e:
            logger.warning("Cannot proxy %s %s: %s", fetch_request.method, fetch_request.url, e)
            return PlainTextResponse("Bad request", status_code=status.HTTP_400_BAD_REQUEST)
        return self.to_response(cached)
