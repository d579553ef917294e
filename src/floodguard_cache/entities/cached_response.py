"""Captured response domain entity."""

import json
from dataclasses import dataclass, field
from typing import Any

from .request import Headers, normalize_headers


@dataclass(frozen=True)
class CachedResponse:
    """Domain entity for a response, either from the network or from a cache.

    Instances are immutable, so handing the same object to the cache and to
    the caller is the equivalent of ``response.clone()``.

    Attributes:
        status: HTTP status code
        headers: Response headers as lower-cased (name, value) pairs
        body: Raw body bytes
        status_text: Reason phrase
        url: URL the response was produced for
    """

    status: int
    headers: Headers = ()
    body: bytes = field(default=b"", repr=False)
    status_text: str = ""
    url: str = ""

    @classmethod
    def build(
        cls,
        body: bytes | str,
        status: int = 200,
        headers: dict[str, str] | None = None,
        status_text: str = "",
        url: str = "",
    ) -> "CachedResponse":
        """Create a synthesized response (like ``new Response(body, init)``)."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(
            status=status,
            headers=normalize_headers(headers),
            body=body,
            status_text=status_text,
            url=url,
        )

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of a header, case-insensitively."""
        name = name.lower()
        for key, value in self.headers:
            if key == name:
                return value
        return default

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)
