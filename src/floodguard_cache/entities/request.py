"""Outgoing request domain entities."""

from dataclasses import dataclass, field
from urllib.parse import urljoin, urlsplit

Headers = tuple[tuple[str, str], ...]


def normalize_headers(headers: dict[str, str] | Headers | None) -> Headers:
    """Lower-case header names and freeze them into a tuple of pairs."""
    if not headers:
        return ()
    items = headers.items() if isinstance(headers, dict) else headers
    return tuple((name.lower(), value) for name, value in items)


@dataclass(frozen=True)
class CacheKey:
    """Identity of a cache entry.

    Attributes:
        method: HTTP method (always GET for stored entries)
        url: Absolute request URL
        vary: (header, value) pairs of the headers the key depends on
    """

    method: str
    url: str
    vary: Headers = ()

    def as_string(self) -> str:
        """Serialize the key into a stable storage field name."""
        key = f"{self.method} {self.url}"
        if self.vary:
            key += "|" + "&".join(f"{name}={value}" for name, value in self.vary)
        return key


@dataclass(frozen=True)
class FetchRequest:
    """Domain entity for a request the page sends towards the network.

    Attributes:
        method: Upper-case HTTP method
        url: Absolute URL
        destination: Fetch destination ("document", "image", "script", ... or "")
        headers: Request headers as lower-cased (name, value) pairs
        body: Raw request body, if any
    """

    method: str
    url: str
    destination: str = ""
    headers: Headers = ()
    body: bytes | None = field(default=None, repr=False)

    @classmethod
    def get(cls, url: str, destination: str = "", headers: dict[str, str] | None = None) -> "FetchRequest":
        """Build a GET request (like ``new Request(url)``)."""
        return cls(
            method="GET",
            url=url,
            destination=destination,
            headers=normalize_headers(headers),
        )

    @property
    def path(self) -> str:
        """URL path component."""
        return urlsplit(self.url).path or "/"

    @property
    def is_get(self) -> bool:
        return self.method.upper() == "GET"

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of a header, case-insensitively."""
        name = name.lower()
        for key, value in self.headers:
            if key == name:
                return value
        return default

    def cache_key(self, vary_headers: tuple[str, ...] = ()) -> CacheKey:
        """Build the cache key for this request.

        Args:
            vary_headers: Header names whose values become part of the key

        Returns:
            CacheKey for the request
        """
        vary = tuple((name, self.header(name, "") or "") for name in vary_headers)
        return CacheKey(method=self.method.upper(), url=self.url, vary=vary)

    def resolve(self, path: str) -> "FetchRequest":
        """Build a GET request for another path on the same origin."""
        return FetchRequest.get(urljoin(self.url, path))
