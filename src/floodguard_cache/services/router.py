"""Request classification and dispatch."""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from floodguard_cache.entities import CachedResponse, FetchRequest

from .strategies import CacheStrategy

logger = logging.getLogger(__name__)

API_CACHE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/api/flood-reports"),
    re.compile(r"/api/alerts"),
    re.compile(r"/api/emergency"),
    re.compile(r"/api/weather"),
)


def is_document(request: FetchRequest) -> bool:
    return request.destination == "document"


def is_api(request: FetchRequest) -> bool:
    path = request.path
    return any(pattern.search(path) for pattern in API_CACHE_PATTERNS)


def is_image(request: FetchRequest) -> bool:
    return request.destination == "image"


def always(request: FetchRequest) -> bool:
    return True


@dataclass(frozen=True)
class ClassificationRule:
    """One (predicate, strategy) pair of the routing table.

    Attributes:
        name: Rule name, reported by RequestRouter.classify()
        predicate: Returns True if the rule applies to a request
        strategy: Strategy that handles matching requests
    """

    name: str
    predicate: Callable[[FetchRequest], bool]
    strategy: CacheStrategy


class RequestRouter:
    """Dispatches GET requests to the first matching strategy.

    Non-GET requests are never intercepted: ``route`` returns None for them
    and the caller sends them to the network untouched.

    Example:
        ```python
        router = RequestRouter.create(document=doc, api=api, image=img, static=static)
        router.classify(FetchRequest.get("http://origin/api/alerts"))  # "api"
        ```
    """

    def __init__(self, rules: Sequence[ClassificationRule]) -> None:
        """Initialize the router.

        Args:
            rules: Ordered routing table. The last rule should always match.
        """
        if not rules:
            raise ValueError("RequestRouter needs at least one rule")
        self._rules = tuple(rules)

    @classmethod
    def create(
        cls,
        document: CacheStrategy,
        api: CacheStrategy,
        image: CacheStrategy,
        static: CacheStrategy,
    ) -> "RequestRouter":
        """Build the standard routing table: document, API, image, then static."""
        return cls(
            [
                ClassificationRule("document", is_document, document),
                ClassificationRule("api", is_api, api),
                ClassificationRule("image", is_image, image),
                ClassificationRule("static", always, static),
            ]
        )

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def select(self, request: FetchRequest) -> ClassificationRule | None:
        """Return the first rule matching a GET request, None for other methods."""
        if not request.is_get:
            return None
        for rule in self._rules:
            if rule.predicate(request):
                return rule
        return None

    def classify(self, request: FetchRequest) -> str | None:
        """Name of the rule that would handle the request, None if not intercepted."""
        rule = self.select(request)
        return rule.name if rule else None

    async def route(self, request: FetchRequest) -> CachedResponse | None:
        """Handle a request with its strategy.

        Returns:
            The strategy's response, or None when the request is not intercepted
        """
        rule = self.select(request)
        if rule is None:
            return None
        logger.debug("Routing %s %s via %s strategy", request.method, request.url, rule.name)
        return await rule.strategy.handle(request)
