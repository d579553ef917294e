"""Queued write domain entity."""

import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

from .request import FetchRequest, normalize_headers

PENDING = "pending"
FAILED = "failed"


@dataclass(frozen=True)
class PendingWrite:
    """A mutating request that failed offline and waits to be replayed.

    Attributes:
        method: HTTP method (POST, PUT, PATCH, DELETE)
        url: Absolute URL
        headers: Request headers as (name, value) pairs
        body: Request body text
        idempotency_key: Sent as ``Idempotency-Key`` on every replay
        id: Submission id (queue key)
        created_at: Unix timestamp when the write was queued
        retries: Failed replay attempts so far
        max_retries: Attempts allowed before the write is marked failed
        status: "pending" or "failed"
        last_error: Description of the last failed attempt
    """

    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: str | None = None
    idempotency_key: str = field(default_factory=lambda: uuid.uuid4().hex)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)
    retries: int = 0
    max_retries: int = 3
    status: str = PENDING
    last_error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING

    def to_request(self) -> FetchRequest:
        """Build the replay request, carrying the idempotency key."""
        headers = [(k, v) for k, v in self.headers if k != "idempotency-key"]
        headers.append(("idempotency-key", self.idempotency_key))
        return FetchRequest(
            method=self.method,
            url=self.url,
            headers=tuple(headers),
            body=self.body.encode("utf-8") if self.body is not None else None,
        )

    def with_failure(self, error: str, permanent: bool = False) -> "PendingWrite":
        """Return a copy with one more failed attempt recorded.

        A permanent failure (a request that can never be sent) is marked
        failed regardless of the retries left.
        """
        retries = self.retries + 1
        return PendingWrite(
            method=self.method,
            url=self.url,
            headers=self.headers,
            body=self.body,
            idempotency_key=self.idempotency_key,
            id=self.id,
            created_at=self.created_at,
            retries=retries,
            max_retries=self.max_retries,
            status=FAILED if permanent or retries >= self.max_retries else PENDING,
            last_error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        data = asdict(self)
        data["headers"] = [list(pair) for pair in self.headers]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingWrite":
        """Create from dictionary."""
        data = dict(data)
        data["headers"] = normalize_headers([tuple(pair) for pair in data.get("headers", [])])
        return cls(**data)
