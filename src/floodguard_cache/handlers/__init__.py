"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (caching logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Caching) -> (Redis / network)
"""

from .proxy_handler import ProxyHandler, infer_destination
from .worker_handler import WorkerHandler

__all__ = [
    "ProxyHandler",
    "WorkerHandler",
    "infer_destination",
]
