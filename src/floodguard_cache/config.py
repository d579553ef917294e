import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

# Credentials are part of every cache key so users behind the proxy never share entries
DEFAULT_VARY_HEADERS = "authorization,cookie"


def versioned_cache_name(prefix: str, kind: str | None, version: str) -> str:
    """Join prefix, kind and version, skipping empty parts (e.g. ``floodguard-static-v1.0.0``)."""
    return "-".join(part for part in (prefix, kind, version) if part)


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Origin
    origin_url: str = os.getenv("ORIGIN_URL", "http://localhost:5000")
    origin_health_path: str = os.getenv("ORIGIN_HEALTH_PATH", "/health")
    fetch_timeout: float = float(os.getenv("FETCH_TIMEOUT", "30"))

    # Cache
    cache_prefix: str = os.getenv("CACHE_PREFIX", "floodguard")
    cache_version: str = os.getenv("CACHE_VERSION", "v1.0.0")
    cache_backend: str = os.getenv("CACHE_BACKEND", "redis")
    cache_vary_headers: tuple[str, ...] = _split_csv(os.getenv("CACHE_VARY_HEADERS", DEFAULT_VARY_HEADERS))

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    redis_namespace: str = os.getenv("REDIS_NAMESPACE", "floodguard")

    # Background sync
    sync_max_retries: int = int(os.getenv("SYNC_MAX_RETRIES", "3"))
    sync_interval: float = float(os.getenv("SYNC_INTERVAL", "0"))

    # Push notifications
    notification_title: str = os.getenv("NOTIFICATION_TITLE", "FloodGuard Alert")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def _versioned(self, kind: str | None) -> str:
        return versioned_cache_name(self.cache_prefix, kind, self.cache_version)

    @property
    def cache_name(self) -> str:
        """General cache identifier (e.g. ``floodguard-v1.0.0``)."""
        return self._versioned(None)

    @property
    def static_cache_name(self) -> str:
        """Current static cache (e.g. ``floodguard-static-v1.0.0``)."""
        return self._versioned("static")

    @property
    def dynamic_cache_name(self) -> str:
        """Current dynamic cache (e.g. ``floodguard-dynamic-v1.0.0``)."""
        return self._versioned("dynamic")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in ("redis", "memory"):
            raise ValueError(
                f"CACHE_BACKEND must be one of ['redis', 'memory'], got {self.cache_backend!r}"
            )

        if not self.cache_version:
            raise ValueError("CACHE_VERSION must not be empty")

        if not self.origin_url.startswith(("http://", "https://")):
            raise ValueError(f"ORIGIN_URL must be an http(s) URL, got {self.origin_url!r}")

        if self.fetch_timeout <= 0:
            raise ValueError("FETCH_TIMEOUT must be positive")

        if self.sync_max_retries < 1:
            raise ValueError("SYNC_MAX_RETRIES must be at least 1")

        if self.sync_interval < 0:
            raise ValueError("SYNC_INTERVAL must not be negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
