from functools import lru_cache

from redis import Redis

from .config import settings


@lru_cache
def _client(url: str) -> Redis:
    return Redis.from_url(url, decode_responses=True, socket_timeout=2.0)


def get_redis() -> Redis | None:
    """FastAPI dependency: shared Redis client, or None when REDIS_URL is unset."""
    if not settings.redis_url:
        return None
    return _client(settings.redis_url)
