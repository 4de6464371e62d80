"""
Rate limiting for the actor engine API.

Limits are keyed by caller address. Counters are shared through Redis so every
worker enforces the same budget; under TESTING, or when Redis cannot be
reached at startup, they are kept in process memory instead.
"""

import logging

import redis
from slowapi import Limiter
from slowapi.util import get_remote_address

from actor_engine.core.config import settings

MEMORY_STORAGE = "memory://"

logger = logging.getLogger(__name__)


def default_limits() -> list[str]:
    if settings.TESTING or settings.RATE_LIMIT_API <= 0:
        return []
    return [f"{settings.RATE_LIMIT_API}/minute"]


def resolve_storage_uri() -> str:
    """Redis URL when a ping succeeds, memory storage otherwise."""
    if settings.TESTING:
        return MEMORY_STORAGE
    try:
        redis.from_url(settings.REDIS_URL, socket_connect_timeout=1).ping()
    except (redis.RedisError, ValueError) as e:
        logger.warning("Redis unavailable for rate limiting, using in-memory: %s", e)
        return MEMORY_STORAGE
    return settings.REDIS_URL


def build_limiter() -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri=resolve_storage_uri(),
        default_limits=default_limits(),
    )


limiter = build_limiter()
