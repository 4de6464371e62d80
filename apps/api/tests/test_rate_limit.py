import redis
from slowapi import Limiter

from actor_engine.core import rate_limit
from actor_engine.core.config import settings


class DummyRedis:
    def __init__(self, *, raise_exc: Exception | None = None):
        self._raise_exc = raise_exc

    def ping(self):
        if self._raise_exc:
            raise self._raise_exc
        return True


def _use_redis(monkeypatch, client: DummyRedis) -> None:
    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(settings, "REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setattr(rate_limit.redis, "from_url", lambda *_args, **_kwargs: client)


def test_testing_uses_memory_without_limits(monkeypatch):
    monkeypatch.setattr(settings, "TESTING", True)

    assert rate_limit.resolve_storage_uri() == rate_limit.MEMORY_STORAGE
    assert rate_limit.default_limits() == []


def test_reachable_redis_is_used(monkeypatch):
    _use_redis(monkeypatch, DummyRedis())

    assert rate_limit.resolve_storage_uri() == "redis://cache:6379/1"


def test_unreachable_redis_falls_back_to_memory(monkeypatch):
    _use_redis(monkeypatch, DummyRedis(raise_exc=redis.ConnectionError("refused")))

    assert rate_limit.resolve_storage_uri() == rate_limit.MEMORY_STORAGE


def test_default_limits_follow_settings(monkeypatch):
    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(settings, "RATE_LIMIT_API", 30)
    assert rate_limit.default_limits() == ["30/minute"]

    monkeypatch.setattr(settings, "RATE_LIMIT_API", 0)
    assert rate_limit.default_limits() == []


def test_build_limiter_in_memory(monkeypatch):
    monkeypatch.setattr(settings, "TESTING", True)

    limiter = rate_limit.build_limiter()

    assert isinstance(limiter, Limiter)
    assert limiter.enabled is True
