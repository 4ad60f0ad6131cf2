"""Tests for the Redis resolution cache."""

import fnmatch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app import reset_link_store
from shortlink.database.cache import RedisCache
from shortlink.exceptions import StorageError
from shortlink.service import LinkService
from shortlink.shortcode import ShortCodeGenerator

from conftest import BASE_URL, ScriptedGenerator


class FakeRedis:
    """Minimal async stand-in for a redis client."""

    def __init__(self, fail=False):
        self.data = {}
        self.ttls = {}
        self.fail = fail
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def scan_iter(self, match="*"):
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
class TestRedisCache:
    """Test cache behaviour."""

    async def test_disabled_without_url(self):
        """Test a cache with no URL is a no-op."""
        cache = RedisCache()
        await cache.connect()

        assert cache.enabled is False
        assert await cache.get("abc123") is None
        assert await cache.set("abc123", "https://example.com") is False
        assert await cache.health_check() is True

    async def test_set_and_get(self, logger):
        """Test cached values use the key prefix and TTL."""
        client = FakeRedis()
        cache = RedisCache(ttl_seconds=60, logger=logger, client=client)
        await cache.connect()

        assert await cache.set("abc123", "https://example.com") is True
        assert await cache.get("abc123") == "https://example.com"
        assert client.data == {"shortlink:code:abc123": "https://example.com"}
        assert client.ttls["shortlink:code:abc123"] == 60

    async def test_connect_failure_disables(self, logger):
        """Test an unreachable Redis is not fatal."""
        cache = RedisCache(logger=logger, client=FakeRedis(fail=True))
        await cache.connect()

        assert cache.enabled is False
        assert await cache.get("abc123") is None

    async def test_errors_are_misses(self, logger):
        """Test runtime Redis errors degrade to cache misses."""
        client = FakeRedis()
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        client.fail = True

        assert await cache.get("abc123") is None
        assert await cache.set("abc123", "https://example.com") is False
        assert await cache.health_check() is False

    async def test_clear(self, logger):
        """Test clear drops cached codes and leaves other keys alone."""
        client = FakeRedis()
        client.data["other:key"] = "keep"
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        await cache.set("abc123", "https://example.com/1")
        await cache.set("def456", "https://example.com/2")

        assert await cache.clear() is True
        assert await cache.get("abc123") is None
        assert client.data == {"other:key": "keep"}

    async def test_clear_failure(self, logger):
        """Test a failed clear is reported."""
        client = FakeRedis()
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        client.fail = True

        assert await cache.clear() is False

    async def test_close(self, logger):
        """Test close releases the client."""
        client = FakeRedis()
        cache = RedisCache(logger=logger, client=client)

        await cache.close()

        assert client.closed is True


@pytest.mark.asyncio
class TestReadThrough:
    """Test the service consults the cache before the store."""

    async def make_service(self, repository, logger, client):
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        return LinkService(
            repository=repository,
            base_url=BASE_URL,
            path_prefix="/go",
            short_code_generator=ShortCodeGenerator(),
            cache=cache,
            logger=logger,
        )

    async def test_resolve_populates_cache(self, repository, logger):
        """Test a store hit is written to the cache."""
        client = FakeRedis()
        service = await self.make_service(repository, logger, client)
        link = await service.shorten("https://example.com/cached")

        assert await service.resolve(link.short_code) == "https://example.com/cached"
        assert client.data[f"shortlink:code:{link.short_code}"] == "https://example.com/cached"

    async def test_cache_hit_skips_store(self, repository, logger):
        """Test a cached code resolves without a store lookup."""
        client = FakeRedis()
        client.data["shortlink:code:cached1"] = "https://example.com/from-cache"
        service = await self.make_service(repository, logger, client)

        assert await service.resolve("cached1") == "https://example.com/from-cache"

    async def test_cache_outage_falls_back_to_store(self, repository, logger):
        """Test resolution still works while Redis is failing."""
        client = FakeRedis()
        service = await self.make_service(repository, logger, client)
        link = await service.shorten("https://example.com/fallback")
        client.fail = True

        assert await service.resolve(link.short_code) == "https://example.com/fallback"

    async def test_health_reports_cache(self, repository, logger):
        """Test a failing cache marks the service unhealthy."""
        client = FakeRedis()
        service = await self.make_service(repository, logger, client)
        client.fail = True

        health = await service.health_check()

        assert health == {"database": True, "cache": False, "overall": False}


@pytest.mark.asyncio
class TestResetClearsCache:
    """Test a store reset never leaves old resolutions behind."""

    async def test_reissued_code_resolves_to_new_link(self, repository, logger):
        """Test a code reused after reset resolves to the new long URL."""
        client = FakeRedis()
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        service = LinkService(
            repository=repository,
            base_url=BASE_URL,
            path_prefix="/go",
            short_code_generator=ScriptedGenerator(["abc123", "abc123"]),
            cache=cache,
            logger=logger,
        )

        await service.shorten("https://example.com/old")
        assert await service.resolve("abc123") == "https://example.com/old"

        await reset_link_store(repository, cache, logger)

        await service.shorten("https://example.com/new")
        assert await service.resolve("abc123") == "https://example.com/new"

    async def test_reset_without_cache(self, repository, logger):
        """Test reset works when caching is off."""
        await repository.insert("https://example.com", "abc123", "u")

        await reset_link_store(repository, None, logger)

        assert repository.all_links() == []

    async def test_reset_fails_when_cache_cannot_clear(self, repository, logger):
        """Test an uncleared cache makes the reset fail."""
        client = FakeRedis()
        cache = RedisCache(logger=logger, client=client)
        await cache.connect()
        client.fail = True

        with pytest.raises(StorageError):
            await reset_link_store(repository, cache, logger)
