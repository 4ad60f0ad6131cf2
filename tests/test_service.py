"""Tests for service layer."""

import pytest
from shortlink.database.memory import InMemoryLinkRepository
from shortlink.exceptions import (
    ExhaustedRetries,
    InvalidInput,
    NotFound,
    StorageError,
)
from shortlink.service import LinkService
from shortlink.shortcode import ShortCodeGenerator

from conftest import (
    BASE_URL,
    AlwaysTakenRepository,
    ScriptedGenerator,
    StaleCheckRepository,
)


class FailingRepository(InMemoryLinkRepository):
    """Repository whose inserts hit a storage fault."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.insert_calls = 0

    async def insert(self, long_url, short_code, short_url):
        self.insert_calls += 1
        raise StorageError()


def make_service(repository, generator, max_attempts=10):
    return LinkService(
        repository=repository,
        base_url=BASE_URL,
        path_prefix="/go",
        short_code_generator=generator,
        max_attempts=max_attempts,
    )


@pytest.mark.asyncio
class TestShorten:
    """Test creating short links."""

    async def test_shorten(self, service, sample_urls):
        """Test creating short link."""
        link = await service.shorten(sample_urls[0])

        assert link.long_url == sample_urls[0]
        assert len(link.short_code) == 6
        assert link.short_url == f"{BASE_URL}/go/{link.short_code}"
        assert link.id >= 1

    async def test_round_trip(self, service, sample_urls):
        """Test resolving a fresh code returns the exact long URL."""
        for url in sample_urls + ["https://example.com/a?b=1&c=%20#frag"]:
            link = await service.shorten(url)
            assert await service.resolve(link.short_code) == url

    async def test_same_url_gets_distinct_codes(self, service, repository):
        """Test repeated shortening is not deduplicated."""
        first = await service.shorten("https://example.com")
        second = await service.shorten("https://example.com")

        assert first.short_code != second.short_code
        assert len(repository.all_links()) == 2

    @pytest.mark.parametrize("bad_url", ["", "not a url", "htp://example.com", "http://example..com"])
    async def test_invalid_url(self, service, repository, bad_url):
        """Test invalid URL rejection persists nothing."""
        with pytest.raises(InvalidInput, match="Invalid URL"):
            await service.shorten(bad_url)

        assert repository.all_links() == []

    async def test_codes_follow_configuration(self, repository):
        """Test persisted codes respect configured length and alphabet."""
        generator = ShortCodeGenerator(alphabet="abcdef", length=9)
        service = make_service(repository, generator)

        for i in range(20):
            link = await service.shorten(f"https://example.com/{i}")
            assert len(link.short_code) == 9
            assert set(link.short_code) <= set("abcdef")

    async def test_collision_retried_with_precheck(self, repository):
        """Test a taken candidate is skipped and the next one checked."""
        await repository.insert("https://example.com/old", "taken1", "u")
        generator = ScriptedGenerator(["taken1", "fresh1"])
        service = make_service(repository, generator)

        link = await service.shorten("https://example.com/new")

        assert link.short_code == "fresh1"
        assert generator.generated == ["taken1", "fresh1"]

    async def test_insert_race_retried(self, logger):
        """Test DuplicateCode from insert triggers a fresh candidate."""
        repository = StaleCheckRepository(logger=logger)
        await repository.insert("https://example.com/winner", "racecd", "u")
        generator = ScriptedGenerator(["racecd", "racecd", "second"])
        service = make_service(repository, generator)

        link = await service.shorten("https://example.com/loser")

        assert link.short_code == "second"
        assert generator.generated == ["racecd", "racecd", "second"]
        assert (await repository.find_by_code("racecd")).long_url == "https://example.com/winner"

    async def test_insert_race_counts_against_limit(self, logger):
        """Test repeated insert races exhaust the same attempt limit."""
        repository = StaleCheckRepository(logger=logger)
        await repository.insert("https://example.com/winner", "racecd", "u")
        generator = ScriptedGenerator(["racecd"] * 3 + ["unused"])
        service = make_service(repository, generator, max_attempts=3)

        with pytest.raises(ExhaustedRetries):
            await service.shorten("https://example.com/loser")

        assert generator.generated == ["racecd"] * 3
        assert len(repository.all_links()) == 1

    async def test_retry_exhaustion(self, logger):
        """Test always-colliding store fails after max attempts, storing nothing."""
        repository = AlwaysTakenRepository(logger=logger)
        service = make_service(repository, ShortCodeGenerator(), max_attempts=10)

        with pytest.raises(ExhaustedRetries) as exc_info:
            await service.shorten("https://example.com")

        assert exc_info.value.attempts == 10
        assert repository.exists_calls == 10
        assert repository.all_links() == []

    async def test_storage_error_not_retried(self, logger):
        """Test storage faults propagate without another attempt."""
        repository = FailingRepository(logger=logger)
        service = make_service(repository, ShortCodeGenerator())

        with pytest.raises(StorageError):
            await service.shorten("https://example.com")

        assert repository.insert_calls == 1

    async def test_invalid_max_attempts(self, repository):
        """Test a zero attempt limit is rejected."""
        with pytest.raises(ValueError):
            make_service(repository, ShortCodeGenerator(), max_attempts=0)


@pytest.mark.asyncio
class TestAllocateUniqueCode:
    """Test standalone allocation."""

    async def test_allocate(self, service, repository):
        """Test allocated code is unused and well formed."""
        code = await service.allocate_unique_code()

        assert service.generator.is_valid_format(code)
        assert not await repository.exists(code)

    async def test_allocate_rechecks_every_candidate(self, repository):
        """Test each retry is checked, never returned blindly."""
        for code in ("used01", "used02", "used03"):
            await repository.insert("https://example.com", code, "u")
        generator = ScriptedGenerator(["used01", "used02", "used03", "free01"])
        service = make_service(repository, generator)

        assert await service.allocate_unique_code() == "free01"

    async def test_allocate_exhausted(self, logger):
        """Test allocation gives up after the attempt limit."""
        service = make_service(AlwaysTakenRepository(logger=logger), ShortCodeGenerator(), max_attempts=4)

        with pytest.raises(ExhaustedRetries):
            await service.allocate_unique_code()


@pytest.mark.asyncio
class TestResolve:
    """Test resolving short codes."""

    async def test_resolve_not_found(self, service):
        """Test unknown code signals NotFound."""
        with pytest.raises(NotFound) as exc_info:
            await service.resolve("nothere")

        assert exc_info.value.short_code == "nothere"

    @pytest.mark.parametrize("bad_code", ["", "has space", "a/b", "x" * 65])
    async def test_resolve_malformed(self, service, bad_code):
        """Test malformed codes are input errors, not lookups."""
        with pytest.raises(InvalidInput):
            await service.resolve(bad_code)

    async def test_resolve_is_idempotent(self, service, repository):
        """Test resolving twice gives identical answers and mutates nothing."""
        link = await service.shorten("https://example.com/stable")
        before = repository.all_links()

        first = await service.resolve(link.short_code)
        second = await service.resolve(link.short_code)

        assert first == second == "https://example.com/stable"
        assert repository.all_links() == before

    async def test_get_link(self, service):
        """Test full link lookup."""
        link = await service.shorten("https://example.com/info")

        found = await service.get_link(link.short_code)

        assert found == link

    async def test_health_check(self, service):
        """Test health check."""
        health = await service.health_check()

        assert health == {"database": True, "cache": True, "overall": True}
