"""Business logic service for the short link service."""

import logging
from typing import Optional, Dict

from .shortcode import ShortCodeGenerator
from .database.base import LinkRepositoryBase
from .database.cache import RedisCache
from .database.models import Link
from .common.validators import is_valid_url, is_valid_short_code
from .common.url_builder import build_short_url
from .exceptions import DuplicateCode, ExhaustedRetries, InvalidInput, NotFound


DEFAULT_MAX_ATTEMPTS = 10


class LinkService:
    """Shorten and resolve links on top of a link repository.

    Uniqueness of short codes is protected twice: an ``exists`` pre-check
    keeps the common case cheap, and the repository's unique constraint
    catches concurrent writers that pick the same code between check and
    insert. Both kinds of collision draw a fresh candidate and count against
    one bounded attempt limit.
    """

    def __init__(
        self,
        repository: LinkRepositoryBase,
        base_url: str,
        path_prefix: str = "",
        short_code_generator: Optional[ShortCodeGenerator] = None,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize link service.

        Args:
            repository: Link store
            base_url: Base URL short links are issued under
            path_prefix: Path prefix for short links (e.g., /go)
            short_code_generator: Optional short code generator
            cache: Optional resolution cache
            logger: Optional logger
            max_attempts: Maximum candidate codes tried per allocation
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.repository = repository
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.generator = short_code_generator or ShortCodeGenerator()
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.max_attempts = max_attempts

    def short_url_for(self, short_code: str) -> str:
        """Full short URL for a code under this service's configuration."""
        return build_short_url(short_code, self.base_url, self.path_prefix)

    async def allocate_unique_code(self) -> str:
        """Generate a short code not currently present in the store.

        Every candidate is checked before it is accepted. The result is only
        a reservation hint: the insert can still lose a race, which
        :meth:`shorten` handles.

        Returns:
            Short code unused at the time of the check

        Raises:
            ExhaustedRetries: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.generator.generate()
            if not await self.repository.exists(code):
                self.logger.debug(f"Allocated code {code} on attempt {attempt}")
                return code
            self.logger.debug(f"Code {code} already in use (attempt {attempt}/{self.max_attempts})")

        raise self._exhausted()

    async def shorten(self, long_url: str) -> Link:
        """Create a new short link.

        Args:
            long_url: The original long URL

        Returns:
            The persisted link

        Raises:
            InvalidInput: If the long URL is rejected
            ExhaustedRetries: If no unique code could be stored
            StorageError: If the store fails for any other reason
        """
        is_valid, error = is_valid_url(long_url)
        if not is_valid:
            self.logger.info(f"Rejected long URL: {error}")
            raise InvalidInput(f"Invalid URL: {error}")

        for attempt in range(1, self.max_attempts + 1):
            code = self.generator.generate()

            if await self.repository.exists(code):
                self.logger.debug(f"Code {code} already in use (attempt {attempt}/{self.max_attempts})")
                continue

            try:
                link = await self.repository.insert(long_url, code, self.short_url_for(code))
            except DuplicateCode:
                # Another writer stored the same code after our check
                self.logger.warning(
                    f"Insert race on code {code} (attempt {attempt}/{self.max_attempts}), retrying"
                )
                continue

            self.logger.info(f"Created short link: {link.short_code} -> {link.long_url}")
            return link

        raise self._exhausted()

    def _exhausted(self) -> ExhaustedRetries:
        self.logger.error(
            f"No unique short code after {self.max_attempts} attempts; "
            f"code space is {self.generator.code_space}"
        )
        return ExhaustedRetries(self.max_attempts)

    def _check_short_code(self, short_code: str) -> None:
        is_valid, error = is_valid_short_code(short_code)
        if not is_valid:
            raise InvalidInput(f"Invalid short code: {error}")

    async def resolve(self, short_code: str) -> str:
        """Get the long URL for a short code.

        Args:
            short_code: The short code to look up

        Returns:
            Stored long URL, verbatim

        Raises:
            InvalidInput: If the short code is empty or malformed
            NotFound: If no link carries this short code
        """
        self._check_short_code(short_code)

        if self.cache:
            cached_url = await self.cache.get(short_code)
            if cached_url:
                self.logger.debug(f"Cache hit for {short_code}")
                return cached_url

        try:
            link = await self.repository.find_by_code(short_code)
        except NotFound:
            self.logger.debug(f"No link for {short_code}")
            raise

        if self.cache:
            await self.cache.set(short_code, link.long_url)

        self.logger.debug(f"Resolved {short_code} -> {link.long_url}")
        return link.long_url

    async def get_link(self, short_code: str) -> Link:
        """Get the full stored link for a short code.

        Raises:
            InvalidInput: If the short code is empty or malformed
            NotFound: If no link carries this short code
        """
        self._check_short_code(short_code)
        return await self.repository.find_by_code(short_code)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.repository.health_check()
        cache_healthy = await self.cache.health_check() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.repository.close()
        if self.cache:
            await self.cache.close()
