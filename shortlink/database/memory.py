"""In-process link repository.

Backs ``test`` mode (``memory://``) and the test suite. State lives only as
long as the process.
"""

import asyncio
import itertools
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..exceptions import DuplicateCode, NotFound
from .base import LinkRepositoryBase
from .models import Link


class InMemoryLinkRepository(LinkRepositoryBase):
    """Dictionary-backed repository with an atomic, unique insert."""

    def __init__(
        self,
        db_config: str = "memory://",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize in-memory repository.

        Args:
            db_config: Connection string (informational only)
            logger: Optional logger instance
        """
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, Link] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def exists(self, short_code: str) -> bool:
        return short_code in self._links

    async def insert(self, long_url: str, short_code: str, short_url: str) -> Link:
        # The lock makes check-and-store one step, like a UNIQUE constraint
        async with self._lock:
            if short_code in self._links:
                raise DuplicateCode(short_code)

            link = Link(
                id=next(self._ids),
                long_url=long_url,
                short_code=short_code,
                short_url=short_url,
                created_at=datetime.now(timezone.utc),
            )
            self._links[short_code] = link

        self.logger.debug(f"Stored link {link.id}: {short_code} -> {long_url}")
        return link

    async def find_by_code(self, short_code: str) -> Link:
        link = self._links.get(short_code)
        if link is None:
            raise NotFound(short_code)
        return link

    async def ensure_schema(self, create: bool = False) -> None:
        return None

    async def reset_schema(self) -> None:
        async with self._lock:
            self._links.clear()
            self._ids = itertools.count(1)
        self.logger.info("In-memory link store reset")

    async def health_check(self) -> bool:
        return True

    def all_links(self) -> List[Link]:
        """Snapshot of every stored link, in insertion order."""
        return list(self._links.values())
