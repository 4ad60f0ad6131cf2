"""Select a link repository implementation from a database URL."""

import logging
from typing import Optional
from urllib.parse import urlsplit

from ..exceptions import StorageError
from .base import LinkRepositoryBase
from .memory import InMemoryLinkRepository
from .postgres import PostgresLinkRepository


POSTGRES_SCHEMES = {"postgres", "postgresql"}
MEMORY_SCHEMES = {"memory"}


def create_repository(
    database_url: str,
    timeout_seconds: float = 5.0,
    pool_max_size: int = 10,
    logger: Optional[logging.Logger] = None,
) -> LinkRepositoryBase:
    """Build the repository a database URL points at.

    Args:
        database_url: postgresql://... for PostgreSQL, memory:// for in-process
        timeout_seconds: Storage timeout applied by the adapter
        pool_max_size: Maximum connection pool size
        logger: Optional logger instance

    Returns:
        Repository instance (not yet connected)

    Raises:
        StorageError: If the URL scheme is not supported
    """
    scheme = urlsplit(database_url).scheme.lower()

    if scheme in MEMORY_SCHEMES:
        return InMemoryLinkRepository(db_config=database_url, logger=logger)

    if scheme in POSTGRES_SCHEMES:
        return PostgresLinkRepository(
            db_config=database_url,
            pool_max_size=pool_max_size,
            timeout_seconds=timeout_seconds,
            logger=logger,
        )

    raise StorageError(f"Unsupported database URL scheme '{scheme}'")
