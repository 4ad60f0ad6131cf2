"""Database layer for the short link service."""

from .base import LinkRepositoryBase
from .memory import InMemoryLinkRepository
from .postgres import PostgresLinkRepository
from .factory import create_repository
from .models import Link
from .cache import RedisCache

__all__ = [
    "LinkRepositoryBase",
    "InMemoryLinkRepository",
    "PostgresLinkRepository",
    "create_repository",
    "Link",
    "RedisCache",
]
