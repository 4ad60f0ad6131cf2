"""Abstract base class for link repository implementations."""

from abc import ABC, abstractmethod

from .models import Link


class LinkRepositoryBase(ABC):
    """Persistence boundary for links.

    Implementations must enforce uniqueness of ``short_code`` themselves,
    independent of any ``exists`` pre-check done by callers: two concurrent
    inserts of one code must produce exactly one success and one
    ``DuplicateCode``. There is no update or delete.
    """

    def __init__(self, db_config: str):
        """Initialize repository.

        Args:
            db_config: Connection string the repository was built from
        """
        self.db_config = db_config

    @abstractmethod
    async def exists(self, short_code: str) -> bool:
        """Check if a link with this short code is stored.

        Args:
            short_code: The short code to check

        Returns:
            True if exists, False otherwise

        Raises:
            StorageError: If the store cannot be queried
        """

    @abstractmethod
    async def insert(self, long_url: str, short_code: str, short_url: str) -> Link:
        """Atomically store a new link.

        Args:
            long_url: The original long URL
            short_code: The allocated short code
            short_url: The complete short URL

        Returns:
            The stored link, with its store-assigned id

        Raises:
            DuplicateCode: If the short code is already taken
            StorageError: On any other storage fault
        """

    @abstractmethod
    async def find_by_code(self, short_code: str) -> Link:
        """Look up a link by short code.

        Raises:
            NotFound: If no link carries this short code
            StorageError: If the store cannot be queried
        """

    async def connect(self) -> None:
        """Open connections; raise StorageError if the store is unreachable."""

    @abstractmethod
    async def ensure_schema(self, create: bool = False) -> None:
        """Verify the links table is present and correctly shaped.

        Args:
            create: Create the table first if it is missing

        Raises:
            StorageError: If the schema is missing or wrong
        """

    @abstractmethod
    async def reset_schema(self) -> None:
        """Destructively drop and recreate the links table."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""

    async def close(self) -> None:
        """Close connections."""
