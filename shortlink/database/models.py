"""Data models for the short link service."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Link:
    """A stored long URL / short code association.

    Links are created once and never updated, so instances are frozen.
    """

    id: int
    long_url: str
    short_code: str
    short_url: str
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "long_url": self.long_url,
            "short_code": self.short_code,
            "short_url": self.short_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Link":
        """Create from a database row or dictionary."""
        created_at = record.get("created_at") or _utcnow()
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=record["id"],
            long_url=record["long_url"],
            short_code=record["short_code"],
            short_url=record["short_url"],
            created_at=created_at,
        )
