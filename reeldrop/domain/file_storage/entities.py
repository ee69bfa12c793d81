"""
File Storage Entities

Domain entities for files held in the storage directory.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_RETENTION = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so ledger and mtime ages compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class StoredFile:
    """
    A file inside the flat storage directory.

    Attributes:
        name: Filename chosen by the extraction tool (title + extension)
        size_bytes: Size on disk
        created_at: Authoritative creation time (ledger entry or mtime)
    """

    name: str
    size_bytes: int
    created_at: datetime

    def age(self, now: Optional[datetime] = None) -> timedelta:
        now = as_utc(now) if now is not None else utc_now()
        return now - as_utc(self.created_at)

    def is_expired(
        self,
        now: Optional[datetime] = None,
        retention: timedelta = DEFAULT_RETENTION,
    ) -> bool:
        """A file becomes eligible for deletion once its age reaches the window."""
        return self.age(now) >= retention
