"""
File Storage Repositories

Repository interfaces for the storage directory and the metadata ledger.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

LedgerEntries = Dict[str, datetime]

LEDGER_FILE_NAME = ".metadata.json"
LEDGER_TEMP_SUFFIX = ".tmp"


@dataclass
class LedgerLoad:
    """
    Outcome of reading the ledger.

    A failed read still carries a usable (empty) mapping; the error is kept
    for logging instead of being raised.
    """

    entries: LedgerEntries = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ILedgerRepository(ABC):
    """Durable whole-document store for filename -> creation time."""

    @property
    @abstractmethod
    def file_name(self) -> str:
        """Name of the backing document inside the storage directory."""
        pass  # pragma: no cover

    @abstractmethod
    def load(self) -> LedgerLoad:
        """
        Read the whole ledger.

        Must never raise: a missing, unreadable or corrupt document yields
        an empty mapping with the error attached.
        """
        pass  # pragma: no cover

    @abstractmethod
    def save(self, entries: LedgerEntries) -> None:
        """
        Replace the whole ledger with entries.

        Raises:
            LedgerIOError: If the document cannot be written
        """
        pass  # pragma: no cover


class IFileStorageRepository(ABC):
    """
    Interface for the flat storage directory.

    Names are plain filenames; implementations must refuse anything that
    would resolve outside the storage root.
    """

    @property
    @abstractmethod
    def base_path(self) -> Path:
        pass  # pragma: no cover

    @abstractmethod
    def list_names(self) -> List[str]:
        """Return the names of all regular files in the storage root."""
        pass  # pragma: no cover

    @abstractmethod
    def resolve(self, name: str) -> Optional[Path]:
        """
        Map a filename to a path inside the storage root.

        Returns:
            The path if it is inside the root and names an existing file,
            None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def modified_at(self, name: str) -> datetime:
        """
        Filesystem modification time of a stored file.

        Raises:
            OSError: If the file cannot be stat'ed
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_size(self, name: str) -> Optional[int]:
        pass  # pragma: no cover

    @abstractmethod
    def open(self, name: str) -> BinaryIO:
        """
        Open a stored file for binary reading.

        Raises:
            OSError: If the file cannot be opened
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, name: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if deleted, False if it was already gone

        Raises:
            OSError: If deletion fails for another reason
        """
        pass  # pragma: no cover
