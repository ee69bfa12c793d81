"""
File Storage Domain

Handles the storage directory, the metadata ledger, and retention cleanup.
"""

from reeldrop.domain.errors import LedgerIOError, StoredFileNotFoundError
from .entities import DEFAULT_RETENTION, StoredFile
from .ledger import MetadataLedger
from .repositories import (
    LEDGER_FILE_NAME,
    IFileStorageRepository,
    ILedgerRepository,
    LedgerEntries,
    LedgerLoad,
)
from .services import RetentionSweeper

__all__ = [
    "DEFAULT_RETENTION",
    "StoredFile",
    "MetadataLedger",
    "RetentionSweeper",
    "IFileStorageRepository",
    "ILedgerRepository",
    "LedgerEntries",
    "LedgerLoad",
    "LEDGER_FILE_NAME",
    "LedgerIOError",
    "StoredFileNotFoundError",
]
