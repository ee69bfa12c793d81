"""
File Storage Domain Services

Retention sweeping for the storage directory.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from .entities import DEFAULT_RETENTION, StoredFile, as_utc, utc_now
from .ledger import MetadataLedger
from .repositories import LEDGER_TEMP_SUFFIX, IFileStorageRepository

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """
    Deletes stored files whose age reached the retention window.

    Age comes from the ledger when an entry exists, otherwise from the
    file's modification time. The whole pass is a single ledger session, so
    it is serialized against extraction completions and against itself.
    """

    def __init__(
        self,
        storage_repository: IFileStorageRepository,
        ledger: MetadataLedger,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.storage_repository = storage_repository
        self.ledger = ledger
        self.retention = retention
        self.clock = clock
        self._sweep_lock = threading.Lock()
        self.last_run_at: Optional[datetime] = None
        self.last_deleted_count = 0

    def sweep(self, now: Optional[datetime] = None) -> int:
        """
        Run one full pass over the storage directory.

        Args:
            now: Reference time for age computation (defaults to the clock)

        Returns:
            Number of files deleted
        """
        now = as_utc(now) if now is not None else self.clock()
        with self._sweep_lock:
            logger.info("Starting cleanup of old files...")
            deleted_count = 0
            excluded = self._excluded_names()

            with self.ledger.session() as entries:
                try:
                    names = [n for n in self.storage_repository.list_names() if n not in excluded]
                except OSError as e:
                    logger.error(f"Error listing storage directory: {e}")
                    names = []

                for name in names:
                    try:
                        stored = self._describe(name, entries)
                        if not stored.is_expired(now, self.retention):
                            continue
                        deleted = self.storage_repository.delete(name)
                    except OSError as e:
                        logger.error(f"Error cleaning up {name}: {e}")
                        continue

                    entries.pop(name, None)
                    if not deleted:
                        continue
                    deleted_count += 1
                    logger.info(f"Deleted old file: {name}")

                self._prune_dangling(entries, set(names))

            self.last_run_at = now
            self.last_deleted_count = deleted_count
            logger.info(f"Cleanup completed. Deleted {deleted_count} file(s).")
            return deleted_count

    def _describe(self, name: str, entries) -> StoredFile:
        created_at = entries.get(name)
        if created_at is None:
            created_at = self.storage_repository.modified_at(name)
        return StoredFile(
            name=name,
            size_bytes=self.storage_repository.get_size(name) or 0,
            created_at=created_at,
        )

    def _excluded_names(self) -> set:
        ledger_name = self.ledger.file_name
        return {ledger_name, ledger_name + LEDGER_TEMP_SUFFIX}

    def _prune_dangling(self, entries, present: set) -> None:
        """Drop ledger entries for files that are no longer on disk."""
        for name in [n for n in entries if n not in present]:
            if self.storage_repository.resolve(name) is None:
                entries.pop(name, None)
                logger.info(f"Removed ledger entry for missing file: {name}")
