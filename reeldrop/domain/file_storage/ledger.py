"""
Metadata Ledger

In-process owner of the filename -> creation time ledger.

Every read-modify-write cycle (extraction completion, retention sweep) runs
inside session(), which holds the single ledger lock for the whole cycle so
concurrent cycles cannot lose each other's updates.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from reeldrop.domain.errors import LedgerIOError

from .entities import utc_now
from .repositories import ILedgerRepository, LedgerEntries

logger = logging.getLogger(__name__)


class MetadataLedger:
    """
    Lock plus last known mapping, backed by an ILedgerRepository.

    Constructed once at startup and shared by the extraction runner and the
    retention sweeper; close() performs the final flush at shutdown.
    """

    def __init__(
        self,
        repository: ILedgerRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.clock = clock
        self._lock = threading.Lock()
        self._entries: LedgerEntries = {}
        self._closed = False

    @property
    def file_name(self) -> str:
        return self.repository.file_name

    def snapshot(self) -> LedgerEntries:
        """Copy of the mapping as of the last completed session."""
        with self._lock:
            return dict(self._entries)

    @contextmanager
    def session(self) -> Iterator[LedgerEntries]:
        """
        Run one read-whole / write-whole cycle under the ledger lock.

        Loads the full mapping (empty if unreadable), yields it for in-place
        mutation and writes it back on exit. A failed write is logged but
        never raised: the caller's primary effect has already happened.
        """
        with self._lock:
            result = self.repository.load()
            if not result.ok:
                logger.warning(
                    f"Metadata ledger unreadable, starting from an empty ledger: {result.error}"
                )
            entries = result.entries
            yield entries
            self._entries = dict(entries)
            self._save_locked(entries)

    def record_creation(self, file_name: str, created_at: Optional[datetime] = None) -> datetime:
        """Register a freshly produced file."""
        created_at = created_at or self.clock()
        with self.session() as entries:
            entries[file_name] = created_at
        logger.debug(f"Ledger entry recorded: {file_name} -> {created_at.isoformat()}")
        return created_at

    def close(self) -> None:
        """Flush the last known mapping once; later calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._save_locked(dict(self._entries))

    def _save_locked(self, entries: LedgerEntries) -> bool:
        try:
            self.repository.save(entries)
            return True
        except LedgerIOError as e:
            # Ledger and filesystem now disagree until the next successful write
            logger.error(f"Failed to persist metadata ledger ({len(entries)} entries): {e}")
            return False
