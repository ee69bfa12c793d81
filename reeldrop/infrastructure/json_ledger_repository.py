"""
JSON Ledger Repository

Persists the metadata ledger as a single JSON document inside the storage
directory: {"<filename>": "<ISO-8601 timestamp>", ...}.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Union

from reeldrop.domain.errors import LedgerIOError
from reeldrop.domain.file_storage.entities import as_utc
from reeldrop.domain.file_storage.repositories import (
    LEDGER_FILE_NAME,
    LEDGER_TEMP_SUFFIX,
    ILedgerRepository,
    LedgerEntries,
    LedgerLoad,
)

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the trailing 'Z' form."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(value))


def format_timestamp(value: datetime) -> str:
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonLedgerRepository(ILedgerRepository):
    """
    File-backed ILedgerRepository.

    Writes go to a sibling temporary file that is then renamed over the
    ledger, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, directory: Union[str, Path], file_name: str = LEDGER_FILE_NAME):
        self.directory = Path(directory)
        self._file_name = file_name

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def path(self) -> Path:
        return self.directory / self._file_name

    def load(self) -> LedgerLoad:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return LedgerLoad()
        except (OSError, ValueError) as e:
            return LedgerLoad(error=e)

        if not isinstance(raw, dict):
            return LedgerLoad(error=ValueError("ledger document is not a JSON object"))

        entries: LedgerEntries = {}
        for name, stamp in raw.items():
            try:
                entries[name] = parse_timestamp(stamp)
            except (TypeError, ValueError, AttributeError):
                logger.warning(f"Ignoring ledger entry with invalid timestamp: {name}={stamp!r}")
        return LedgerLoad(entries=entries)

    def save(self, entries: LedgerEntries) -> None:
        document = {name: format_timestamp(stamp) for name, stamp in entries.items()}
        temp_path = self.path.with_name(self._file_name + LEDGER_TEMP_SUFFIX)
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except OSError as e:
            raise LedgerIOError(f"Failed to write ledger {self.path}: {e}", e) from e
