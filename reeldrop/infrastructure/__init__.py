"""Infrastructure layer for the local filesystem and the yt-dlp process."""

from .json_ledger_repository import JsonLedgerRepository
from .local_file_storage_repository import LocalFileStorageRepository
from .ytdlp_process import ToolProcess

__all__ = [
    "JsonLedgerRepository",
    "LocalFileStorageRepository",
    "ToolProcess",
]
