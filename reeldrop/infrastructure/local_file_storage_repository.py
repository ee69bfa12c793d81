"""
Local File Storage Repository Implementation

Concrete implementation of IFileStorageRepository for the flat storage
directory on the local filesystem.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Optional

from werkzeug.security import safe_join

from reeldrop.domain.file_storage.repositories import IFileStorageRepository


class LocalFileStorageRepository(IFileStorageRepository):
    """
    Local filesystem implementation of IFileStorageRepository.

    All names are resolved with werkzeug's safe_join, so absolute paths,
    ".." segments and separators never escape the storage root.

    Attributes:
        base_path: Storage directory
    """

    def __init__(self, base_path: str = "downloads"):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Storage directory, created if missing
        """
        self._base_path = Path(base_path).resolve()
        self._ensure_base_directory()

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _ensure_base_directory(self) -> None:
        """
        Ensure the storage directory exists.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self._base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self._base_path}"
            ) from e

    def _full_path(self, name: str) -> Optional[Path]:
        if not name or not name.strip():
            return None
        joined = safe_join(str(self._base_path), name)
        if joined is None:
            return None
        path = Path(joined)
        # Flat directory: nested names are never produced by the tool
        if path.parent != self._base_path:
            return None
        return path

    def is_available(self) -> bool:
        try:
            return self._base_path.is_dir()
        except OSError:
            return False

    def list_names(self) -> List[str]:
        return [entry.name for entry in self._base_path.iterdir() if entry.is_file()]

    def resolve(self, name: str) -> Optional[Path]:
        try:
            path = self._full_path(name)
            if path is not None and path.is_file():
                return path
            return None
        except (OSError, ValueError):
            return None

    def modified_at(self, name: str) -> datetime:
        path = self._full_path(name)
        if path is None:
            raise FileNotFoundError(name)
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    def get_size(self, name: str) -> Optional[int]:
        """
        Get the size of a stored file in bytes.

        Returns:
            File size, or None for missing files and directories
        """
        try:
            path = self._full_path(name)
            if path is None or not path.is_file():
                return None
            return path.stat().st_size
        except (OSError, ValueError):
            return None

    def open(self, name: str) -> BinaryIO:
        path = self._full_path(name)
        if path is None:
            raise FileNotFoundError(name)
        return open(path, "rb")

    def delete(self, name: str) -> bool:
        """
        Delete a stored file.

        Deleting a file that is already gone returns False.

        Raises:
            PermissionError: If there are insufficient permissions to delete
            OSError: If there are I/O errors during the operation
        """
        path = self._full_path(name)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
