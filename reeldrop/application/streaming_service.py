"""
Streaming Service

Serves stored files with byte-range support. The body iterator copies bytes
from the file into the response and, on a recoverable read error, retries
the remaining copy from the offset already reached, unless the client has
gone away in the meantime.
"""

import logging
import mimetypes
import threading
import time
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, Iterator, Optional
from urllib.parse import quote

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from werkzeug.http import parse_range_header

from reeldrop.domain.errors import (
    RangeNotSatisfiableError,
    StoredFileNotFoundError,
    StreamTransferError,
)
from reeldrop.domain.file_storage.repositories import IFileStorageRepository

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
CHUNK_SIZE = 64 * 1024
MAX_RETRIES = 2
BACKOFF_BASE_SECONDS = 1.0


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range [start, end] of a file of total_size bytes."""

    start: int
    end: int
    total_size: int

    @classmethod
    def full(cls, total_size: int) -> "ByteRange":
        return cls(0, total_size - 1, total_size)

    @property
    def length(self) -> int:
        return max(self.end - self.start + 1, 0)

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total_size}"


def resolve_range(header: Optional[str], total_size: int) -> Optional[ByteRange]:
    """
    Interpret a Range header against a file size.

    Returns:
        The requested ByteRange, or None to serve the whole file (header
        absent, malformed, not in bytes, or asking for several ranges)

    Raises:
        RangeNotSatisfiableError: A single well-formed range outside the file
    """
    if not header:
        return None
    parsed = parse_range_header(header)
    if parsed is None or parsed.units != "bytes" or len(parsed.ranges) != 1:
        return None
    bounds = parsed.range_for_length(total_size)
    if bounds is None:
        raise RangeNotSatisfiableError(total_size)
    start, stop = bounds
    return ByteRange(start, stop - 1, total_size)


def content_disposition(file_name: str) -> str:
    """
    Attachment header carrying the literal filename.

    Everything outside the RFC 3986 unreserved set is percent-encoded,
    including quotes and parentheses, so any name yields a valid header.
    """
    return f"attachment; filename*=UTF-8''{quote(file_name, safe='')}"


def guess_content_type(file_name: str) -> str:
    content_type, _ = mimetypes.guess_type(file_name)
    return content_type or DEFAULT_CONTENT_TYPE


class RangeStreamer:
    """
    Retrying byte copier for one response body.

    The connection state is tracked for the whole transfer: mark_closed() is
    wired to the response close notification, and closing the body iterator
    (the server's reaction to a dropped client) marks it too. A closed
    connection ends the transfer silently instead of retrying.
    """

    def __init__(
        self,
        opener: Callable[[], BinaryIO],
        byte_range: ByteRange,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = BACKOFF_BASE_SECONDS,
        chunk_size: int = CHUNK_SIZE,
        sleep: Callable[[float], None] = time.sleep,
        label: str = "",
    ):
        self.opener = opener
        self.byte_range = byte_range
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.chunk_size = chunk_size
        self.sleep = sleep
        self.label = label or "stream"
        self.position = byte_range.start
        self.attempts = 0
        self.bytes_sent = 0
        self._closed = threading.Event()

    @property
    def client_closed(self) -> bool:
        return self._closed.is_set()

    def mark_closed(self) -> None:
        self._closed.set()

    def body(self) -> Iterator[bytes]:
        """
        Start the transfer and return the response body iterator.

        The first chunk is read before returning, so a file that cannot be
        read at all surfaces here (as StreamTransferError) while a proper
        error status can still be sent.
        """
        stream = self._copy()
        try:
            first = next(stream)
        except StopIteration:
            return iter(())
        return self._resume(first, stream)

    @staticmethod
    def _resume(first: bytes, rest: Iterator[bytes]) -> Iterator[bytes]:
        try:
            yield first
            yield from rest
        finally:
            rest.close()

    def _retrying(self) -> Retrying:
        """Attempt policy shared by the whole transfer, not per chunk."""
        return Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_base),
            retry=(
                retry_if_exception_type(OSError)
                & retry_if_exception(lambda _: not self.client_closed)
            ),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"Read error on {self.label} at offset {self.position} "
            f"(attempt {retry_state.attempt_number}/{self.max_retries + 1}), "
            f"retrying in {retry_state.next_action.sleep:g}s: "
            f"{retry_state.outcome.exception()}"
        )

    def _copy(self) -> Iterator[bytes]:
        end = self.byte_range.end
        try:
            for attempt in self._retrying():
                with attempt:
                    self.attempts = attempt.retry_state.attempt_number
                    # The client may have left while we were backing off
                    if self.client_closed:
                        return
                    with self.opener() as f:
                        f.seek(self.position)
                        while self.position <= end:
                            chunk = f.read(min(self.chunk_size, end - self.position + 1))
                            if not chunk:
                                raise OSError(
                                    f"unexpected end of file at offset {self.position}"
                                )
                            self.position += len(chunk)
                            self.bytes_sent += len(chunk)
                            try:
                                yield chunk
                            except GeneratorExit:
                                self.mark_closed()
                                raise
        except OSError as e:
            if self.client_closed:
                logger.info(
                    f"Client closed connection during {self.label}, "
                    f"abandoning at offset {self.position}"
                )
                return
            logger.error(
                f"Giving up on {self.label} after {self.attempts} attempts "
                f"at offset {self.position}: {e}"
            )
            raise StreamTransferError(
                f"Failed to stream {self.label} after {self.attempts} attempts: {e}", e
            ) from e


@dataclass
class StreamPlan:
    """Everything the HTTP layer needs to answer a stream request."""

    status: int
    headers: Dict[str, str]
    streamer: RangeStreamer

    def body(self) -> Iterator[bytes]:
        return self.streamer.body()


class StreamingService:
    """Builds stream plans for files in the storage directory."""

    def __init__(
        self,
        storage_repository: IFileStorageRepository,
        excluded_names=(),
        max_retries: int = MAX_RETRIES,
        backoff_base: float = BACKOFF_BASE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.storage_repository = storage_repository
        self.excluded_names = frozenset(excluded_names)
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.sleep = sleep

    def prepare(self, file_name: str, range_header: Optional[str] = None) -> StreamPlan:
        """
        Resolve a stream request.

        Raises:
            StoredFileNotFoundError: Unknown, excluded or out-of-root name
            RangeNotSatisfiableError: Range outside the file
        """
        if file_name in self.excluded_names:
            raise StoredFileNotFoundError(f"File not found: {file_name}")
        path = self.storage_repository.resolve(file_name)
        size = self.storage_repository.get_size(file_name) if path is not None else None
        if path is None or size is None:
            raise StoredFileNotFoundError(f"File not found: {file_name}")

        requested = resolve_range(range_header, size)
        headers = {
            "Content-Type": guess_content_type(file_name),
            "Content-Disposition": content_disposition(file_name),
            "Accept-Ranges": "bytes",
        }
        if requested is not None:
            byte_range, status = requested, 206
            headers["Content-Range"] = requested.content_range
        else:
            byte_range, status = ByteRange.full(size), 200
        headers["Content-Length"] = str(byte_range.length)

        streamer = RangeStreamer(
            opener=lambda: self.storage_repository.open(file_name),
            byte_range=byte_range,
            max_retries=self.max_retries,
            backoff_base=self.backoff_base,
            sleep=self.sleep,
            label=file_name,
        )
        return StreamPlan(status=status, headers=headers, streamer=streamer)
