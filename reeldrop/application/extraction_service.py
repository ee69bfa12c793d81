"""
Extraction Service

Application service that drives yt-dlp for one request: validates the
format, spawns the tool, follows its stdout for destination lines, and on a
clean exit registers the produced file in the metadata ledger.
"""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from reeldrop.domain.errors import ExtractionFailedError, ExtractionTimeoutError
from reeldrop.domain.file_storage.ledger import MetadataLedger
from reeldrop.domain.media_extraction.output_scanner import DestinationScanner
from reeldrop.domain.media_extraction.value_objects import ExtractionRequest
from reeldrop.infrastructure.ytdlp_process import ToolProcess

from .extraction_result import ExtractionResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
OUTPUT_TEMPLATE = "%(title)s.%(ext)s"

ProcessFactory = Callable[[Sequence[str]], ToolProcess]


class ExtractionService:
    """
    Runs the extraction tool and resolves to the produced filename.

    Invocations are independent and may run in parallel; they only
    serialize on the ledger write at completion.
    """

    def __init__(
        self,
        storage_dir: Path,
        ledger: MetadataLedger,
        binary: str = "yt-dlp",
        user_agent: str = DEFAULT_USER_AGENT,
        process_factory: Optional[ProcessFactory] = None,
    ):
        """
        Initialize Extraction Service with dependencies.

        Args:
            storage_dir: Directory the tool writes into
            ledger: Shared metadata ledger
            binary: Extraction tool executable
            user_agent: Client signature passed to the tool
            process_factory: Callable spawning the tool from an argv list
        """
        self.storage_dir = Path(storage_dir)
        self.ledger = ledger
        self.binary = binary
        self.user_agent = user_agent
        self.process_factory = process_factory or ToolProcess.spawn

    def build_arguments(self, request: ExtractionRequest) -> List[str]:
        """Assemble the tool's argv for a validated request."""
        output_template = str(self.storage_dir / OUTPUT_TEMPLATE)
        return [
            self.binary,
            *request.output_format.tool_arguments(),
            "--user-agent",
            self.user_agent,
            "-o",
            output_template,
            "--no-overwrites",
            "--no-playlist",
            request.resource_url,
        ]

    def run(
        self,
        resource_url: str,
        desired_format: str,
        timeout: Optional[float] = None,
    ) -> ExtractionResult:
        """
        Extract a resource into the storage directory.

        Args:
            resource_url: Remote resource to extract
            desired_format: Output format (case-insensitive)
            timeout: Optional deadline in seconds; the tool is killed on expiry

        Returns:
            ExtractionResult naming the produced file

        Raises:
            InvalidFormatError: Unsupported format (nothing is spawned)
            ExtractionFailedError: Spawn failure, nonzero exit, or no filename
            ExtractionTimeoutError: The deadline expired
        """
        request = ExtractionRequest.create(resource_url, desired_format)
        argv = self.build_arguments(request)

        start_time = time.time()
        logger.info(
            f"Starting download for URL: {request.resource_url} "
            f"(format={request.output_format}, strategy={request.output_format.strategy.value})"
        )

        try:
            process = self.process_factory(argv)
        except OSError as e:
            logger.error(f"Could not start {self.binary}: {e}")
            raise ExtractionFailedError(None, str(e), e) from e

        process.start_stderr_drain(self._log_stderr)
        if timeout:
            process.kill_after(timeout)

        scanner = DestinationScanner()
        try:
            for line in process.stdout_lines():
                matched = scanner.feed(line)
                if matched:
                    logger.debug(f"Destination candidate ({scanner.matched_rule}): {matched}")
        finally:
            exit_code = process.wait()

        duration_ms = (time.time() - start_time) * 1000

        if process.timed_out:
            logger.error(f"Extraction timed out after {duration_ms:.2f}ms: {request.resource_url}")
            raise ExtractionTimeoutError(timeout)

        if exit_code != 0 or not scanner.resolved:
            diagnostic = process.last_stderr_line
            if exit_code == 0:
                diagnostic = diagnostic or "no output file reported"
            logger.error(
                f"Extraction failed for {request.resource_url} with exit code {exit_code} "
                f"after {duration_ms:.2f}ms"
            )
            raise ExtractionFailedError(exit_code, diagnostic)

        created_at = self.ledger.record_creation(scanner.file_name)
        logger.info(f"Download completed: {scanner.file_name} in {duration_ms:.2f}ms")
        return ExtractionResult(
            file_name=scanner.file_name,
            created_at=created_at,
            matched_rule=scanner.matched_rule,
        )

    @staticmethod
    def _log_stderr(line: str) -> None:
        logger.error(f"yt-dlp stderr: {line}")
