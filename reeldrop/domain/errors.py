"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry the user-facing payload for API responses.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    INVALID_FORMAT = "invalid_format"
    EXTRACTION_FAILED = "extraction_failed"
    EXTRACTION_TIMEOUT = "extraction_timeout"
    FILE_NOT_FOUND = "file_not_found"
    RANGE_NOT_SATISFIABLE = "range_not_satisfiable"
    SYSTEM_ERROR = "system_error"


# Short titles returned as the "error" field of API payloads
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Missing URL or format",
        "message": "The request must contain both a 'url' and a 'format'.",
    },
    ErrorCategory.INVALID_FORMAT: {
        "title": "Invalid format",
        "message": "The requested output format is not supported.",
    },
    ErrorCategory.EXTRACTION_FAILED: {
        "title": "Internal server error",
        "message": "The media could not be extracted.",
    },
    ErrorCategory.EXTRACTION_TIMEOUT: {
        "title": "Internal server error",
        "message": "The extraction took too long and was stopped.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File not found",
        "message": "The requested file does not exist or has expired.",
    },
    ErrorCategory.RANGE_NOT_SATISFIABLE: {
        "title": "Range not satisfiable",
        "message": "The requested byte range lies outside the file.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "Internal server error",
        "message": "An unexpected error occurred while processing your request.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class InvalidFormatError(DomainError):
    """Raised when the requested output format is not in the supported set."""

    def __init__(self, requested: str, supported: Iterable[str]):
        self.requested = requested
        self.supported = list(supported)
        super().__init__(
            f"Invalid format: {requested}. "
            f"Supported formats are: {', '.join(self.supported)}"
        )


class ExtractionFailedError(DomainError):
    """
    Raised when the extraction tool fails to produce a file.

    Covers a nonzero exit code, a zero exit code without any recognized
    destination line, and failure to spawn the tool at all (exit_code None).
    """

    def __init__(
        self,
        exit_code: Optional[int],
        diagnostic: Optional[str] = None,
        original_error: Exception = None,
    ):
        self.exit_code = exit_code
        self.diagnostic = diagnostic
        message = f"yt-dlp process exited with code {exit_code}"
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message, original_error)


class ExtractionTimeoutError(DomainError):
    """Raised when a caller-imposed extraction deadline expires."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"yt-dlp did not finish within {timeout:g} seconds")


class StoredFileNotFoundError(DomainError):
    """Raised when a requested file is not present in the storage directory."""
    pass


class RangeNotSatisfiableError(DomainError):
    """Raised when a well-formed byte range lies outside the file."""

    def __init__(self, total_size: int):
        self.total_size = total_size
        super().__init__(f"Requested range not satisfiable for size {total_size}")


class StreamTransferError(DomainError):
    """
    Raised when copying file bytes into a response fails for good.

    Once headers are on the wire this cannot become a status code; raising it
    out of the body iterator makes the server drop the connection.
    """
    pass


class LedgerIOError(DomainError):
    """Raised when the metadata ledger cannot be written."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-facing messaging.

    Bridges domain errors with API payloads.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details returned as "details"
            context: Additional fields merged into the payload
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        payload = {
            "error": self.title,
            "category": self.category.value,
            "message": self.message,
        }
        if self.technical_message:
            payload["details"] = self.technical_message
        payload.update(self.context)
        return payload


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details
        context: Additional payload fields
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
