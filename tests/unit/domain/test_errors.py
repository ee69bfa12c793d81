"""
Unit tests for error categories and API error payloads.
"""

import pytest

from reeldrop.domain.errors import (
    ApplicationError,
    ErrorCategory,
    ExtractionFailedError,
    ExtractionTimeoutError,
    RangeNotSatisfiableError,
    create_error_response,
)


class TestErrorPayloads:

    @pytest.mark.parametrize(
        "category,title",
        [
            (ErrorCategory.INVALID_REQUEST, "Missing URL or format"),
            (ErrorCategory.EXTRACTION_FAILED, "Internal server error"),
            (ErrorCategory.FILE_NOT_FOUND, "File not found"),
            (ErrorCategory.SYSTEM_ERROR, "Internal server error"),
        ],
    )
    def test_titles(self, category, title):
        payload, status = create_error_response(category, status_code=418)

        assert payload["error"] == title
        assert payload["category"] == category.value
        assert "details" not in payload
        assert status == 418

    def test_details_and_context_are_merged(self):
        payload, status = create_error_response(
            ErrorCategory.EXTRACTION_FAILED,
            "yt-dlp process exited with code 1",
            context={"exitCode": 1},
            status_code=500,
        )

        assert payload["details"] == "yt-dlp process exited with code 1"
        assert payload["exitCode"] == 1
        assert status == 500

    def test_application_error_message(self):
        error = ApplicationError(ErrorCategory.FILE_NOT_FOUND)

        assert str(error) == error.message
        assert error.title == "File not found"


class TestDomainErrors:

    def test_extraction_failed_message(self):
        error = ExtractionFailedError(2, "ERROR: Unsupported URL")

        assert error.exit_code == 2
        assert str(error) == "yt-dlp process exited with code 2: ERROR: Unsupported URL"

    def test_extraction_failed_without_diagnostic(self):
        assert str(ExtractionFailedError(1)) == "yt-dlp process exited with code 1"

    def test_spawn_failure_keeps_original_error(self):
        cause = FileNotFoundError("yt-dlp")
        error = ExtractionFailedError(None, str(cause), cause)

        assert error.exit_code is None
        assert error.original_error is cause

    def test_timeout_message(self):
        assert "30 seconds" in str(ExtractionTimeoutError(30.0))

    def test_range_error_carries_size(self):
        assert RangeNotSatisfiableError(100).total_size == 100
