"""
Unit tests for media extraction value objects.
"""

import pytest
from hypothesis import given, strategies as st

from reeldrop.domain.errors import InvalidFormatError
from reeldrop.domain.media_extraction.value_objects import (
    AUDIO_FORMATS,
    SUPPORTED_FORMATS,
    VIDEO_FORMATS,
    ExtractionRequest,
    ExtractionStrategy,
    OutputFormat,
)


class TestOutputFormat:

    def test_supported_set(self):
        assert VIDEO_FORMATS == ("mp4", "webm", "flv", "ogg", "mkv")
        assert AUDIO_FORMATS == ("mp3", "m4a", "wav", "aac")
        assert set(SUPPORTED_FORMATS) == set(VIDEO_FORMATS) | set(AUDIO_FORMATS)

    @pytest.mark.parametrize("raw,expected", [("MP4", "mp4"), ("Mp3", "mp3"), (" mkv ", "mkv")])
    def test_value_is_normalized(self, raw, expected):
        assert OutputFormat(raw).value == expected
        assert str(OutputFormat(raw)) == expected

    @pytest.mark.parametrize("fmt", AUDIO_FORMATS)
    def test_audio_formats_extract_audio(self, fmt):
        output_format = OutputFormat(fmt)

        assert output_format.strategy is ExtractionStrategy.AUDIO_ONLY
        assert output_format.tool_arguments() == ["-x", "--audio-format", fmt]

    @pytest.mark.parametrize("fmt", VIDEO_FORMATS)
    def test_video_formats_merge_best_streams(self, fmt):
        output_format = OutputFormat(fmt)

        assert output_format.strategy is ExtractionStrategy.VIDEO_AUDIO
        assert output_format.tool_arguments() == [
            "-f",
            "bestvideo+bestaudio",
            "--merge-output-format",
            fmt,
        ]

    def test_invalid_format_lists_supported_formats(self):
        with pytest.raises(InvalidFormatError) as exc_info:
            OutputFormat("avi")

        assert exc_info.value.requested == "avi"
        assert exc_info.value.supported == list(SUPPORTED_FORMATS)
        assert "Invalid format: avi" in str(exc_info.value)
        assert "mp4" in str(exc_info.value)

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_format_is_invalid(self, raw):
        with pytest.raises(InvalidFormatError):
            OutputFormat(raw)

    @given(raw=st.text(max_size=12).filter(lambda s: s.strip().lower() not in SUPPORTED_FORMATS))
    def test_anything_outside_the_set_is_rejected(self, raw):
        with pytest.raises(InvalidFormatError):
            OutputFormat(raw)

    def test_output_format_is_immutable(self):
        output_format = OutputFormat("mp4")

        with pytest.raises(AttributeError):
            output_format.value = "mkv"


class TestExtractionRequest:

    def test_create_validates_format(self):
        request = ExtractionRequest.create("https://example.com/v/1", "WAV")

        assert request.resource_url == "https://example.com/v/1"
        assert request.output_format == OutputFormat("wav")

    def test_create_rejects_invalid_format(self):
        with pytest.raises(InvalidFormatError):
            ExtractionRequest.create("https://example.com/v/1", "gif")
