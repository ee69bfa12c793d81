"""
Media Extraction Value Objects

Immutable value objects for output format validation and strategy selection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from reeldrop.domain.errors import InvalidFormatError

VIDEO_FORMATS: Tuple[str, ...] = ("mp4", "webm", "flv", "ogg", "mkv")
AUDIO_FORMATS: Tuple[str, ...] = ("mp3", "m4a", "wav", "aac")
SUPPORTED_FORMATS: Tuple[str, ...] = VIDEO_FORMATS + AUDIO_FORMATS


class ExtractionStrategy(Enum):
    """How the extraction tool is asked to produce the deliverable."""

    AUDIO_ONLY = "audio_only"
    VIDEO_AUDIO = "video+audio"


@dataclass(frozen=True)
class OutputFormat:
    """
    Value object representing a validated output format.

    The value is normalized to lower case; anything outside
    SUPPORTED_FORMATS raises InvalidFormatError.
    """

    value: str

    def __post_init__(self):
        normalized = (self.value or "").strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            raise InvalidFormatError(self.value, SUPPORTED_FORMATS)
        object.__setattr__(self, "value", normalized)

    @property
    def strategy(self) -> ExtractionStrategy:
        if self.value in AUDIO_FORMATS:
            return ExtractionStrategy.AUDIO_ONLY
        return ExtractionStrategy.VIDEO_AUDIO

    def tool_arguments(self) -> List[str]:
        """
        Build the yt-dlp flags for this format's strategy.

        Audio formats request audio-only extraction with the matching codec;
        video formats merge the best video and audio streams into the
        requested container.
        """
        if self.strategy is ExtractionStrategy.AUDIO_ONLY:
            return ["-x", "--audio-format", self.value]
        return ["-f", "bestvideo+bestaudio", "--merge-output-format", self.value]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExtractionRequest:
    """A request to materialize a remote resource in a given format."""

    resource_url: str
    output_format: OutputFormat

    @classmethod
    def create(cls, resource_url: str, desired_format: str) -> "ExtractionRequest":
        return cls(resource_url=resource_url, output_format=OutputFormat(desired_format))
