"""
Media Extraction Domain

Handles output format validation, strategy selection, and recovery of the
produced filename from the extraction tool's output.
"""

from reeldrop.domain.errors import (
    ExtractionFailedError,
    ExtractionTimeoutError,
    InvalidFormatError,
)
from .output_scanner import DESTINATION_RULES, DestinationRule, DestinationScanner
from .value_objects import (
    AUDIO_FORMATS,
    SUPPORTED_FORMATS,
    VIDEO_FORMATS,
    ExtractionRequest,
    ExtractionStrategy,
    OutputFormat,
)

__all__ = [
    "AUDIO_FORMATS",
    "VIDEO_FORMATS",
    "SUPPORTED_FORMATS",
    "ExtractionRequest",
    "ExtractionStrategy",
    "OutputFormat",
    "DestinationRule",
    "DestinationScanner",
    "DESTINATION_RULES",
    "InvalidFormatError",
    "ExtractionFailedError",
    "ExtractionTimeoutError",
]
