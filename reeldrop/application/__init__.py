"""
Application Layer

Orchestrates extraction runs and file streaming on top of the domain layer.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .extraction_result import ExtractionResult
from .extraction_service import ExtractionService
from .streaming_service import ByteRange, RangeStreamer, StreamingService

__all__ = [
    "DependencyContainer",
    "DependencyNotFoundError",
    "ExtractionResult",
    "ExtractionService",
    "ByteRange",
    "RangeStreamer",
    "StreamingService",
]
