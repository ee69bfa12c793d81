"""
Extraction Result Value Object

Outcome of a successful extraction run.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ExtractionResult:
    """
    Result of an extraction run.

    Attributes:
        file_name: Basename of the produced file inside the storage directory
        created_at: Timestamp recorded in the metadata ledger
        matched_rule: Name of the output rule that produced file_name
    """
    file_name: str
    created_at: datetime
    matched_rule: Optional[str] = None
