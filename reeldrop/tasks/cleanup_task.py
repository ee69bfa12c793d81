"""
Cleanup Task

Scheduled task for periodic retention cleanup of the storage directory.
Thin wrapper that delegates to the RetentionSweeper.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

from reeldrop.domain.file_storage.services import RetentionSweeper

# Configure logging
logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cleanup-old-files"


def cleanup_old_files(container, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Run one retention sweep.

    Resolves the sweeper from the DependencyContainer. Runs once at startup
    and then daily at midnight (configured in the scheduler).

    Args:
        container: Application DependencyContainer
        now: Reference time, defaults to the sweeper's clock

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    cleanup_stats: Dict[str, Any] = {
        "deleted_files": 0,
        "duration_ms": 0.0,
        "errors": [],
    }
    start_time = time.time()

    try:
        sweeper = container.resolve(RetentionSweeper)
        cleanup_stats["deleted_files"] = sweeper.sweep(now)
    except Exception as e:
        error_msg = f"Error cleaning up old files: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    cleanup_stats["duration_ms"] = (time.time() - start_time) * 1000
    logger.debug(
        f"Cleanup task finished - Files: {cleanup_stats['deleted_files']}, "
        f"Errors: {len(cleanup_stats['errors'])}, "
        f"Duration: {cleanup_stats['duration_ms']:.2f}ms"
    )
    return cleanup_stats
