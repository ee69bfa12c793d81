"""
main.py

Flask backend that extracts remote media with yt-dlp and streams the result.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, yt-dlp, APScheduler, python-dotenv
  - System: ffmpeg (must be on PATH for merging/audio extraction)

Notes:
  - API endpoints available at /api/ with Swagger docs at /api/docs
  - Stored files are deleted 24 hours after creation; cleanup runs at startup
    and every day at local midnight
  - Uses application factory pattern for better testability
"""

import logging
import signal
import sys

from dotenv import load_dotenv

load_dotenv()

from app_factory import AppConfig, create_app  # noqa: E402
from reeldrop.config.logging_config import setup_logging  # noqa: E402
from reeldrop.config.scheduler_config import make_scheduler  # noqa: E402
from reeldrop.domain.file_storage import MetadataLedger  # noqa: E402
from reeldrop.tasks.cleanup_task import CLEANUP_JOB_ID, cleanup_old_files  # noqa: E402

logger = logging.getLogger(__name__)


def start_cleanup_schedule(app):
    """
    Run one cleanup pass now and schedule the daily pass.

    Returns:
        The started scheduler
    """
    cleanup_old_files(app.container)

    scheduler = make_scheduler(lambda: cleanup_old_files(app.container), CLEANUP_JOB_ID)
    scheduler.start()
    app.scheduler = scheduler
    return scheduler


def install_shutdown_handlers(app) -> None:
    """Cancel the daily cleanup and flush the ledger on SIGINT/SIGTERM."""

    def _shutdown(signum, frame):
        logger.info("Server is shutting down...")
        scheduler = getattr(app, "scheduler", None)
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        app.container.resolve(MetadataLedger).close()
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)


def main() -> None:
    setup_logging()
    config = AppConfig()
    app = create_app(config)

    start_cleanup_schedule(app)
    install_shutdown_handlers(app)

    logger.info(f"Server running at http://localhost:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug, threaded=True, use_reloader=False)


if __name__ == "__main__":
    main()
