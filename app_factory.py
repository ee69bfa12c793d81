"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from reeldrop.application.dependency_container import DependencyContainer
from reeldrop.application.extraction_service import ExtractionService
from reeldrop.application.streaming_service import StreamingService
from reeldrop.domain.file_storage import (
    IFileStorageRepository,
    MetadataLedger,
    RetentionSweeper,
)
from reeldrop.domain.file_storage.repositories import LEDGER_TEMP_SUFFIX
from reeldrop.infrastructure.json_ledger_repository import JsonLedgerRepository
from reeldrop.infrastructure.local_file_storage_repository import LocalFileStorageRepository


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 8000))
        self.debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

        # Storage and retention
        self.download_dir = os.getenv("DOWNLOAD_DIR", str(Path.cwd() / "downloads"))
        self.retention_hours = float(os.getenv("RETENTION_HOURS", 24))

        # Extraction tool
        self.ytdlp_binary = os.getenv("YTDLP_BINARY", "yt-dlp")
        self.extraction_timeout = _optional_float(os.getenv("EXTRACTION_TIMEOUT"))

        # Streaming retry policy
        self.stream_max_retries = int(os.getenv("STREAM_MAX_RETRIES", 2))
        self.stream_backoff_seconds = float(os.getenv("STREAM_BACKOFF_SECONDS", 1.0))

        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    # Create Flask app
    app = Flask(__name__)
    app.config["YTDLP_BINARY"] = config.ytdlp_binary
    app.config["EXTRACTION_TIMEOUT"] = config.extraction_timeout
    app.config["DOWNLOAD_DIR"] = config.download_dir
    app.config["RESTX_MASK_SWAGGER"] = False

    # Configure CORS for the API only
    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": config.cors_origins,
                "methods": ["GET", "POST"],
                "allow_headers": ["Content-Type", "Authorization", "Range"],
                "expose_headers": ["Content-Range", "Content-Length", "Content-Disposition"],
            }
        },
    )

    # Initialize services
    _initialize_services(app, config)

    # Register blueprints
    _register_blueprints(app)

    # Register health check endpoint
    _register_health_endpoint(app)

    # Scheduler is attached by main.py when the process starts serving
    app.scheduler = None

    return app


def _initialize_services(app: Flask, config: AppConfig) -> None:
    """
    Initialize application services and attach to app context using DependencyContainer.

    PATTERN:
    --------
    1. Create DependencyContainer instance
    2. Register infrastructure adapters (storage, ledger document)
    3. Register domain services (ledger, sweeper)
    4. Register application services (extraction, streaming)
    5. Attach container to Flask app context

    Args:
        app: Flask application
        config: Application configuration
    """
    container = DependencyContainer()

    # Infrastructure
    storage_repository = LocalFileStorageRepository(config.download_dir)
    ledger_repository = JsonLedgerRepository(storage_repository.base_path)

    container.register_singleton(IFileStorageRepository, storage_repository)
    container.register_singleton(LocalFileStorageRepository, storage_repository)
    container.register_singleton(JsonLedgerRepository, ledger_repository)

    # Domain services
    ledger = MetadataLedger(ledger_repository)
    sweeper = RetentionSweeper(
        storage_repository,
        ledger,
        retention=timedelta(hours=config.retention_hours),
    )
    container.register_singleton(MetadataLedger, ledger)
    container.register_singleton(RetentionSweeper, sweeper)

    # Application services
    extraction_service = ExtractionService(
        storage_repository.base_path,
        ledger,
        binary=config.ytdlp_binary,
    )
    streaming_service = StreamingService(
        storage_repository,
        excluded_names=(ledger.file_name, ledger.file_name + LEDGER_TEMP_SUFFIX),
        max_retries=config.stream_max_retries,
        backoff_base=config.stream_backoff_seconds,
    )
    container.register_singleton(ExtractionService, extraction_service)
    container.register_singleton(StreamingService, streaming_service)

    # Attach container to Flask app context
    app.container = container

    app.logger.info(
        f"Application services initialized ({container.singleton_count} singletons), "
        f"storage at {storage_repository.base_path}"
    )


def _register_blueprints(app: Flask) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
    """
    from reeldrop.api import API_PREFIX, api_bp

    app.register_blueprint(api_bp)

    app.logger.info(f"API registered at {API_PREFIX} with Swagger UI at {API_PREFIX}/docs")


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        from reeldrop.api.namespaces import get_health_status

        health_status, status_code = get_health_status(app)
        return jsonify(health_status), status_code
