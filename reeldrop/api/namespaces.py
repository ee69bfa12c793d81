"""
API Namespaces - Organized endpoint groups
"""

import shutil
from urllib.parse import quote

from flask import Response, current_app, request
from flask_restx import Namespace, Resource

from reeldrop.api import API_PREFIX
from reeldrop.api.models import (
    download_request,
    download_response,
    error_response,
    health_response,
)
from reeldrop.application.dependency_container import DependencyNotFoundError
from reeldrop.application.extraction_service import ExtractionService
from reeldrop.application.streaming_service import StreamingService
from reeldrop.domain.errors import (
    ErrorCategory,
    ExtractionFailedError,
    ExtractionTimeoutError,
    InvalidFormatError,
    RangeNotSatisfiableError,
    StoredFileNotFoundError,
    StreamTransferError,
    create_error_response,
)
from reeldrop.domain.file_storage.repositories import IFileStorageRepository

# =============================================================================
# Download Namespace - Extraction requests
# =============================================================================

download_ns = Namespace("downloads", description="Media extraction operations")


@download_ns.route("")
class Downloads(Resource):
    """Extract a remote resource into the storage directory"""

    @download_ns.doc("create_download")
    @download_ns.expect(download_request, validate=False)
    @download_ns.response(200, "Success", download_response)
    @download_ns.response(400, "Bad Request", error_response)
    @download_ns.response(500, "Internal Server Error", error_response)
    @download_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Extract media and return a streaming link

        Runs the extraction tool to completion, then returns the produced
        filename and an absolute URL to stream it. Files are kept for 24 hours.
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        url = _clean(data.get("url"))
        output_format = _clean(data.get("format"))

        if not url or not output_format:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                status_code=400
            )

        extraction_service = _resolve(ExtractionService)
        storage_repository = _resolve(IFileStorageRepository)
        if extraction_service is None or storage_repository is None:
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                "Extraction service not initialized",
                status_code=503
            )

        try:
            result = extraction_service.run(
                url,
                output_format,
                timeout=current_app.config.get("EXTRACTION_TIMEOUT"),
            )
        except InvalidFormatError as e:
            return create_error_response(
                ErrorCategory.INVALID_FORMAT,
                str(e),
                context={"supportedFormats": e.supported},
                status_code=400
            )
        except ExtractionTimeoutError as e:
            current_app.logger.error(f"Error: {e}")
            return create_error_response(
                ErrorCategory.EXTRACTION_TIMEOUT,
                str(e),
                status_code=500
            )
        except ExtractionFailedError as e:
            current_app.logger.error(f"Error: {e}")
            return create_error_response(
                ErrorCategory.EXTRACTION_FAILED,
                str(e),
                context={"exitCode": e.exit_code},
                status_code=500
            )
        except Exception as e:
            current_app.logger.exception(f"Unexpected error during extraction: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                str(e),
                status_code=500
            )

        if storage_repository.resolve(result.file_name) is None:
            current_app.logger.error(f"Error: File not found: {result.file_name}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                f"File not found: {result.file_name}",
                status_code=500
            )

        download_url = (
            f"{request.host_url.rstrip('/')}{API_PREFIX}/stream/"
            f"{quote(result.file_name, safe='')}"
        )
        return {
            "message": "Download successful",
            "fileName": result.file_name,
            "downloadUrl": download_url,
        }, 200


# =============================================================================
# Stream Namespace - File retrieval
# =============================================================================

stream_ns = Namespace("stream", description="Stored file streaming")


@stream_ns.route("/<string:file_name>", endpoint="stream_file")
@stream_ns.param("file_name", "Name of a stored file (percent-encoded)")
class StreamFile(Resource):
    """Stream a stored file"""

    @stream_ns.doc("stream_file")
    @stream_ns.response(200, "File content")
    @stream_ns.response(206, "Partial content")
    @stream_ns.response(404, "File Not Found", error_response)
    @stream_ns.response(416, "Range Not Satisfiable", error_response)
    @stream_ns.response(500, "Internal Server Error", error_response)
    def get(self, file_name):
        """
        Stream a stored file with byte-range support

        Honors a single "Range: bytes=start-end" header with 206 Partial
        Content; otherwise returns the whole file.
        """
        streaming_service = _resolve(StreamingService)
        if streaming_service is None:
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                "Streaming service not initialized",
                status_code=503
            )

        try:
            plan = streaming_service.prepare(file_name, request.headers.get("Range"))
        except StoredFileNotFoundError:
            return create_error_response(
                ErrorCategory.FILE_NOT_FOUND,
                status_code=404
            )
        except RangeNotSatisfiableError as e:
            payload, status = create_error_response(
                ErrorCategory.RANGE_NOT_SATISFIABLE,
                str(e),
                status_code=416
            )
            return payload, status, {"Content-Range": f"bytes */{e.total_size}"}

        try:
            body = plan.body()
        except StreamTransferError as e:
            current_app.logger.error(f"Error streaming {file_name}: {e}")
            return create_error_response(
                ErrorCategory.SYSTEM_ERROR,
                str(e),
                status_code=500
            )

        current_app.logger.info(
            f"Streaming {file_name} ({plan.headers['Content-Length']} bytes, status {plan.status})"
        )
        response = Response(
            body,
            status=plan.status,
            headers=plan.headers,
            direct_passthrough=True,
        )
        response.call_on_close(plan.streamer.mark_closed)
        return response


# =============================================================================
# System Namespace - System health and monitoring
# =============================================================================

system_ns = Namespace("system", description="System health and monitoring operations")


@system_ns.route("/health")
class Health(Resource):
    """System health check"""

    @system_ns.doc("health_check")
    @system_ns.response(200, "Healthy", health_response)
    @system_ns.response(503, "Service Degraded", health_response)
    def get(self):
        """
        Check storage, scheduler and extraction tool availability
        """
        return get_health_status(current_app)


# =============================================================================
# Helper Functions
# =============================================================================

def get_health_status(app) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "storage": "unknown",
        "scheduler": "unknown",
        "extractor": "unknown",
    }

    container = getattr(app, "container", None)
    storage_repository = None
    if container is not None and container.is_registered(IFileStorageRepository):
        storage_repository = container.resolve(IFileStorageRepository)

    if storage_repository is not None and storage_repository.is_available():
        health_status["storage"] = "available"
    else:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"

    scheduler = getattr(app, "scheduler", None)
    if scheduler is None:
        health_status["scheduler"] = "not_started"
    elif scheduler.running:
        health_status["scheduler"] = "running"
    else:
        health_status["scheduler"] = "stopped"

    binary = app.config.get("YTDLP_BINARY", "yt-dlp")
    if shutil.which(binary):
        health_status["extractor"] = "available"
    else:
        health_status["extractor"] = "missing"
        health_status["status"] = "degraded"

    if health_status["status"] != "ok":
        health_status["message"] = "backend degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _clean(value) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _resolve(service_type):
    """
    Get a service from the DI container.

    Returns:
        The service instance or None if not available
    """
    container = getattr(current_app, "container", None)
    if container is None:
        current_app.logger.warning("DI container not available")
        return None

    try:
        return container.resolve(service_type)
    except DependencyNotFoundError as e:
        current_app.logger.warning(f"Service not available: {e}")
        return None
