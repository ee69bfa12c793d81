"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from reeldrop.api import api
from reeldrop.domain.media_extraction.value_objects import SUPPORTED_FORMATS

# =============================================================================
# Request Models
# =============================================================================

download_request = api.model(
    "DownloadRequest",
    {
        "url": fields.String(
            required=True,
            description="Remote media URL",
            example="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        ),
        "format": fields.String(
            required=True,
            description="Output format (case-insensitive)",
            enum=list(SUPPORTED_FORMATS),
            example="mp4",
        ),
    },
)

# =============================================================================
# Response Models
# =============================================================================

download_response = api.model(
    "DownloadResponse",
    {
        "message": fields.String(description="Outcome message", example="Download successful"),
        "fileName": fields.String(description="Name of the produced file"),
        "downloadUrl": fields.String(description="Absolute URL of the stream endpoint"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Short error title"),
        "category": fields.String(description="Error category"),
        "message": fields.String(description="User-facing explanation"),
        "details": fields.String(description="Technical details", required=False),
        "supportedFormats": fields.List(
            fields.String, description="Valid formats (invalid format errors only)", required=False
        ),
        "exitCode": fields.Integer(
            description="Extraction tool exit code (extraction errors only)", required=False
        ),
    },
)

health_response = api.model(
    "HealthResponse",
    {
        "status": fields.String(description="Overall status", enum=["ok", "degraded"]),
        "message": fields.String(description="Status message"),
        "storage": fields.String(description="Storage directory status"),
        "scheduler": fields.String(description="Cleanup scheduler status"),
        "extractor": fields.String(description="Extraction tool availability"),
    },
)
