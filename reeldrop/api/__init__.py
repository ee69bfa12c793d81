"""
ReelDrop REST API

Versionless API mounted at /api with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_PREFIX = os.getenv("API_PREFIX", "/api")

# Create blueprint for the API
api_bp = Blueprint("api", __name__, url_prefix=API_PREFIX)

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_bp,
    version="1.0",
    title="ReelDrop API",
    description="Extract remote media into a chosen format and stream it back for 24 hours",
    doc="/docs",  # Swagger UI will be available at /api/docs
    contact="ReelDrop Team",
    license="MIT",
    # No authentication required
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import download_ns, stream_ns, system_ns  # noqa: E402

# Register namespaces
api.add_namespace(download_ns, path="/downloads")
api.add_namespace(stream_ns, path="/stream")
api.add_namespace(system_ns, path="/system")
