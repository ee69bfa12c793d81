"""
Shared pytest fixtures and configuration for the ReelDrop test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Storage directory, ledger and clock fixtures
- A Flask app wired to a temporary storage directory
"""

from datetime import datetime, timezone

import pytest

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from app_factory import AppConfig, create_app
from reeldrop.domain.file_storage import MetadataLedger
from reeldrop.infrastructure.json_ledger_repository import JsonLedgerRepository
from reeldrop.infrastructure.local_file_storage_repository import LocalFileStorageRepository
from tests.fixtures.fakes import InMemoryLedgerRepository

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Time-related Fixtures
# =============================================================================

@pytest.fixture
def fixed_now() -> datetime:
    """Provide a fixed, timezone-aware reference time."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def storage_dir(tmp_path):
    """Storage directory inside a pytest-managed temporary directory."""
    return tmp_path / "downloads"


@pytest.fixture
def storage_repository(storage_dir) -> LocalFileStorageRepository:
    return LocalFileStorageRepository(base_path=str(storage_dir))


@pytest.fixture
def json_ledger_repository(storage_repository) -> JsonLedgerRepository:
    return JsonLedgerRepository(storage_repository.base_path)


@pytest.fixture
def memory_ledger_repository() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def ledger(memory_ledger_repository) -> MetadataLedger:
    """Ledger backed by an in-memory document."""
    return MetadataLedger(memory_ledger_repository)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app_config(storage_dir) -> AppConfig:
    config = AppConfig()
    config.download_dir = str(storage_dir)
    config.extraction_timeout = None
    config.stream_backoff_seconds = 0.0
    return config


@pytest.fixture
def app(app_config):
    """Create a Flask app whose storage lives in a temporary directory."""
    flask_app = create_app(app_config)
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.container.clear_overrides()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem and subprocesses)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
