"""
Shared fixtures for the API versioning tests.

Provides version configurations (the built-in one and a richer lifecycle
configuration), registries, resolvers, and Flask apps built from them.
"""

import copy

import pytest

from api_versioning import DEFAULT_VERSION_DATA, VersionRegistry, VersionResolver
from app import create_app
from config import AppConfig


# stable 0.3.0; 0.2.x in its deprecation window; 0.1.x removed
LIFECYCLE_VERSION_DATA = {
    "stable": "0.3.0",
    "aliases": {
        "v0": "0.3.0",
        "latest": "0.3.0",
        "legacy": "0.2.9",
    },
    "supported": ["0.2.0", "0.2.9", "0.2.10", "0.3.0"],
    "deprecated": {
        "0.2.0": {"sunset": "2027-01-01T00:00:00Z"},
        "0.2.9": {"sunset": "2027-01-01T00:00:00Z"},
    },
    "sunsetted": ["0.1.0", "0.1.5"],
}


@pytest.fixture
def version_data():
    """Built-in version configuration (stable 0.2.0, 0.1.0 deprecated)."""
    return copy.deepcopy(DEFAULT_VERSION_DATA)


@pytest.fixture
def lifecycle_data():
    """Configuration with deprecated, sunsetted, and multi-patch versions."""
    return copy.deepcopy(LIFECYCLE_VERSION_DATA)


@pytest.fixture
def registry(version_data):
    return VersionRegistry.from_dict(version_data)


@pytest.fixture
def lifecycle_registry(lifecycle_data):
    return VersionRegistry.from_dict(lifecycle_data)


@pytest.fixture
def resolver(registry):
    return VersionResolver(registry)


@pytest.fixture
def lifecycle_resolver(lifecycle_registry):
    return VersionResolver(lifecycle_registry)


@pytest.fixture
def app(registry):
    """Create the full application with the built-in version configuration."""
    app = create_app(AppConfig(), version_registry=registry)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
