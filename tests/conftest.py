"""
Main pytest configuration for all tests.

Fixtures and helpers for unit and integration tests.
"""

import os
import pytest

# Set test environment variables before importing application modules
os.environ["ENVIRONMENT"] = "test"
os.environ["REGISTRY_BACKEND"] = "memory"
os.environ["DEFAULT_DOMAIN"] = "example.web.app"
os.environ["HEAT_DELAY_MS"] = "0"
os.environ["LOG_LEVEL"] = "DEBUG"

from cdnsync.domain.cache.domain_services import (  # noqa: E402
    CacheInvalidator,
    CacheWarmer,
    HostRegistry,
)
from cdnsync.infrastructure.repositories.host_registry_repository import (  # noqa: E402
    InMemoryHostRegistryRepository,
)
from tests.fakes import RecordingGateway  # noqa: E402


@pytest.fixture
def gateway():
    """Recording CDN gateway."""
    return RecordingGateway()


@pytest.fixture
def repository():
    """Empty in-memory host registry store."""
    return InMemoryHostRegistryRepository()


@pytest.fixture
def registry(repository):
    """Host registry over the in-memory store."""
    return HostRegistry(
        repository,
        default_domain="example.web.app",
        functions_domain_suffix=".cloudfunctions.net",
    )


@pytest.fixture
def invalidator(registry, gateway):
    return CacheInvalidator(registry, gateway)


@pytest.fixture
def warmer(registry, gateway):
    return CacheWarmer(registry, gateway, default_delay=0)
