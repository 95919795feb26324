"""
Pytest configuration and shared fixtures
"""
import pytest

from container_exporter.models import ContainerRef
from tests.fixtures.mock_runtime import MockRuntimeClient
from tests.fixtures.sample_data import APP_ID, DB_ID, stats_payload


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: mark test as requiring a live Docker daemon"
    )


@pytest.fixture
def app_container():
    return ContainerRef(id=APP_ID, names=["/my-app"])


@pytest.fixture
def db_container():
    return ContainerRef(id=DB_ID, names=["/db", "/my-app/db"])


@pytest.fixture
def sample_stats():
    """Raw stats payload as returned by the Docker API"""
    return stats_payload()


@pytest.fixture
def runtime_client(app_container, db_container):
    """Runtime client with two healthy containers"""
    return MockRuntimeClient(
        [app_container, db_container],
        {
            APP_ID: stats_payload(user=100, kernel=50, total=200),
            DB_ID: stats_payload(user=7, kernel=3, total=10, networks={}),
        },
    )
