"""Pytest shared fixtures for the Eventline provider tests."""
import logging
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from eventline_provider.config.logging import LOGGER_NAME
from eventline_provider.core.eventline import EventlineClient
from tests.factories import API_KEY, ENDPOINT, PROJECT_ID, FakeSession


# ─────────────────────────────────────────────────────────────────────────────
# Environment isolation
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _clean_eventline_env(monkeypatch):
    """Keep the developer's EVENTLINE_* variables out of the tests."""
    for var in (
        "EVENTLINE_ENDPOINT",
        "EVENTLINE_API_KEY",
        "EVENTLINE_TIMEOUT",
        "EVENTLINE_PAGE_SIZE",
        "EVENTLINE_LOG_LEVEL",
        "EVENTLINE_LOG_JSON",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _propagate_package_logs():
    """configure_logging() stops propagation; restore it so caplog sees records."""
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


# ─────────────────────────────────────────────────────────────────────────────
# Clients
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    """Unscoped client wired to the fake session."""
    return EventlineClient(ENDPOINT, API_KEY, session=session)


@pytest.fixture
def scoped_client(client):
    return client.for_project(PROJECT_ID)


@pytest.fixture
def failing_session():
    """Session whose every request raises a connection error."""
    mock = MagicMock(spec=requests.Session)
    mock.request.side_effect = requests.ConnectionError("connection refused")
    return mock
