import os
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# The file line source must not tail a real log.txt while the test suite runs.
os.environ.setdefault("ENABLE_LINE_SOURCE", "0")

from tlm_daemon.main import app  # noqa: E402


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Synchronous TestClient fixture for the full FastAPI application.
    Entering the context runs the lifespan (log handler, features).
    """
    with TestClient(app=app, base_url="http://test") as c:
        yield c


# --- Global state reset fixtures for test isolation ---


@pytest.fixture(autouse=True)
def reset_app_state_globals():
    """
    Automatically reset the frame state and WebSocket client sets before each test.
    """
    from tlm_daemon import app_state

    app_state.reset()
    app_state.clients.clear()
    app_state.log_ws_clients.clear()
    yield
    app_state.reset()


@pytest.fixture
def mock_broadcast(mocker):
    """Replaces the WebSocket frame broadcast scheduled by line processing."""
    return mocker.patch(
        "tlm_daemon.line_processing.broadcast_to_clients", new_callable=AsyncMock
    )


@pytest.fixture
def sample_lines():
    """Representative raw lines as written by the instrument."""
    return {
        "qidata": "[2020-10-18 09:01:50.141] 110 qidata 01 72 73",
        "state": "[2020-10-18 09:01:50.200] 111 state CHARGING idle",
        "freq": "[2020-10-18 09:01:50.300] 112 freq 50.5",
        "Icrms": "113 Icrms 0.42",
        "unknown": "114 volts 12.0",
        "short": "115 freq",
    }
