"""
Tests for the config, status and WebSocket API router
(`tlm_daemon.api_routers.config_and_ws`).

Covers the liveness/readiness probes (including feature health aggregation),
Prometheus metrics, the line source configuration, server and application
status, and the WebSocket routes.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tlm_daemon import app_state
from tlm_daemon.api_routers.config_and_ws import api_router_config_ws
from tlm_daemon.feature_base import Feature
from tlm_decoder import decode_line

app = FastAPI()
app.include_router(api_router_config_ws)
client = TestClient(app)


class StubFeature(Feature):
    def __init__(self, name, status):
        super().__init__(name, enabled=True)
        self._status = status

    @property
    def health(self):
        return self._status


@pytest.fixture
def source_config(tmp_path):
    path = tmp_path / "log.txt"
    return {"path": str(path), "poll_interval": 0.1, "from_start": False, "encoding": "utf-8"}


# --- /healthz ---


def test_healthz_ok():
    features = {"line_source": StubFeature("line_source", "healthy")}
    with patch(
        "tlm_daemon.api_routers.config_and_ws.feature_manager.get_enabled_features",
        return_value=features,
    ):
        response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "features": {"line_source": "healthy"}}


@pytest.mark.parametrize("status", ["waiting", "error"])
def test_healthz_degraded(status):
    features = {
        "line_source": StubFeature("line_source", status),
        "other": StubFeature("other", "unknown"),
    }
    with patch(
        "tlm_daemon.api_routers.config_and_ws.feature_manager.get_enabled_features",
        return_value=features,
    ):
        response = client.get("/healthz")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "degraded"
    assert body["unhealthy_features"] == {"line_source": status}
    assert body["all_features"] == {"line_source": status, "other": "unknown"}


# --- /readyz ---


def test_readyz_pending_until_first_frame():
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.json() == {"status": "pending", "frames": 0}

    app_state.record_frame(decode_line("1 freq 50"), source="test")
    response = client.get("/readyz")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "frames": 1}


# --- /metrics ---


def test_metrics_endpoint():
    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "tlm2api_lines_total" in response.text


# --- /config/source ---


def test_source_config_missing_file(source_config):
    with patch(
        "tlm_daemon.api_routers.config_and_ws.get_line_source_config",
        return_value=source_config,
    ):
        response = client.get("/config/source")
    assert response.status_code == 200
    assert response.json() == {**source_config, "exists": False}


def test_source_config_existing_file(source_config):
    with open(source_config["path"], "w") as f:
        f.write("1 freq 50\n")
    with patch(
        "tlm_daemon.api_routers.config_and_ws.get_line_source_config",
        return_value=source_config,
    ):
        assert client.get("/config/source").json()["exists"] is True


# --- /status ---


def test_server_status():
    with patch("tlm_daemon.api_routers.config_and_ws.VERSION", "1.2.3"):
        response = client.get("/status/server")
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == "1.2.3"
    assert body["uptime_seconds"] >= 0


def test_application_status():
    app_state.record_frame(decode_line("1 state IDLE"), source="test")
    app_state.record_frame(decode_line("2 freq 50"), source="test")
    app_state.record_discard("unknown_kind")

    body = client.get("/status/application").json()
    assert body["frame_count"] == 2
    assert body["kinds_seen"] == ["freq", "state"]
    assert body["discarded_lines"] == {"unknown_kind": 1}
    assert body["line_source"]["name"] == "line_source"
    assert body["line_source"]["health"] == "disabled"
    assert body["websocket_clients"] == {"data_clients": 0, "log_clients": 0}


# --- WebSockets ---


def test_ws_route_registers_client():
    with client.websocket_connect("/ws"):
        assert len(app_state.clients) == 1
    assert len(app_state.clients) == 0


def test_ws_logs_route_registers_client():
    with client.websocket_connect("/ws/logs"):
        assert len(app_state.log_ws_clients) == 1
    assert len(app_state.log_ws_clients) == 0


def test_ws_features_route_sends_status():
    with client.websocket_connect("/ws/features") as ws_conn:
        features = ws_conn.receive_json()
    assert {"line_source"} <= {f["name"] for f in features}
