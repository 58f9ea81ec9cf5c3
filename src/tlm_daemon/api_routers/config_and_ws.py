"""
Manages API routes for probes, status, configuration and WebSocket streams.

Probes:
    - /healthz: 200 unless an enabled feature reports a failing health string
    - /readyz: 200 once the first frame has been decoded
Status and configuration:
    - /metrics, /status/server, /status/application, /config/source
WebSockets:
    - /ws (frames), /ws/logs (log records), /ws/features (feature summaries)
"""

import logging
import os
import time
from typing import Dict

from fastapi import APIRouter, WebSocket
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from tlm_daemon import app_state, feature_manager
from tlm_daemon._version import VERSION
from tlm_daemon.config import get_line_source_config
from tlm_daemon.feature_base import DISABLED, HEALTHY, UNKNOWN
from tlm_daemon.websocket import (
    features_ws_endpoint,
    websocket_endpoint,
    websocket_logs_endpoint,
)

logger = logging.getLogger(__name__)

api_router_config_ws = APIRouter()

SERVER_START_TIME = time.time()

# Health strings that do not make the daemon degraded.
ACCEPTABLE_HEALTH = frozenset({HEALTHY, UNKNOWN, DISABLED})


def _feature_health() -> Dict[str, str]:
    return {name: f.health for name, f in feature_manager.get_enabled_features().items()}


@api_router_config_ws.get("/healthz")
async def healthz():
    """Liveness probe; 503 with the failing features when any is not acceptable."""
    report = _feature_health()
    failing = {name: health for name, health in report.items() if health not in ACCEPTABLE_HEALTH}
    if failing:
        logger.debug(f"Health check degraded: {failing}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "unhealthy_features": failing, "all_features": report},
        )
    return JSONResponse(status_code=200, content={"status": "ok", "features": report})


@api_router_config_ws.get("/readyz")
async def readyz():
    """Readiness probe: 503 ('pending') until the first frame is decoded."""
    frames = app_state.frame_count
    if frames == 0:
        return JSONResponse(status_code=503, content={"status": "pending", "frames": frames})
    return JSONResponse(status_code=200, content={"status": "ready", "frames": frames})


@api_router_config_ws.get("/metrics")
def metrics():
    """Prometheus metrics in the text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@api_router_config_ws.get("/config/source")
async def get_source_config():
    """The line source settings, plus whether the tailed file exists right now."""
    settings = dict(get_line_source_config())
    settings["exists"] = os.path.exists(settings["path"])
    return settings


@api_router_config_ws.get("/status/server")
async def get_server_status():
    return {
        "status": "ok",
        "version": VERSION,
        "server_start_time_unix": SERVER_START_TIME,
        "uptime_seconds": time.time() - SERVER_START_TIME,
        "message": "tlm2api server is running.",
    }


@api_router_config_ws.get("/status/application")
async def get_application_status():
    """
    Frame and discard counters, the kinds seen so far, the file line source
    summary and the number of connected WebSocket clients.
    """
    line_source = feature_manager.get_feature("line_source")
    return {
        "status": "ok",
        "frame_count": app_state.frame_count,
        "kinds_seen": sorted(app_state.latest_frames),
        "discarded_lines": dict(app_state.discarded),
        "line_source": line_source.describe() if line_source else None,
        "websocket_clients": {
            "data_clients": len(app_state.clients),
            "log_clients": len(app_state.log_ws_clients),
        },
    }


@api_router_config_ws.websocket("/ws")
async def serve_frames_ws(ws: WebSocket):
    await websocket_endpoint(ws)


@api_router_config_ws.websocket("/ws/logs")
async def serve_logs_ws(ws: WebSocket):
    await websocket_logs_endpoint(ws)


@api_router_config_ws.websocket("/ws/features")
async def serve_features_ws(ws: WebSocket):
    await features_ws_endpoint(ws)
