"""
tlm_daemon

API service for tlm2api: a FastAPI-based daemon that tails line-oriented
telemetry output, decodes each line with `tlm_decoder`, keeps the latest
frames in memory and publishes them over HTTP and WebSocket.

Modules:
    - app_state: In-memory frame state (latest frame per kind, history, counters)
    - config: Logging setup and environment-based settings
    - feature_manager: Registry and lifecycle of daemon features
    - line_processing: Decoding and dispatch of incoming lines
    - line_source: File tailing line source feature
    - main: FastAPI application setup and server entry point
    - models: Pydantic models for API request/response validation
    - websocket: WebSocket handlers for frames, logs and feature status
"""

from ._version import VERSION
from .config import configure_logger, get_actual_source_path
from .main import app, create_app, main

__all__ = [
    "VERSION",
    "app",
    "create_app",
    "main",
    "configure_logger",
    "get_actual_source_path",
]
