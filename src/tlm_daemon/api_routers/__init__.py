"""
api_routers

This package contains FastAPI APIRouter modules that define the API endpoints
of the tlm2api application.

Routers:
    - frames: Decoding, ingest and decoded frame endpoints
    - config_and_ws: Health, status, metrics and WebSocket endpoints
"""

from .config_and_ws import api_router_config_ws
from .frames import api_router_frames

__all__ = ["api_router_config_ws", "api_router_frames"]
