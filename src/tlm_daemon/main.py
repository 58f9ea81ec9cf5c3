#!/usr/bin/env python3
"""
Main entry point and central orchestrator for the tlm2api daemon.

This script initializes and runs the FastAPI application that bridges
line-oriented telemetry output (e.g. an instrument log file) to a web API and
WebSocket interface.

Key responsibilities include:
- Configuring application-wide logging.
- Starting and stopping features, including the file line source that tails
  the telemetry log and feeds each line to the decoder (see line_source.py).
- Initializing the FastAPI application, including:
    - Setting up Prometheus metrics middleware.
    - Registering API routers (frames, config/status, WebSockets).
    - Streaming logs to WebSocket clients.
- Providing a command-line interface to start the Uvicorn server.
"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import ResponseValidationError
from fastapi.responses import PlainTextResponse

from tlm_daemon.config import configure_logger, get_fastapi_config
from tlm_daemon.feature_manager import shutdown_all as feature_shutdown_all
from tlm_daemon.feature_manager import startup_all as feature_startup_all
from tlm_daemon.middleware import prometheus_http_middleware
from tlm_daemon.websocket import WebSocketLogHandler

from .api_routers.config_and_ws import api_router_config_ws
from .api_routers.frames import api_router_frames

# ── Logging ──────────────────────────────────────────────────────────────────
logger = configure_logger()

logger.info("tlm2api starting up...")


def create_app():
    fastapi_config = get_fastapi_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # --- Startup ---
        log_ws_handler = WebSocketLogHandler(loop=asyncio.get_running_loop())
        log_ws_handler.setLevel(logging.DEBUG)
        log_ws_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logging.getLogger().addHandler(log_ws_handler)
        logger.info("WebSocketLogHandler added to the root logger.")

        await feature_startup_all()
        yield
        # --- Shutdown ---
        await feature_shutdown_all()
        logging.getLogger().removeHandler(log_ws_handler)
        logger.info("tlm2api shutting down...")

    app = FastAPI(
        title=fastapi_config["title"],
        servers=[{"url": "/", "description": fastapi_config["server_description"]}],
        root_path=fastapi_config["root_path"],
        lifespan=lifespan,
    )

    # ── Middleware ─────────────────────────────────────────────────────────────
    @app.middleware("http")
    async def prometheus_middleware_handler(request, call_next):
        """Prometheus metrics middleware for HTTP requests."""
        return await prometheus_http_middleware(request, call_next)

    # ── Exception Handlers ─────────────────────────────────────────────────────
    @app.exception_handler(ResponseValidationError)
    async def validation_exception_handler(request, exc):
        """Handles response validation errors with a plain text message."""
        return PlainTextResponse(f"Validation error: {exc}", status_code=500)

    # ── API Routers ────────────────────────────────────────────────────────────
    app.include_router(api_router_frames, prefix="/api")
    app.include_router(api_router_config_ws, prefix="/api")

    return app


app = create_app()


# ── Entrypoint ─────────────────────────────────────────────────────────────
def main():
    """
    Runs the Uvicorn server for the tlm2api application.

    Host, port and log level come from TLM2API_HOST, TLM2API_PORT and
    TLM2API_LOG_LEVEL.
    """
    host = os.getenv("TLM2API_HOST", "0.0.0.0")
    port = int(os.getenv("TLM2API_PORT", "8000"))
    log_level = os.getenv("TLM2API_LOG_LEVEL", "info").lower()

    logger.info(f"Starting Uvicorn server on {host}:{port} with log level '{log_level}'")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
