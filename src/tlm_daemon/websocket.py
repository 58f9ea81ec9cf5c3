"""
Manages WebSocket communications for the tlm2api daemon.

Three streams are served, each with its own client set:
- frames (`/ws`): every decoded frame as a FrameInfo JSON message,
- logs (`/ws/logs`): formatted log records, fed by `WebSocketLogHandler`,
- features (`/ws/features`): feature summaries, pushed on connect and whenever
  a feature changes health.

Clients only listen; anything they send is ignored. A client whose send fails
is dropped from its set.
"""

import asyncio
import logging
from typing import Set

from fastapi import WebSocket, WebSocketDisconnect

from tlm_daemon.app_state import clients, log_ws_clients
from tlm_daemon.metrics import WS_CLIENTS, WS_MESSAGES

logger = logging.getLogger(__name__)

features_ws_clients: Set[WebSocket] = set()


def _peer(ws: WebSocket) -> str:
    if ws.client is None:
        return "unknown"
    return f"{ws.client.host}:{ws.client.port}"


def _update_client_gauge():
    WS_CLIENTS.set(len(clients))


# ── Log streaming ──────────────────────────────────────────────────────────
class WebSocketLogHandler(logging.Handler):
    """
    Forwards formatted log records to every `/ws/logs` client.

    `emit` may run on any thread, so each send is handed to the daemon's event
    loop with `asyncio.run_coroutine_threadsafe`. Records emitted while the
    loop is not running are not forwarded.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.loop = loop

    def _forward(self, ws_client: WebSocket, text: str):
        fut = asyncio.run_coroutine_threadsafe(ws_client.send_text(text), self.loop)

        def drop_if_failed(done, ws_client=ws_client):
            if done.cancelled() or done.exception() is not None:
                log_ws_clients.discard(ws_client)

        fut.add_done_callback(drop_if_failed)

    def emit(self, record):
        if not self.loop or not self.loop.is_running():
            return
        text = self.format(record)
        for ws_client in list(log_ws_clients):
            try:
                self._forward(ws_client, text)
            except Exception:
                log_ws_clients.discard(ws_client)


# ── Broadcasting ────────────────────────────────────────────────────────────
async def broadcast_to_clients(text: str):
    """
    Sends one frame message to every `/ws` client.

    Args:
        text: JSON-encoded FrameInfo.
    """
    for ws in list(clients):
        try:
            await ws.send_text(text)
        except Exception:
            clients.discard(ws)
            continue
        WS_MESSAGES.inc()
    _update_client_gauge()


def _features_payload():
    from tlm_daemon.feature_manager import get_all_features

    return [f.describe() for f in get_all_features().values()]


async def broadcast_features_status():
    """Pushes the current feature summaries to every `/ws/features` client."""
    payload = _features_payload()
    for ws in list(features_ws_clients):
        try:
            await ws.send_json(payload)
        except Exception:
            features_ws_clients.discard(ws)


# ── WebSocket Endpoints ────────────────────────────────────────────────────
async def _listen_until_closed(ws: WebSocket, label: str):
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.info(f"{label} client disconnected: {_peer(ws)}")
    except Exception as e:
        logger.error(f"{label} error for client {_peer(ws)}: {e}")


async def websocket_endpoint(ws: WebSocket):
    """Frame stream: each newly decoded frame is pushed as JSON."""
    await ws.accept()
    clients.add(ws)
    _update_client_gauge()
    logger.info(f"WebSocket client connected: {_peer(ws)}")
    try:
        await _listen_until_closed(ws, "WebSocket")
    finally:
        clients.discard(ws)
        _update_client_gauge()


async def websocket_logs_endpoint(ws: WebSocket):
    """Log stream: every record handled by the root logger."""
    await ws.accept()
    log_ws_clients.add(ws)
    logger.info(f"Log WebSocket client connected: {_peer(ws)}")
    try:
        await _listen_until_closed(ws, "Log WebSocket")
    finally:
        log_ws_clients.discard(ws)


async def features_ws_endpoint(ws: WebSocket):
    """Feature stream: the current summaries on connect, then every change."""
    await ws.accept()
    features_ws_clients.add(ws)
    try:
        await ws.send_json(_features_payload())
        await _listen_until_closed(ws, "Features WebSocket")
    finally:
        features_ws_clients.discard(ws)
