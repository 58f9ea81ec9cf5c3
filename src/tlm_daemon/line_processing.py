"""
Handles the processing of incoming telemetry lines for the tlm2api daemon.

This module is responsible for:
- Receiving raw lines from a line source (tailed file, HTTP ingest).
- Decoding each line with `tlm_decoder`.
- Updating the application state (`app_state`) with decoded frames.
- Counting lines that produce no frame, by reason.
- Broadcasting decoded frames to WebSocket clients.
- Recording relevant metrics.
"""

import asyncio
import json
import logging
import time
from typing import Optional, Union

from common.models import NoFrame
from tlm_daemon import app_state
from tlm_daemon.metrics import DECODE_LATENCY, FRAMES_DECODED, LINE_COUNTER, LINES_DISCARDED
from tlm_daemon.models import FrameInfo
from tlm_daemon.websocket import broadcast_to_clients
from tlm_decoder import decode_line

logger = logging.getLogger(__name__)


def strip_line_terminator(line: str) -> str:
    """Remove one trailing LF and then one trailing CR, as the file line source does."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def process_line(
    line: str,
    source: str,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Union[FrameInfo, NoFrame, None]:
    """
    Decodes one line and dispatches the resulting frame.

    Args:
        line: Raw telemetry line without its line terminator.
        source: Name of the line source, stored with the frame.
        loop: Event loop used to schedule the WebSocket broadcast. No broadcast
            is scheduled when it is None or not running.

    Returns:
        The stored FrameInfo, the NoFrame returned by the decoder when the
        line produced no frame, or None for an empty line.
    """
    if not line:
        return None

    LINE_COUNTER.inc()
    start_time = time.perf_counter()
    try:
        result = decode_line(line)
    finally:
        DECODE_LATENCY.observe(time.perf_counter() - start_time)

    if not result:
        LINES_DISCARDED.labels(reason=result.reason).inc()
        app_state.record_discard(result.reason)
        logger.debug(f"No frame from {source} ({result.reason}): {line!r}")
        return result

    info = app_state.record_frame(result, source=source)
    FRAMES_DECODED.labels(kind=info.kind).inc()

    if loop and loop.is_running():
        text = json.dumps(info.to_wire())
        loop.call_soon_threadsafe(loop.create_task, broadcast_to_clients(text))

    return info
