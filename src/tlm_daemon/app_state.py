"""
Manages the in-memory application state for the tlm2api daemon.

This module holds the latest decoded frame for each measurement kind, a
bounded history per kind, the running frame counter and the counts of lines
that produced no frame. It provides functions to record, query and reset
this shared state. Nothing here is persisted.
"""

import logging
import time
from collections import deque
from typing import Dict, List, Optional, Set

from fastapi import WebSocket

from common.models import TelemetryFrame
from tlm_daemon.config import get_history_config
from tlm_daemon.metrics import HISTORY_SIZE_GAUGE, KIND_COUNT
from tlm_daemon.models import FrameInfo

logger = logging.getLogger(__name__)

_history_config = get_history_config()
MAX_HISTORY_LENGTH: int = _history_config["max_length"]
HISTORY_DURATION: int = _history_config["duration"]  # seconds

# Number of frames decoded since startup or the last reset
frame_count: int = 0

# Most recent FrameInfo for each kind
latest_frames: Dict[str, FrameInfo] = {}

# Per-kind history, oldest first
history: Dict[str, deque[FrameInfo]] = {}

# Lines that produced no frame, keyed by NoFrame reason
discarded: Dict[str, int] = {}

# WebSocket client sets
clients: Set[WebSocket] = set()
log_ws_clients: Set[WebSocket] = set()


def record_frame(
    frame: TelemetryFrame, source: str, received_at: Optional[float] = None
) -> FrameInfo:
    """
    Stores a decoded frame as the latest for its kind and appends it to history.

    Args:
        frame: The decoded frame.
        source: Where the line came from (file path, 'http', ...).
        received_at: Unix timestamp; defaults to now.

    Returns:
        The FrameInfo that was stored, numbered with the incremented frame counter.
    """
    global frame_count

    frame_count += 1
    info = FrameInfo(
        frame_number=frame_count,
        timestamp=received_at if received_at is not None else time.time(),
        source=source,
        frame=frame,
    )
    kind = frame.kind

    latest_frames[kind] = info
    KIND_COUNT.set(len(latest_frames))

    kind_history = history.get(kind)
    if kind_history is None:
        kind_history = history[kind] = deque(maxlen=MAX_HISTORY_LENGTH)
    kind_history.append(info)
    cutoff = info.timestamp - HISTORY_DURATION
    while kind_history and kind_history[0].timestamp < cutoff:
        kind_history.popleft()
    HISTORY_SIZE_GAUGE.labels(kind=kind).set(len(kind_history))

    return info


def record_discard(reason: str) -> None:
    """Counts a line that produced no frame."""
    discarded[reason] = discarded.get(reason, 0) + 1


def get_history(
    kind: str, since: Optional[float] = None, limit: Optional[int] = None
) -> Optional[List[FrameInfo]]:
    """
    Returns the stored history for a kind, or None if the kind was never seen.

    Args:
        kind: Measurement kind tag.
        since: Only return entries newer than this Unix timestamp.
        limit: Only return the newest ``limit`` entries.
    """
    if kind not in history:
        return None
    entries = list(history[kind])
    if since is not None:
        entries = [e for e in entries if e.timestamp > since]
    if limit is not None:
        entries = entries[-limit:]
    return entries


def reset() -> None:
    """Zeroes the frame counter and drops all stored frames and discard counts."""
    global frame_count

    frame_count = 0
    for kind in history:
        HISTORY_SIZE_GAUGE.labels(kind=kind).set(0)
    latest_frames.clear()
    history.clear()
    discarded.clear()
    KIND_COUNT.set(0)
    logger.info("Frame state reset.")
