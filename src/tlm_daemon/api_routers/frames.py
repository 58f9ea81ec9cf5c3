"""
Defines FastAPI APIRouter for decoding lines and reading decoded frames.

This module includes routes for:
- Listing the recognized measurement kinds.
- Decoding a single line without touching application state.
- Ingesting a line into the processing pipeline (HTTP line source).
- Reading the latest frame per kind and the per-kind history.
- Resetting the frame counter and stored frames.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from tlm_daemon import app_state
from tlm_daemon.line_processing import process_line, strip_line_terminator
from tlm_daemon.models import DecodeResponse, FrameInfo, IngestResponse, KindInfo, LineRequest
from tlm_decoder import KIND_TABLE, decode_line

logger = logging.getLogger(__name__)

api_router_frames = APIRouter()

HTTP_SOURCE = "http"


@api_router_frames.get("/kinds", response_model=List[KindInfo])
async def list_kinds():
    """Return every recognized measurement kind with its payload rule."""
    return [
        KindInfo(kind=kind, payload_mode=rule.mode.value, plottable=rule.plottable)
        for kind, rule in KIND_TABLE.items()
    ]


@api_router_frames.post("/decode", response_model=DecodeResponse)
async def decode(request: LineRequest):
    """
    Decode one line and return the frame, or the reason no frame was produced.
    Nothing is stored or broadcast.
    """
    result = decode_line(request.line)
    if not result:
        return DecodeResponse(decoded=False, reason=result.reason)
    return DecodeResponse(decoded=True, frame=result)


@api_router_frames.post("/ingest", response_model=IngestResponse)
async def ingest(request: LineRequest):
    """
    Push one line through the processing pipeline as if it had been read
    from a line source: decoded frames are stored and broadcast.
    """
    line = strip_line_terminator(request.line)
    if not line:
        return IngestResponse(accepted=False, reason="empty_line")

    result = process_line(line, source=HTTP_SOURCE, loop=asyncio.get_running_loop())
    if not result:
        return IngestResponse(accepted=False, reason=result.reason)
    return IngestResponse(accepted=True, frame_info=result)


@api_router_frames.get("/frames", response_model=Dict[str, FrameInfo])
async def list_frames(plottable: Optional[bool] = Query(None)):
    """
    Return the latest frame for every kind seen so far.

    Args:
        plottable: Optional filter on the plottable flag of the frame's point.
    """
    if plottable is None:
        return app_state.latest_frames
    return {
        kind: info
        for kind, info in app_state.latest_frames.items()
        if info.frame.groups[0].points[0].plottable == plottable
    }


@api_router_frames.post("/frames/reset")
async def reset_frames():
    """Zero the frame counter and drop all stored frames."""
    app_state.reset()
    return {"status": "ok", "frame_count": app_state.frame_count}


@api_router_frames.get("/frames/{kind}", response_model=FrameInfo)
async def get_frame(kind: str):
    """
    Return the latest frame for one kind.

    Raises:
        HTTPException: If no frame of this kind has been decoded.
    """
    info = app_state.latest_frames.get(kind)
    if info is None:
        raise HTTPException(status_code=404, detail="Kind not found")
    return info


@api_router_frames.get("/frames/{kind}/history", response_model=List[FrameInfo])
async def get_frame_history(
    kind: str,
    since: Optional[float] = Query(
        None, description="Unix timestamp; only entries newer than this"
    ),
    limit: Optional[int] = Query(1000, ge=1, description="Max number of frames to return"),
):
    """
    Return the stored frames of one kind, oldest first.

    Raises:
        HTTPException: If no frame of this kind has been decoded.
    """
    entries = app_state.get_history(kind, since=since, limit=limit)
    if entries is None:
        raise HTTPException(status_code=404, detail="Kind not found")
    return entries
