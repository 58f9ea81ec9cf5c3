"""
common

This package contains shared models used across the tlm2api project.

Modules:
    - models: Pydantic models for decoded telemetry frames and the no-frame result
"""

from .models import DataPoint, FrameGroup, NoFrame, TelemetryFrame

__all__ = ["DataPoint", "FrameGroup", "NoFrame", "TelemetryFrame"]
