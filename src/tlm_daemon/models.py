"""
Defines Pydantic models for API request/response validation and serialization.

These models are used throughout the FastAPI application to ensure data consistency
and provide clear API documentation for request bodies and response payloads.
Frames nested in these models serialize in the compact wire format.

Models:
    - FrameInfo: A decoded frame plus its frame number, receive time and source
    - LineRequest: Body carrying one raw telemetry line
    - DecodeResponse: Result of decoding a line without touching state
    - IngestResponse: Result of feeding a line into the processing pipeline
    - KindInfo: Description of a recognized measurement kind
"""

from typing import Optional

from pydantic import BaseModel, Field

from common.models import TelemetryFrame


class FrameInfo(BaseModel):
    """A decoded frame with the bookkeeping added when it was received."""

    frame_number: int
    timestamp: float
    source: str
    frame: TelemetryFrame

    @property
    def kind(self) -> Optional[str]:
        return self.frame.kind

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class LineRequest(BaseModel):
    """Carries one raw telemetry line, e.g. '[09:01:50] 110 freq 50.5'."""

    line: str = Field(..., description="Raw telemetry line, including any bracketed metadata.")


class DecodeResponse(BaseModel):
    """Result of decoding a single line."""

    decoded: bool
    frame: Optional[TelemetryFrame] = None
    reason: Optional[str] = Field(
        None, description="Why no frame was produced: 'too_few_tokens' or 'unknown_kind'."
    )


class IngestResponse(BaseModel):
    """Result of pushing a line through the processing pipeline."""

    accepted: bool
    frame_info: Optional[FrameInfo] = None
    reason: Optional[str] = None


class KindInfo(BaseModel):
    """Describes a recognized measurement kind."""

    kind: str
    payload_mode: str = Field(
        ..., description="'text' joins all payload tokens, 'scalar' keeps the first one."
    )
    plottable: bool
