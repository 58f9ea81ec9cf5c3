"""
common.models

Shared Pydantic models for use across tlm2api modules.

TelemetryFrame:
    One decoded telemetry record. Serializes to the compact wire format
    ``{"t": "node", "g": [{"t": kind, "d": [{"v": value, "g": plottable}]}]}``
    expected by downstream dashboards.

FrameGroup / DataPoint:
    The nested group and point of a frame. The decoder always emits exactly
    one group holding exactly one point.

NoFrame:
    The explicit "nothing to emit" result of the decoder, carrying the reason
    the line was not decoded. It is falsy and serializes to ``{}``.
"""

from typing import Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DataPoint(BaseModel):
    """
    DataPoint

    A single measurement inside a frame group.

    Attributes:
        value (str | float): Raw numeric-looking token for plottable kinds,
            joined text for textual kinds. Wire name ``v``.
        plottable (bool): Whether the value can be graphed. Wire name ``g``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    value: Union[str, float] = Field(alias="v")
    plottable: bool = Field(alias="g")


class FrameGroup(BaseModel):
    """
    FrameGroup

    Groups the points of one measurement kind.

    Attributes:
        kind (str): Measurement-kind tag, e.g. 'freq' or 'state'. Wire name ``t``.
        points (List[DataPoint]): Points of this kind. Wire name ``d``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str = Field(alias="t")
    points: List[DataPoint] = Field(alias="d")


class TelemetryFrame(BaseModel):
    """
    TelemetryFrame

    One decoded telemetry record.

    Attributes:
        type (str): Always 'node'. Wire name ``t``.
        groups (List[FrameGroup]): Frame groups. Wire name ``g``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["node"] = Field("node", alias="t")
    groups: List[FrameGroup] = Field(alias="g")

    @property
    def kind(self) -> Optional[str]:
        """Kind tag of the first group, or None for a frame without groups."""
        return self.groups[0].kind if self.groups else None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "TelemetryFrame":
        return cls.model_validate(data)


class NoFrame(BaseModel):
    """
    NoFrame

    Returned by the decoder when a line does not produce a frame.

    Attributes:
        reason (str): 'too_few_tokens' or 'unknown_kind'.
    """

    model_config = ConfigDict(frozen=True)

    TOO_FEW_TOKENS: ClassVar[str] = "too_few_tokens"
    UNKNOWN_KIND: ClassVar[str] = "unknown_kind"

    reason: str

    def __bool__(self) -> bool:
        return False

    def to_wire(self) -> Dict[str, Any]:
        return {}
