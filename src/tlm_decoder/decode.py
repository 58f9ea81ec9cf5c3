"""
tlm_decoder.decode

Core decoding logic for line-oriented telemetry output, turning one raw text
line into a TelemetryFrame (or the NoFrame variant when the line carries no
recognized measurement).

Functions:
    - strip_metadata: Removes bracketed metadata segments such as timestamps
    - tokenize: Cleans a line and splits it on single spaces
    - decode_line: Decodes one line into a TelemetryFrame or NoFrame
    - recognized_kinds: Lists the kind tags understood by decode_line

Notes:
    - Lines look like ``[<metadata>] <sequence> <kind> <payload...>``.
    - The sequence token is only used to locate the kind; it is never emitted.
    - Splitting is on the ASCII space only, so runs of spaces yield empty tokens.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import List, NamedTuple, Union

from common.models import DataPoint, FrameGroup, NoFrame, TelemetryFrame

# A "[...]" segment with no "[" or "]" inside it.
BRACKETED_SEGMENT = re.compile(r"\[[^\[\]]*\]")

DEFAULT_KIND = "null"
MIN_TOKENS = 3
PAYLOAD_INDEX = 2


class PayloadMode(str, Enum):
    """How the payload is built from the tokens following the kind tag."""

    TEXT = "text"  # all remaining tokens joined with a single space
    SCALAR = "scalar"  # the single token right after the kind tag


class KindRule(NamedTuple):
    mode: PayloadMode
    plottable: bool


_TEXT = KindRule(PayloadMode.TEXT, False)
_SCALAR = KindRule(PayloadMode.SCALAR, True)

# Tags are matched case-sensitively; "Icrms" really is capitalized upstream.
KIND_TABLE = MappingProxyType(
    {
        "qidata": _TEXT,
        "state": _TEXT,
        "freq": _SCALAR,
        "dut": _SCALAR,
        "dcvolt": _SCALAR,
        "Icrms": _SCALAR,
        "ptx": _SCALAR,
        "prx": _SCALAR,
        "ppad": _SCALAR,
        "pfor": _SCALAR,
        "temp": _SCALAR,
    }
)


def recognized_kinds() -> List[str]:
    """Return the recognized kind tags in table order."""
    return list(KIND_TABLE)


def strip_metadata(line: str) -> str:
    """
    Remove every well-formed, non-nested ``[...]`` segment from ``line``.

    An opening bracket without a matching closing bracket is left in place.
    """
    return BRACKETED_SEGMENT.sub("", line)


def tokenize(line: str) -> List[str]:
    """
    Strip metadata, trim surrounding whitespace and split on single spaces.

    Empty tokens produced by consecutive spaces are kept, and an empty line
    yields a single empty token.
    """
    return strip_metadata(line).strip().split(" ")


def _build_payload(rule: KindRule, tokens: List[str]) -> str:
    if rule.mode is PayloadMode.TEXT:
        return " ".join(tokens[PAYLOAD_INDEX:])
    return tokens[PAYLOAD_INDEX]


def decode_line(line: str) -> Union[TelemetryFrame, NoFrame]:
    """
    Decode one raw telemetry line.

    Returns a single-group, single-point TelemetryFrame when the cleaned line
    has at least three tokens and its second token is a recognized kind.
    Every other input yields NoFrame; this function never raises.

    Example:
        >>> decode_line("[2020-10-18 09:01:50.141] 110 freq 50.5").to_wire()
        {'t': 'node', 'g': [{'t': 'freq', 'd': [{'v': '50.5', 'g': True}]}]}
    """
    tokens = tokenize(line)
    kind = tokens[1] if len(tokens) > 1 else DEFAULT_KIND

    if len(tokens) < MIN_TOKENS:
        return NoFrame(reason=NoFrame.TOO_FEW_TOKENS)

    rule = KIND_TABLE.get(kind)
    if rule is None:
        return NoFrame(reason=NoFrame.UNKNOWN_KIND)

    point = DataPoint(value=_build_payload(rule, tokens), plottable=rule.plottable)
    return TelemetryFrame(groups=[FrameGroup(kind=kind, points=[point])])
