"""
tlm_decoder
===========

Library for decoding line-oriented telemetry output into structured frames.

This package contains the core decoding logic: it strips bracketed metadata
from a raw line, splits it into tokens and classifies it by its kind tag
using a fixed table. It performs no I/O and keeps no state between calls.

Functions:
    - decode_line: Convert one raw line into a TelemetryFrame or NoFrame
    - tokenize: Clean a line and split it into tokens
    - strip_metadata: Remove bracketed metadata segments
    - recognized_kinds: List the kind tags understood by the decoder
"""

from .decode import (
    KIND_TABLE,
    KindRule,
    PayloadMode,
    decode_line,
    recognized_kinds,
    strip_metadata,
    tokenize,
)

__all__ = [
    "KIND_TABLE",
    "KindRule",
    "PayloadMode",
    "decode_line",
    "recognized_kinds",
    "strip_metadata",
    "tokenize",
]
