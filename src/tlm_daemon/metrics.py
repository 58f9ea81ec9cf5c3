"""
Defines Prometheus metrics for monitoring the tlm2api application.

This module centralizes the definition of all Counter, Gauge, and Histogram
metrics used to track line ingestion, decoding outcomes, the frame store,
API requests and WebSocket connections.
"""

from prometheus_client import Counter, Gauge, Histogram

LINE_COUNTER = Counter("tlm2api_lines_total", "Total telemetry lines received")
FRAMES_DECODED = Counter(
    "tlm2api_frames_decoded_total", "Total lines decoded into frames", ["kind"]
)
LINES_DISCARDED = Counter(
    "tlm2api_lines_discarded_total", "Total lines that produced no frame", ["reason"]
)
DECODE_LATENCY = Histogram(
    "tlm2api_decode_latency_seconds", "Time spent decoding & dispatching lines"
)
SOURCE_ERRORS = Counter("tlm2api_source_errors_total", "Total line source read errors")
WS_CLIENTS = Gauge("tlm2api_ws_clients", "Active WebSocket clients")
WS_MESSAGES = Counter("tlm2api_ws_messages_total", "Total WebSocket messages sent")
KIND_COUNT = Gauge("tlm2api_kind_count", "Number of kinds with a latest frame")
HISTORY_SIZE_GAUGE = Gauge("tlm2api_history_size", "Number of stored frames per kind", ["kind"])
HTTP_REQUESTS = Counter(
    "tlm2api_http_requests_total", "Total HTTP requests", ["method", "endpoint", "status_code"]
)
HTTP_LATENCY = Histogram(
    "tlm2api_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
