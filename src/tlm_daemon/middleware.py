"""
Contains custom FastAPI middleware for the tlm2api application.

Middleware functions in this module intercept HTTP requests for metrics
collection.
"""

import time

from fastapi import Request

from tlm_daemon.metrics import HTTP_LATENCY, HTTP_REQUESTS


def _endpoint_label(request: Request) -> str:
    # Prefer the route template ("/api/frames/{kind}") so per-kind URLs share one label.
    route = request.scope.get("route")
    return getattr(route, "path_format", None) or request.url.path


async def prometheus_http_middleware(request: Request, call_next):
    """
    Records Prometheus count and latency metrics for each HTTP request,
    labeled by method, endpoint, and (for the count) status code.

    Args:
        request: The incoming FastAPI Request object.
        call_next: A function to call to process the request and get the response.

    Returns:
        The response object from the next handler in the chain.
    """
    start = time.perf_counter()
    response = await call_next(request)
    latency = time.perf_counter() - start

    endpoint = _endpoint_label(request)
    method = request.method

    HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status_code=response.status_code).inc()
    HTTP_LATENCY.labels(method=method, endpoint=endpoint).observe(latency)
    return response
