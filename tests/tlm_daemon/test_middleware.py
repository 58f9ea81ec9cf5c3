"""
Tests for the Prometheus HTTP middleware.

Verifies that `prometheus_http_middleware` records request counts (by
method, endpoint and status code) and latency (by method and endpoint), and
that parameterized routes are labeled by their path template.
"""

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from tlm_daemon.metrics import HTTP_LATENCY, HTTP_REQUESTS
from tlm_daemon.middleware import prometheus_http_middleware


@pytest.fixture(autouse=True)
def reset_metrics():
    HTTP_REQUESTS.clear()
    HTTP_LATENCY.clear()


def get_histogram_count(histogram, **labels):
    for metric in histogram.collect():
        for sample in metric.samples:
            if sample.name.endswith("_count") and all(
                sample.labels.get(k) == v for k, v in labels.items()
            ):
                return sample.value
    return 0


@pytest.fixture
def client():
    app = FastAPI()

    @app.middleware("http")
    async def metrics_mw(request: Request, call_next):
        return await prometheus_http_middleware(request, call_next)

    @app.get("/plain")
    async def plain():
        return {"ok": True}

    @app.get("/frames/{kind}")
    async def by_kind(kind: str):
        if kind == "missing":
            raise HTTPException(status_code=404, detail="Kind not found")
        return {"kind": kind}

    return TestClient(app)


def test_records_count_and_latency(client):
    assert client.get("/plain").status_code == 200

    assert (
        HTTP_REQUESTS.labels(method="GET", endpoint="/plain", status_code="200")._value.get()
        == 1
    )
    assert get_histogram_count(HTTP_LATENCY, method="GET", endpoint="/plain") == 1


def test_parameterized_paths_share_a_label(client):
    client.get("/frames/freq")
    client.get("/frames/temp")
    client.get("/frames/missing")

    ok = HTTP_REQUESTS.labels(method="GET", endpoint="/frames/{kind}", status_code="200")
    not_found = HTTP_REQUESTS.labels(method="GET", endpoint="/frames/{kind}", status_code="404")
    assert ok._value.get() == 2
    assert not_found._value.get() == 1
    assert get_histogram_count(HTTP_LATENCY, method="GET", endpoint="/frames/{kind}") == 3


def test_unmatched_path_uses_raw_url(client):
    assert client.get("/nowhere").status_code == 404
    assert (
        HTTP_REQUESTS.labels(method="GET", endpoint="/nowhere", status_code="404")._value.get()
        == 1
    )
