"""
Integration tests for the tlm2api application.

These tests use the session-wide FastAPI TestClient (see conftest.py) against
the fully assembled application, so a line travels from the HTTP ingest
endpoint through the decoder and the frame store and back out through the
read endpoints and the data WebSocket.
"""

import json


def test_healthz_endpoint(client):
    """The file line source is disabled for tests, so the daemon reports ok."""
    response = client.get("/api/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "features": {}}


def test_ingest_then_read_back(client, sample_lines):
    assert client.get("/api/readyz").status_code == 503

    for key in ("qidata", "freq", "unknown", "short"):
        client.post("/api/ingest", json={"line": sample_lines[key]})

    assert client.get("/api/readyz").json() == {"status": "ready", "frames": 2}

    frame = client.get("/api/frames/qidata").json()["frame"]
    assert frame == {"t": "node", "g": [{"t": "qidata", "d": [{"v": "01 72 73", "g": False}]}]}

    status = client.get("/api/status/application").json()
    assert status["kinds_seen"] == ["freq", "qidata"]
    assert status["discarded_lines"] == {"unknown_kind": 1, "too_few_tokens": 1}


def test_ingested_frame_is_pushed_to_websocket(client, sample_lines):
    with client.websocket_connect("/api/ws") as ws_conn:
        response = client.post("/api/ingest", json={"line": sample_lines["Icrms"]})
        assert response.json()["accepted"] is True
        message = json.loads(ws_conn.receive_text())

    assert message["frame_number"] == 1
    assert message["source"] == "http"
    assert message["frame"] == {
        "t": "node",
        "g": [{"t": "Icrms", "d": [{"v": "0.42", "g": True}]}],
    }


def test_decode_matches_ingest(client, sample_lines):
    decoded = client.post("/api/decode", json={"line": sample_lines["state"]}).json()["frame"]
    ingested = client.post("/api/ingest", json={"line": sample_lines["state"]}).json()
    assert ingested["frame_info"]["frame"] == decoded
