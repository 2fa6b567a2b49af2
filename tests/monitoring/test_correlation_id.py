from fastapi.testclient import TestClient

from app.main import app


def test_correlation_id_header_present():
    client = TestClient(app)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.headers.get("X-Request-ID") is not None


def test_incoming_correlation_id_is_propagated():
    client = TestClient(app)
    r = client.get("/widget/anything", headers={"X-Request-ID": "req-123"})
    assert r.headers.get("X-Request-ID") == "req-123"
