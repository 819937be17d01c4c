"""
File: tests/test_smoke.py
Purpose: Minimal smoke test to ensure the app starts and /health works.
"""

from datetime import datetime

from fastapi.testclient import TestClient

from connector.config import Settings
from connector.main import app, create_app


def test_health_ok():
    """Verify health endpoint returns Healthy with a UTC timestamp."""
    c = TestClient(app)
    r = c.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "Healthy"
    assert datetime.fromisoformat(body["timestamp"]).utcoffset().total_seconds() == 0


def test_lifespan_starts_and_exposes_metrics():
    with TestClient(create_app(Settings(LOG_LEVEL="WARNING"))) as c:
        assert c.app.state.http is not None
        c.get("/health")
        r = c.get("/metrics")
        assert r.status_code == 200
        assert "http_requests_total" in r.text
    assert c.app.state.http is None


def test_metrics_label_by_route_template():
    with TestClient(create_app(Settings(LOG_LEVEL="WARNING"))) as c:
        c.get("/health")
        assert c.get("/no-such-path-8f3a").status_code == 404
        text = c.get("/metrics").text
    assert 'route="/health"' in text
    assert 'route="unmatched"' in text
    assert "no-such-path-8f3a" not in text


def test_main_runs_uvicorn_with_configured_address(monkeypatch):
    import uvicorn
    from connector import main as main_module

    seen = {}
    monkeypatch.setattr(uvicorn, "run", lambda app, host, port: seen.update(app=app, host=host, port=port))
    monkeypatch.setattr(main_module.app.state, "settings", Settings(HOST="127.0.0.1", PORT=9123))
    main_module.main()
    assert seen == {"app": main_module.app, "host": "127.0.0.1", "port": 9123}
