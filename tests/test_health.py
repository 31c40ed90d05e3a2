"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' against a live database
  - No authentication required
  - Degraded status when the database ping fails
"""

from __future__ import annotations


def test_health_returns_200_with_components(client):
    """Health endpoint returns 200 with status, version, and components."""
    resp = client.client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_no_auth_required(client):
    """The health route is public."""
    resp = client.client.get("/api/v1/health", headers={})
    assert resp.status_code == 200


def test_health_degraded_when_database_fails(client, monkeypatch):
    """A failing database ping reports degraded status."""
    db = client.client.app.state.db

    async def broken_ping():
        return False

    monkeypatch.setattr(db, "ping", broken_ping)
    data = client.client.get("/api/v1/health").json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"
