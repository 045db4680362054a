"""Health Routes — liveness and readiness probes."""

import ministry.infrastructure.database as db_module


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_reports_database_and_providers(client):
    res = await client.get("/api/v1/health/ready")
    body = res.json()
    assert res.status_code == 200
    assert body["checks"]["database"] == "healthy"
    assert body["checks"]["database_latency_ms"] >= 0
    assert body["providers"] == {"email": False, "sms": False}


async def test_readiness_without_database_is_503(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"
