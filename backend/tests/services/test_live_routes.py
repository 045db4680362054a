"""Live Service Routes — current/next lookup and attendance."""

from datetime import timedelta
from uuid import uuid4

from ministry.core.dates import utcnow
from ministry.models.live import LiveService

from tests.services.fakes import auth_headers


async def test_no_service_returns_null(client):
    res = await client.get("/api/v1/live/service")
    assert res.json() == {"service": None}


async def test_next_scheduled_when_nothing_live(client, test_db):
    now = utcnow()
    test_db.add_all([
        LiveService(title="Later", scheduled_start=now + timedelta(days=5)),
        LiveService(title="Sooner", scheduled_start=now + timedelta(days=1)),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/live/service")
    service = res.json()["service"]
    assert service["title"] == "Sooner"
    assert "current_attendees" not in service


async def test_join_and_leave_updates_attendance(client, test_db, member):
    live = LiveService(
        title="Sunday", status="live",
        scheduled_start=utcnow(), actual_start=utcnow(),
    )
    test_db.add(live)
    await test_db.commit()
    headers = auth_headers(member)

    joined = await client.post(
        "/api/v1/live/service",
        json={"service_id": str(live.id), "action": "join"}, headers=headers,
    )
    assert joined.json()["success"] is True
    current = await client.get("/api/v1/live/service", headers=headers)
    assert current.json()["service"]["current_attendees"] == 1
    assert current.json()["service"]["user_attending"] is True

    await client.post(
        "/api/v1/live/service",
        json={"service_id": str(live.id), "action": "leave"}, headers=headers,
    )
    after = await client.get("/api/v1/live/service", headers=headers)
    assert after.json()["service"]["current_attendees"] == 0
    assert after.json()["service"]["user_attending"] is False


async def test_unknown_action_is_400(client, test_db, member):
    live = LiveService(title="Sunday", scheduled_start=utcnow())
    test_db.add(live)
    await test_db.commit()

    res = await client.post(
        "/api/v1/live/service",
        json={"service_id": str(live.id), "action": "wave"}, headers=auth_headers(member),
    )
    assert res.status_code == 400


async def test_unknown_service_id_is_404(client):
    res = await client.get("/api/v1/live/service", params={"id": str(uuid4())})
    assert res.status_code == 404
