"""Admin Insight Routes — analytics sections and giving forecast.

Invariants:
    - Analytics requires staff; giving forecast requires admin
    - Unknown analytics section → 400
    - At-risk inactivity uses the all-time latest activity; 999 only for never active
    - current_mrr sums active recurring gifts of any age; history takes every status
    - Forecast insight failures degrade to ""
"""

from datetime import timedelta

from ministry.core.dates import utcnow
from ministry.core.errors import AnthropicAPIError
from ministry.models.activity import MemberActivity
from ministry.models.donation import Donation

from tests.services.fakes import auth_headers


async def test_member_section(client, test_db, staff, make_member):
    active = await make_member(tier="partner")
    test_db.add(MemberActivity(member_id=active.id, activity_type="devotional_read"))
    await test_db.commit()

    res = await client.get(
        "/api/v1/admin/analytics", params={"section": "members"}, headers=auth_headers(staff),
    )
    body = res.json()
    assert set(body) == {"generated_at", "members"}
    assert body["members"]["total"] == 2
    assert body["members"]["active_members"] == 1
    assert body["members"]["engagement_rate"] == 50
    assert body["members"]["by_tier"]["partner"] == 1


async def test_long_idle_member_is_at_risk_not_never_active(client, test_db, staff, make_member):
    idle = await make_member(first_name="Demas")
    test_db.add(MemberActivity(
        member_id=idle.id, activity_type="teaching_viewed",
        created_at=utcnow() - timedelta(days=100),
    ))
    await test_db.commit()

    res = await client.get(
        "/api/v1/admin/analytics", params={"section": "members"}, headers=auth_headers(staff),
    )
    at_risk = {r["id"]: r for r in res.json()["members"]["at_risk"]}
    assert at_risk[str(idle.id)]["days_inactive"] == 100
    assert at_risk[str(idle.id)]["last_action"] == "teaching viewed"
    assert at_risk[str(staff.id)]["days_inactive"] == 999


async def test_all_sections(client, staff):
    res = await client.get("/api/v1/admin/analytics", headers=auth_headers(staff))
    assert {"members", "engagement", "giving", "content"} <= set(res.json())


async def test_unknown_section_is_400(client, staff):
    res = await client.get(
        "/api/v1/admin/analytics", params={"section": "weather"}, headers=auth_headers(staff),
    )
    assert res.status_code == 400


async def test_analytics_requires_staff(client, member):
    res = await client.get("/api/v1/admin/analytics", headers=auth_headers(member))
    assert res.status_code == 403


async def test_forecast_mrr_and_insights(client, test_db, admin, fake_llm):
    now = utcnow()
    test_db.add_all([
        Donation(amount=100, is_recurring=True, status="active", created_at=now - timedelta(days=60)),
        Donation(amount=40, is_recurring=True, status="cancelled", created_at=now - timedelta(days=3)),
        Donation(amount=25, is_recurring=True, created_at=now - timedelta(days=2)),
        Donation(amount=500, is_recurring=False, created_at=now - timedelta(days=2)),
    ])
    await test_db.commit()
    fake_llm.replies.append("Giving is steady.")

    res = await client.get(
        "/api/v1/admin/giving-forecast", params={"months": 3}, headers=auth_headers(admin),
    )
    body = res.json()
    assert res.status_code == 200
    assert body["current"]["mrr"] == 100
    assert len(body["forecasts"]) == 3
    assert body["insights"] == "Giving is steady."


async def test_forecast_history_includes_every_status(client, test_db, admin):
    now = utcnow()
    test_db.add_all([
        Donation(amount=100, is_recurring=True, status="active", created_at=now),
        Donation(amount=50, is_recurring=False, status="pending", created_at=now),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/admin/giving-forecast", headers=auth_headers(admin))
    body = res.json()
    assert body["current"]["mrr"] == 100
    assert sum(m["count"] for m in body["historical"]) == 2


async def test_forecast_survives_llm_outage(client, admin, fake_llm):
    fake_llm.error = AnthropicAPIError("down", "api_error")

    res = await client.get("/api/v1/admin/giving-forecast", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["insights"] == ""


async def test_forecast_requires_admin(client, staff):
    res = await client.get("/api/v1/admin/giving-forecast", headers=auth_headers(staff))
    assert res.status_code == 403


async def test_forecast_months_bounded(client, admin):
    res = await client.get(
        "/api/v1/admin/giving-forecast", params={"months": 25}, headers=auth_headers(admin),
    )
    assert res.status_code == 400
