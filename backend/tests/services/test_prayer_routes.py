"""Prayer Wall Routes — submit, moderate, list, pray.

Invariants:
    - Submissions start pending and stay off the wall until approved
    - Anonymous requests hide the requester
    - A member's prayer counts once; anonymous callers always count
"""

from uuid import uuid4

from ministry.models.prayer import PrayerRequest

from tests.services.fakes import auth_headers


async def _approved(test_db, **fields) -> PrayerRequest:
    prayer = PrayerRequest(
        request_text=fields.pop("request_text", "Healing for my mother"),
        status="active",
        **fields,
    )
    test_db.add(prayer)
    await test_db.commit()
    return prayer


async def test_submission_is_pending_until_approved(client, staff):
    created = await client.post("/api/v1/prayer", json={"request_text": "Guidance please"})
    assert created.status_code == 201
    assert created.json()["status"] == "pending"

    wall = await client.get("/api/v1/prayer")
    assert wall.json()["prayers"] == []

    approved = await client.post(
        f"/api/v1/admin/prayer/{created.json()['id']}/status",
        json={"action": "approve"}, headers=auth_headers(staff),
    )
    assert approved.json()["status"] == "active"
    wall = await client.get("/api/v1/prayer")
    assert [p["request_text"] for p in wall.json()["prayers"]] == ["Guidance please"]


async def test_blank_request_rejected(client):
    res = await client.post("/api/v1/prayer", json={"request_text": "   "})
    assert res.status_code == 400


async def test_anonymous_requester_hidden(client, test_db):
    await _approved(test_db, requester_name="Maria", is_anonymous=True)

    wall = await client.get("/api/v1/prayer")
    prayer = wall.json()["prayers"][0]
    assert prayer["requester"] == "Anonymous"
    assert "member_id" not in prayer


async def test_member_prays_once(client, test_db, member):
    prayer = await _approved(test_db)
    headers = auth_headers(member)

    first = await client.post(f"/api/v1/prayer/{prayer.id}/pray", headers=headers)
    assert first.json() == {"success": True, "already_prayed": False, "prayer_count": 1}
    again = await client.post(f"/api/v1/prayer/{prayer.id}/pray", headers=headers)
    assert again.json()["already_prayed"] is True
    assert again.json()["prayer_count"] == 1


async def test_anonymous_prayers_always_count(client, test_db):
    prayer = await _approved(test_db)

    await client.post(f"/api/v1/prayer/{prayer.id}/pray")
    res = await client.post(f"/api/v1/prayer/{prayer.id}/pray")
    assert res.json()["prayer_count"] == 2


async def test_pray_for_unknown_request_is_404(client):
    res = await client.post(f"/api/v1/prayer/{uuid4()}/pray")
    assert res.status_code == 404


async def test_sort_and_filters(client, test_db):
    await _approved(test_db, request_text="quiet", prayer_count=1)
    await _approved(test_db, request_text="popular", prayer_count=9, category="health")
    await _approved(test_db, request_text="urgent", is_urgent=True)

    most = await client.get("/api/v1/prayer", params={"sort": "most-prayed"})
    assert most.json()["prayers"][0]["request_text"] == "popular"
    urgent = await client.get("/api/v1/prayer", params={"sort": "urgent"})
    assert urgent.json()["prayers"][0]["request_text"] == "urgent"
    health = await client.get("/api/v1/prayer", params={"category": "health"})
    assert [p["request_text"] for p in health.json()["prayers"]] == ["popular"]

    page = await client.get("/api/v1/prayer", params={"limit": 2})
    assert page.json()["pagination"] == {"page": 1, "limit": 2, "total": 3, "has_more": True}


async def test_mark_answered_with_testimony(client, test_db, staff):
    prayer = await _approved(test_db)

    res = await client.post(
        f"/api/v1/admin/prayer/{prayer.id}/status",
        json={"action": "answered", "testimony": "She recovered"},
        headers=auth_headers(staff),
    )
    assert res.json()["is_answered"] is True
    answered = await client.get("/api/v1/prayer", params={"answered": True})
    assert answered.json()["prayers"][0]["testimony"] == "She recovered"


async def test_moderation_requires_staff(client, test_db, member):
    prayer = await _approved(test_db)
    res = await client.post(
        f"/api/v1/admin/prayer/{prayer.id}/status",
        json={"action": "archive"}, headers=auth_headers(member),
    )
    assert res.status_code == 403
