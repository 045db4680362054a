"""Member & Admin Member Routes — auth guards, role/tier edits, portal data.

Invariants:
    - No token → 401; token without a member row → 404; low role → 403
    - Staff may assign free/member/partner only, and only to members already in
      that range; admins may assign any role
    - Tier changes require admin
    - Notifications are private to their owner
"""

from uuid import uuid4

from ministry.core.domain_types import ActivityType
from ministry.models.member import Member
from ministry.models.notification import Notification
from ministry.models.season import Season

from tests.services.fakes import auth_headers


# -- Auth ----------------------------------------------------------------------


async def test_missing_token_is_401(client):
    res = await client.get("/api/v1/member/me")
    assert res.status_code == 401


async def test_garbage_token_is_401(client):
    res = await client.get(
        "/api/v1/member/me", headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert res.status_code == 401


async def test_token_without_member_row_is_404(client):
    ghost = Member(user_id="ghost-user", email="ghost@example.org")
    res = await client.get("/api/v1/member/me", headers=auth_headers(ghost))
    assert res.status_code == 404


async def test_member_cannot_list_members(client, member):
    res = await client.get("/api/v1/admin/members", headers=auth_headers(member))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


# -- Admin ---------------------------------------------------------------------


async def test_staff_lists_and_searches_members(client, staff, make_member):
    await make_member(first_name="Priscilla", tier="partner")
    await make_member(first_name="Aquila")

    res = await client.get(
        "/api/v1/admin/members", params={"search": "prisc"}, headers=auth_headers(staff),
    )
    body = res.json()
    assert res.status_code == 200
    assert [m["first_name"] for m in body["members"]] == ["Priscilla"]
    assert body["stats"]["total"] == 3
    assert body["stats"]["by_tier"]["partner"] == 1


async def test_staff_can_promote_to_partner(client, staff, member):
    res = await client.patch(
        f"/api/v1/admin/members/{member.id}/role",
        json={"role": "partner"}, headers=auth_headers(staff),
    )
    assert res.status_code == 200
    assert res.json()["role"] == "partner"


async def test_staff_cannot_mint_admin(client, staff, member):
    res = await client.patch(
        f"/api/v1/admin/members/{member.id}/role",
        json={"role": "admin"}, headers=auth_headers(staff),
    )
    assert res.status_code == 403


async def test_staff_cannot_demote_admin_or_staff(client, staff, admin, make_member):
    peer = await make_member(role="staff")
    for target in (admin, peer):
        res = await client.patch(
            f"/api/v1/admin/members/{target.id}/role",
            json={"role": "free"}, headers=auth_headers(staff),
        )
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "FORBIDDEN"

    me = await client.get("/api/v1/member/me", headers=auth_headers(admin))
    assert me.json()["role"] == "admin"


async def test_admin_can_mint_staff(client, admin, member):
    res = await client.patch(
        f"/api/v1/admin/members/{member.id}/role",
        json={"role": "staff"}, headers=auth_headers(admin),
    )
    assert res.json()["role"] == "staff"


async def test_unknown_role_is_validation_error(client, admin, member):
    res = await client.patch(
        f"/api/v1/admin/members/{member.id}/role",
        json={"role": "bishop"}, headers=auth_headers(admin),
    )
    assert res.status_code == 400


async def test_tier_change_requires_admin(client, staff, admin, member):
    url = f"/api/v1/admin/members/{member.id}/tier"
    denied = await client.patch(url, json={"tier": "covenant"}, headers=auth_headers(staff))
    assert denied.status_code == 403

    res = await client.patch(url, json={"tier": "covenant"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["tier"] == "covenant"


async def test_role_change_for_unknown_member_is_404(client, admin):
    res = await client.patch(
        f"/api/v1/admin/members/{uuid4()}/role",
        json={"role": "member"}, headers=auth_headers(admin),
    )
    assert res.status_code == 404


# -- Portal --------------------------------------------------------------------


async def test_me_defaults_subscriptions_on(client, member):
    res = await client.get("/api/v1/member/me", headers=auth_headers(member))
    body = res.json()
    assert body["email"] == member.email
    assert body["spiritual_profile"] is None
    assert all(body["email_subscriptions"].values())


async def test_settings_partial_update(client, member):
    res = await client.patch(
        "/api/v1/member/settings",
        json={"bio": "Worship leader", "email_subscriptions": {"weekly_newsletter": False}},
        headers=auth_headers(member),
    )
    body = res.json()
    assert body["bio"] == "Worship leader"
    assert body["first_name"] == member.first_name
    assert body["email_subscriptions"]["weekly_newsletter"] is False
    assert body["email_subscriptions"]["announcements"] is True


async def test_log_activity_feeds_dashboard(client, member):
    headers = auth_headers(member)
    logged = await client.post(
        "/api/v1/member/activity",
        json={"activity_type": ActivityType.TEACHING_VIEWED.value, "resource_name": "Faith"},
        headers=headers,
    )
    assert logged.status_code == 201

    res = await client.get("/api/v1/member/dashboard/stats", headers=headers)
    stats = res.json()
    assert stats["total_content_consumed"] == 1
    assert stats["content_this_week"] == 1
    assert stats["seasons_joined"] == 0


async def test_join_season_once(client, test_db, member):
    season = Season(name="Harvest")
    test_db.add(season)
    await test_db.commit()
    headers = auth_headers(member)

    first = await client.post(
        "/api/v1/member/seasons/join", json={"season_id": str(season.id)}, headers=headers,
    )
    assert first.status_code == 201
    again = await client.post(
        "/api/v1/member/seasons/join", json={"season_id": str(season.id)}, headers=headers,
    )
    assert again.status_code == 409

    listed = await client.get("/api/v1/member/seasons", headers=headers)
    assert listed.json()["seasons"][0]["joined"] is True


async def test_notifications_private_and_markable(client, test_db, member, make_member):
    other = await make_member()
    mine = Notification(member_id=member.id, title="Hi", message="Welcome")
    theirs = Notification(member_id=other.id, title="Hi", message="Not yours")
    test_db.add_all([mine, theirs])
    await test_db.commit()
    headers = auth_headers(member)

    listed = await client.get("/api/v1/member/notifications", headers=headers)
    assert listed.json()["unread_count"] == 1
    assert len(listed.json()["notifications"]) == 1

    foreign = await client.post(
        f"/api/v1/member/notifications/{theirs.id}/read", headers=headers,
    )
    assert foreign.status_code == 404

    read = await client.post(f"/api/v1/member/notifications/{mine.id}/read", headers=headers)
    assert read.json()["is_read"] is True
    unread = await client.get(
        "/api/v1/member/notifications", params={"unread_only": True}, headers=headers,
    )
    assert unread.json()["notifications"] == []
