"""Gamification Routes — summary, awards, first-action badges, leaderboard."""

from tests.services.fakes import auth_headers


async def test_summary_for_new_member(client, member):
    res = await client.get("/api/v1/member/gamification", headers=auth_headers(member))
    body = res.json()
    assert body["stats"]["total_points"] == 0
    assert body["level"]["current"]["name"] == "Seeker"
    assert body["badges"]["earned"] == []
    assert body["leaderboard_position"] == 0


async def test_first_prayer_awards_badge_once(client, member):
    headers = auth_headers(member)
    first = await client.post(
        "/api/v1/member/gamification", json={"action": "prayer_submitted"}, headers=headers,
    )
    assert first.json()["points_added"] == 10
    assert [b["id"] for b in first.json()["new_badges"]] == ["first_prayer"]
    assert first.json()["total_points"] == 60

    second = await client.post(
        "/api/v1/member/gamification", json={"action": "prayer_submitted"}, headers=headers,
    )
    assert second.json()["new_badges"] == []
    assert second.json()["current_streak"] == 1

    summary = await client.get("/api/v1/member/gamification", headers=headers)
    assert summary.json()["leaderboard_position"] == 1
    assert [b["id"] for b in summary.json()["badges"]["earned"]] == ["first_prayer"]


async def test_custom_points_override(client, member):
    res = await client.post(
        "/api/v1/member/gamification",
        json={"action": "check_in", "points": 40}, headers=auth_headers(member),
    )
    assert res.json()["points_added"] == 40
