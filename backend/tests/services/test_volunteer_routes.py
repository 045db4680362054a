"""Volunteer Scheduler Routes — overview, manual scheduling, auto-scheduling.

Invariants:
    - One schedule per member per event (409 on repeat)
    - Auto-schedule fills at most the remaining gap, team members first
    - Every schedule notifies the volunteer
"""

from datetime import timedelta

from sqlalchemy import func, select

from ministry.core.dates import utcnow, weekday_name
from ministry.models.event import Event
from ministry.models.notification import Notification
from ministry.models.volunteer import (
    VolunteerAvailability, VolunteerTeam, VolunteerTeamMember,
)

from tests.services.fakes import auth_headers

URL = "/api/v1/admin/volunteer-scheduler"


async def _event(test_db, positions=2) -> Event:
    event = Event(
        title="Outreach", start_date=utcnow() + timedelta(days=7),
        volunteer_positions_needed=positions,
    )
    test_db.add(event)
    await test_db.commit()
    return event


async def _available(test_db, member, event):
    test_db.add(VolunteerAvailability(
        member_id=member.id, day_of_week=weekday_name(event.start_date),
    ))
    await test_db.commit()


async def test_overview_suggests_available_team_members(client, test_db, staff, make_member):
    event = await _event(test_db)
    volunteer = await make_member()
    team = VolunteerTeam(name="Hospitality")
    team.members = [VolunteerTeamMember(member_id=volunteer.id, role="lead")]
    test_db.add(team)
    await test_db.commit()
    await _available(test_db, volunteer, event)

    res = await client.get(URL, headers=auth_headers(staff))
    body = res.json()
    assert body["totals"]["teams"] == 1
    assert body["totals"]["open_positions"] == 2
    suggested = body["upcoming_events"][0]["available_volunteers"]
    assert [s["member_id"] for s in suggested] == [str(volunteer.id)]


async def test_schedule_once_and_notify(client, test_db, staff, member):
    event = await _event(test_db)
    payload = {
        "action": "schedule_volunteer",
        "event_id": str(event.id), "member_id": str(member.id), "position": "Usher",
    }

    first = await client.post(URL, json=payload, headers=auth_headers(staff))
    assert first.json()["schedule"]["position"] == "Usher"
    again = await client.post(URL, json=payload, headers=auth_headers(staff))
    assert again.status_code == 409

    notices = await test_db.scalar(
        select(func.count()).select_from(Notification)
        .where(Notification.member_id == member.id),
    )
    assert notices == 1


async def test_schedule_requires_ids(client, staff):
    res = await client.post(
        URL, json={"action": "schedule_volunteer"}, headers=auth_headers(staff),
    )
    assert res.status_code == 400


async def test_auto_schedule_fills_gap_team_first(client, test_db, staff, make_member):
    event = await _event(test_db, positions=1)
    outsider = await make_member()
    insider = await make_member()
    team = VolunteerTeam(name="Worship")
    team.members = [VolunteerTeamMember(member_id=insider.id)]
    test_db.add(team)
    await test_db.commit()
    await _available(test_db, outsider, event)
    await _available(test_db, insider, event)

    res = await client.post(
        URL, json={"action": "auto_schedule", "event_id": str(event.id)},
        headers=auth_headers(staff),
    )
    body = res.json()
    assert body["scheduled_count"] == 1
    assert body["member_ids"] == [str(insider.id)]
    assert body["remaining_gap"] == 0


async def test_unknown_action_is_400(client, staff):
    res = await client.post(URL, json={"action": "dance"}, headers=auth_headers(staff))
    assert res.status_code == 400


async def test_scheduler_requires_staff(client, member):
    res = await client.get(URL, headers=auth_headers(member))
    assert res.status_code == 403
