"""Email Campaign & Newsletter Routes — audience, batched send, status, AI draft.

Invariants:
    - Test sends go only to test_email with a "[TEST] " prefix; status unchanged
    - A sent campaign is never sent again; empty audience → NO_RECIPIENTS
    - Status `failed` only when every recipient failed
    - An unexpected per-recipient error is logged as a failure; the send still completes
    - Newsletter honours weekly_newsletter opt-outs and survives an LLM outage
"""

import json

from sqlalchemy import select

from ministry.core.errors import AnthropicAPIError
from ministry.models.email import EmailSendLog
from ministry.models.member import EmailSubscription

from tests.services.fakes import auth_headers

URL = "/api/v1/admin/email/campaigns"


async def _campaign(client, staff, **overrides) -> dict:
    payload = {
        "name": "Autumn",
        "subject": "Hello {{firstName}}",
        "content": {"body": "Dear {{firstName}},\n\nWe are praying for you."},
        **overrides,
    }
    res = await client.post(URL, json=payload, headers=auth_headers(staff))
    assert res.status_code == 201
    return res.json()


async def test_create_and_fetch_draft(client, staff):
    campaign = await _campaign(client, staff)
    assert campaign["status"] == "draft"

    res = await client.get(f"{URL}/{campaign['id']}", headers=auth_headers(staff))
    assert res.json()["target_audience"]["type"] == "all"
    listed = await client.get(URL, headers=auth_headers(staff))
    assert len(listed.json()["campaigns"]) == 1


async def test_test_send_leaves_status(client, staff, fake_email):
    campaign = await _campaign(client, staff)
    headers = auth_headers(staff)

    res = await client.post(
        f"{URL}/{campaign['id']}/send", json={"test_email": "pastor@example.org"},
        headers=headers,
    )
    assert res.json() == {"success": True, "test": True, "sent_to": "pastor@example.org"}
    assert [m.subject for m in fake_email.sent] == ["[TEST] Hello {{firstName}}"]

    fetched = await client.get(f"{URL}/{campaign['id']}", headers=headers)
    assert fetched.json()["status"] == "draft"


async def test_send_personalises_and_logs(client, test_db, staff, make_member, fake_email):
    reader = await make_member(first_name="Lydia")
    campaign = await _campaign(
        client, staff, target_audience={"type": "member_ids", "member_ids": [str(reader.id)]},
    )

    res = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert res.json() == {
        "success": True, "status": "sent", "total": 1, "sent": 1, "failed": 0,
    }
    assert fake_email.sent[0].subject == "Hello Lydia"
    assert "Dear Lydia" in fake_email.sent[0].html

    logs = (await test_db.execute(select(EmailSendLog))).scalars().all()
    assert [(log.email, log.status) for log in logs] == [(reader.email, "sent")]

    again = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "CAMPAIGN_ALREADY_SENT"


async def test_partial_failure_still_sent(client, staff, make_member, fake_email):
    bounced = await make_member(tier="partner")
    await make_member(tier="partner")
    fake_email.fail_for.add(bounced.email)
    campaign = await _campaign(
        client, staff, target_audience={"type": "tiers", "tiers": ["partner"]},
    )

    res = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert res.json()["status"] == "sent"
    assert (res.json()["sent"], res.json()["failed"]) == (1, 1)


async def test_all_failed_marks_failed(client, staff, make_member, fake_email):
    only = await make_member(tier="covenant")
    fake_email.fail_for.add(only.email)
    campaign = await _campaign(
        client, staff, target_audience={"type": "tiers", "tiers": ["covenant"]},
    )

    res = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert res.json()["success"] is False
    assert res.json()["status"] == "failed"


async def test_empty_audience_is_rejected(client, staff):
    campaign = await _campaign(
        client, staff, target_audience={"type": "tiers", "tiers": ["covenant"]},
    )
    res = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "NO_RECIPIENTS"

    fetched = await client.get(f"{URL}/{campaign['id']}", headers=auth_headers(staff))
    assert fetched.json()["status"] == "draft"


async def test_subscription_audience_respects_opt_out(
    client, test_db, staff, make_member, fake_email,
):
    opted_out = await make_member()
    test_db.add(EmailSubscription(
        member_id=opted_out.id, subscription_type="announcements", is_subscribed=False,
    ))
    await test_db.commit()
    campaign = await _campaign(
        client, staff,
        target_audience={"type": "subscription_type", "subscription_type": "announcements"},
    )

    await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert opted_out.email not in {m.to for m in fake_email.sent}
    assert staff.email in {m.to for m in fake_email.sent}


async def test_ai_draft_parses_json(client, staff, fake_llm):
    fake_llm.replies.append(
        "Here you go: " + json.dumps({"subject": " Harvest ", "body": "Give thanks"}),
    )
    res = await client.post(
        "/api/v1/admin/email/ai-generate", json={"topic": "Thanksgiving"},
        headers=auth_headers(staff),
    )
    assert res.json() == {"subject": "Harvest", "body": "Give thanks", "tokens_used": 20}


async def test_ai_draft_non_json_is_503(client, staff, fake_llm):
    fake_llm.replies.append("I cannot do that")
    res = await client.post(
        "/api/v1/admin/email/ai-generate", json={"topic": "Thanksgiving"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 503


async def test_newsletter_skips_opted_out_and_falls_back(
    client, test_db, member, make_member, fake_email, fake_llm, cron_headers,
):
    quiet = await make_member()
    test_db.add(EmailSubscription(
        member_id=quiet.id, subscription_type="weekly_newsletter", is_subscribed=False,
    ))
    await test_db.commit()
    fake_llm.error = AnthropicAPIError("overloaded", "overloaded_error")

    res = await client.get("/api/v1/cron/weekly-newsletter", headers=cron_headers)
    body = res.json()
    assert res.status_code == 200
    assert (body["sent"], body["total"]) == (1, 1)
    assert [m.to for m in fake_email.sent] == [member.email]
    assert body["stats"]["new_members"] == 2


async def test_campaigns_require_staff(client, member):
    res = await client.get(URL, headers=auth_headers(member))
    assert res.status_code == 403


async def test_unexpected_send_error_is_logged_not_fatal(
    client, test_db, staff, make_member, fake_email,
):
    good = await make_member(first_name="Phoebe")
    bad = await make_member(first_name="Alexander")
    delivered = fake_email.send

    async def flaky(message):
        if message.to == bad.email:
            raise ValueError("Expecting value: line 1 column 1")
        return await delivered(message)

    fake_email.send = flaky
    campaign = await _campaign(client, staff, target_audience={
        "type": "member_ids", "member_ids": [str(good.id), str(bad.id)],
    })

    res = await client.post(f"{URL}/{campaign['id']}/send", json={}, headers=auth_headers(staff))
    assert res.status_code == 200
    assert res.json()["status"] == "sent"
    assert (res.json()["sent"], res.json()["failed"]) == (1, 1)

    logs = {log.email: log for log in (await test_db.execute(select(EmailSendLog))).scalars()}
    assert logs[good.email].status == "sent"
    assert logs[bad.email].status == "failed"
    assert "ValueError" in logs[bad.email].error_message
