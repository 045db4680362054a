"""SMS Routes — test send, bulk send, message log."""

from tests.services.fakes import auth_headers

URL = "/api/v1/admin/sms"


async def test_test_send_normalises_number(client, staff, fake_sms):
    res = await client.post(
        f"{URL}/test", json={"to": "555-123-4567", "message": "Hi"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 200
    assert res.json()["to"] == "+15551234567"
    assert fake_sms.sent == [("+15551234567", "Hi")]


async def test_test_send_invalid_number_is_400(client, staff, fake_sms):
    res = await client.post(
        f"{URL}/test", json={"to": "12", "message": "Hi"}, headers=auth_headers(staff),
    )
    assert res.status_code == 400
    assert fake_sms.sent == []


async def test_test_send_provider_failure_is_logged_then_503(client, staff, fake_sms):
    fake_sms.fail_for.add("+15551234567")
    headers = auth_headers(staff)

    res = await client.post(
        f"{URL}/test", json={"to": "+15551234567", "message": "Hi"}, headers=headers,
    )
    assert res.status_code == 503

    log = await client.get(f"{URL}/messages", headers=headers)
    assert [m["status"] for m in log.json()["messages"]] == ["failed"]


async def test_bulk_reports_per_recipient(client, staff, fake_sms):
    res = await client.post(
        f"{URL}/bulk",
        json={"recipients": ["+15551230001", "bogus", "+15551230002"], "message": "Service at 7"},
        headers=auth_headers(staff),
    )
    body = res.json()
    assert (body["total"], body["sent"], body["failed"]) == (3, 2, 1)
    assert body["results"][1] == {"to": "bogus", "success": False, "error": "Invalid phone number"}
    assert len(fake_sms.sent) == 2


async def test_bulk_rejects_empty_recipient_list(client, staff):
    res = await client.post(
        f"{URL}/bulk", json={"recipients": [], "message": "x"}, headers=auth_headers(staff),
    )
    assert res.status_code == 400


async def test_sms_requires_staff(client, member):
    res = await client.get(f"{URL}/messages", headers=auth_headers(member))
    assert res.status_code == 403
