"""Public Routes — visitor-facing events, contact, gallery, prophecies, tiers.

Invariants:
    - Only free, non-cancelled, future events are listed
    - Contact submission succeeds even when the inbox notice fails
    - Unpublished albums are invisible (404 by slug)
"""

from datetime import timedelta

from sqlalchemy import select

from ministry.core.access import PARTNER_TIERS
from ministry.core.dates import utcnow
from ministry.models.contact import ContactSubmission
from ministry.models.content import Prophecy
from ministry.models.event import Event
from ministry.models.gallery import GalleryAlbum, GalleryPhoto


async def test_events_only_public_upcoming(client, test_db):
    now = utcnow()
    test_db.add_all([
        Event(title="Revival Night", start_date=now + timedelta(days=3)),
        Event(title="Past", start_date=now - timedelta(days=3)),
        Event(title="Partners Only", start_date=now + timedelta(days=2), tier_required="partner"),
        Event(title="Cancelled", start_date=now + timedelta(days=1), status="cancelled"),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/public/events")
    assert res.status_code == 200
    assert [e["title"] for e in res.json()["events"]] == ["Revival Night"]


async def test_events_limit_is_bounded(client):
    res = await client.get("/api/v1/public/events", params={"limit": 0})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_contact_stores_and_notifies_inbox(client, test_db, fake_email):
    res = await client.post("/api/v1/public/contact", json={
        "name": "Ana", "email": "ana@example.org", "message": "Please call me",
    })
    assert res.status_code == 201
    assert res.json()["success"] is True

    rows = (await test_db.execute(select(ContactSubmission))).scalars().all()
    assert [r.name for r in rows] == ["Ana"]
    assert len(fake_email.sent) == 1
    assert fake_email.sent[0].reply_to == "ana@example.org"


async def test_contact_survives_failed_notice(client, test_db, fake_email):
    from ministry.config import get_settings
    fake_email.fail_for.add(get_settings().email_inbox)

    res = await client.post("/api/v1/public/contact", json={
        "name": "Ben", "email": "ben@example.org", "message": "Hello",
    })
    assert res.status_code == 201
    rows = (await test_db.execute(select(ContactSubmission))).scalars().all()
    assert len(rows) == 1


async def test_contact_rejects_blank_message(client):
    res = await client.post("/api/v1/public/contact", json={
        "name": "Ana", "email": "ana@example.org", "message": "   ",
    })
    assert res.status_code == 400


async def test_gallery_lists_published_albums_with_counts(client, test_db):
    album = GalleryAlbum(slug="easter", title="Easter")
    album.photos = [
        GalleryPhoto(image_url="https://img/2.jpg", position=2),
        GalleryPhoto(image_url="https://img/1.jpg", position=1),
    ]
    test_db.add_all([album, GalleryAlbum(slug="draft", title="Draft", is_published=False)])
    await test_db.commit()

    res = await client.get("/api/v1/public/gallery")
    albums = res.json()["albums"]
    assert [a["slug"] for a in albums] == ["easter"]
    assert albums[0]["photo_count"] == 2

    detail = await client.get("/api/v1/public/gallery/easter")
    assert [p["position"] for p in detail.json()["album"]["photos"]] == [1, 2]


async def test_unpublished_album_is_not_found(client, test_db):
    test_db.add(GalleryAlbum(slug="draft", title="Draft", is_published=False))
    await test_db.commit()

    res = await client.get("/api/v1/public/gallery/draft")
    assert res.status_code == 404


async def test_prophecies_only_free_published(client, test_db):
    test_db.add_all([
        Prophecy(title="Open word"),
        Prophecy(title="Partner word", tier_required="partner"),
        Prophecy(title="Hidden", is_published=False),
    ])
    await test_db.commit()

    res = await client.get("/api/v1/public/prophecies")
    assert [p["title"] for p in res.json()["prophecies"]] == ["Open word"]


async def test_partner_tiers_table(client):
    res = await client.get("/api/v1/public/partner-tiers")
    assert res.status_code == 200
    assert len(res.json()["tiers"]) == len(PARTNER_TIERS)
