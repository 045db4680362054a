"""Email templates — Jinja2 rendering, escaping, and personalisation."""

from ministry.core.email_templates import (
    DEFAULT_CAMPAIGN_BODY, campaign_body, newsletter_fallback_summary, personalise,
    render_campaign_html, render_contact_notice, render_newsletter_html, unsubscribe_url,
)

SITE = "https://ministry.example/"


def test_campaign_html_keeps_placeholder_and_paragraphs():
    html = render_campaign_html(
        {"body": "First.\n\nSecond.", "cta_text": "Give", "cta_url": "https://give"},
        "Grace House", SITE,
    )
    assert "{{firstName}}" in html
    assert "<p style=\"line-height: 1.6;\">First.</p>" in html
    assert "https://give" in html
    assert "https://ministry.example/settings" in html


def test_campaign_html_escapes_body():
    html = render_campaign_html({"body": "<script>x</script>"}, "Grace", SITE)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_campaign_without_cta_omits_button():
    html = render_campaign_html({"body": "Hi"}, "Grace", SITE)
    assert "background: #c9a227" not in html


def test_campaign_body_fallbacks():
    assert campaign_body(None) == DEFAULT_CAMPAIGN_BODY
    assert campaign_body({"message": "legacy"}) == "legacy"


def test_personalise_escapes_substituted_values():
    out = personalise("Hi {{firstName}} ({{email}})", "<b>Al</b>", "al@x.org")
    assert out == "Hi &lt;b&gt;Al&lt;/b&gt; (al@x.org)"


def test_personalise_plain_text_and_default_name():
    assert personalise("Hi {{firstName}}", "", "e", html=False) == "Hi Friend"


def test_newsletter_renders_sections_present():
    html = render_newsletter_html(
        first_name="Mia", week_date="March 1, 2026", summary="God is good",
        stats={"new_members": 3, "prayers_answered": 2, "teachings_watched": 9},
        featured_teaching={"title": "Faith", "speaker": "Jo", "description": "d", "url": "u"},
        prophecies=[], events=[{"title": "Retreat", "date": "Mar 5", "url": "e"}],
        ministry_name="Grace", site_url=SITE,
    )
    assert "Dear Mia" in html
    assert "3 new members" in html
    assert "Featured Teaching" in html
    assert "New Prophetic Words" not in html
    assert "Retreat" in html


def test_contact_notice_escapes_visitor_input():
    html = render_contact_notice(
        name="<Eve>", email="eve@x.org", subject=None, message="Hello\n\nThere",
        ministry_name="Grace", site_url=SITE,
    )
    assert "&lt;Eve&gt;" in html
    assert "<p>Hello</p>" in html
    assert "Subject:" not in html


def test_unsubscribe_url_strips_trailing_slash():
    assert unsubscribe_url(SITE) == "https://ministry.example/settings"


def test_fallback_summary_uses_stats():
    text = newsletter_fallback_summary({"new_members": 4, "prayers_answered": 1, "teachings_watched": 7})
    assert "4 new members" in text and "1 answered prayers" in text
