"""Email Templates — Jinja2 rendering for campaigns, newsletters, and contact notices.

Invariants:
    - Every value interpolated by Jinja2 is autoescaped (user text never injects markup)
    - Campaign HTML keeps literal {{firstName}} / {{email}} placeholders for
      per-recipient personalisation; personalise() escapes what it substitutes
    - Rendering is pure: no IO, no settings lookup (callers pass branding)

Design Decisions:
    - Templates as module strings loaded through one Environment: the package
      ships no data files and the markup is short
    - Admin-authored campaign HTML is trusted as-is (staff only) and only
      personalised, never re-rendered
"""

from html import escape

from jinja2 import DictLoader, Environment, select_autoescape

_env = Environment(
    autoescape=select_autoescape(default_for_string=True, default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)

DEFAULT_CAMPAIGN_BODY = "Thank you for being part of our ministry family."

_LAYOUT = """\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; background: #f5f5f5; margin: 0; padding: 20px;">
<div style="max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 8px; overflow: hidden;">
  <div style="background: #1e3a5f; color: #ffffff; padding: 24px; text-align: center;">
    <h1 style="margin: 0; font-size: 24px;">{{ ministry_name }}</h1>
  </div>
  <div style="padding: 32px;">
    {% block content %}{% endblock %}
  </div>
  <div style="background: #f0f0f0; padding: 16px; text-align: center; font-size: 12px; color: #666666;">
    <p>{{ ministry_name }}</p>
    <p><a href="{{ unsubscribe_url }}" style="color: #666666;">Unsubscribe</a></p>
  </div>
</div>
</body>
</html>
"""

_CAMPAIGN = """\
{% extends "layout" %}
{% block content %}
<p>Dear {% raw %}{{firstName}}{% endraw %},</p>
{% for paragraph in paragraphs %}
<p style="line-height: 1.6;">{{ paragraph }}</p>
{% endfor %}
{% if cta_text and cta_url %}
<p style="text-align: center; margin: 32px 0;">
  <a href="{{ cta_url }}" style="background: #c9a227; color: #ffffff; padding: 12px 28px; border-radius: 6px; text-decoration: none;">{{ cta_text }}</a>
</p>
{% endif %}
<p>Blessings,<br>{{ ministry_name }}</p>
{% endblock %}
"""

_NEWSLETTER = """\
{% extends "layout" %}
{% block content %}
<p>Dear {{ first_name }},</p>
<p style="color: #666666;">{{ week_date }}</p>
<p style="line-height: 1.6;">{{ summary }}</p>
<h3>This Week in Our Community</h3>
<ul>
  <li>{{ stats.new_members }} new members</li>
  <li>{{ stats.prayers_answered }} prayers answered</li>
  <li>{{ stats.teachings_watched }} teachings watched</li>
</ul>
{% if featured_teaching %}
<h3>Featured Teaching</h3>
<p><a href="{{ featured_teaching.url }}">{{ featured_teaching.title }}</a> by {{ featured_teaching.speaker }}</p>
<p>{{ featured_teaching.description }}</p>
{% endif %}
{% if prophecies %}
<h3>New Prophetic Words</h3>
{% for p in prophecies %}
<p><a href="{{ p.url }}">{{ p.title }}</a><br>{{ p.excerpt }}</p>
{% endfor %}
{% endif %}
{% if events %}
<h3>Upcoming Events</h3>
{% for e in events %}
<p><a href="{{ e.url }}">{{ e.title }}</a>: {{ e.date }}</p>
{% endfor %}
{% endif %}
<p>Blessings,<br>{{ ministry_name }}</p>
{% endblock %}
"""

_CONTACT_NOTICE = """\
{% extends "layout" %}
{% block content %}
<p><strong>New contact form submission</strong></p>
<p>From: {{ name }} &lt;{{ email }}&gt;</p>
{% if subject %}<p>Subject: {{ subject }}</p>{% endif %}
{% for paragraph in paragraphs %}
<p>{{ paragraph }}</p>
{% endfor %}
{% endblock %}
"""

_TEMPLATES = {
    "layout": _LAYOUT,
    "campaign": _CAMPAIGN,
    "newsletter": _NEWSLETTER,
    "contact": _CONTACT_NOTICE,
}
_env.loader = DictLoader(_TEMPLATES)


def _template(name: str):
    return _env.get_template(name)


def _paragraphs(text: str) -> list[str]:
    return [p.strip() for p in text.split("\n\n") if p.strip()]


def unsubscribe_url(site_url: str) -> str:
    return f"{site_url.rstrip('/')}/settings"


def campaign_body(content: dict | None) -> str:
    content = content or {}
    return content.get("body") or content.get("message") or DEFAULT_CAMPAIGN_BODY


def render_campaign_html(content: dict | None, ministry_name: str, site_url: str) -> str:
    """Default campaign HTML. Output keeps {{firstName}} for personalise()."""
    content = content or {}
    return _template("campaign").render(
        ministry_name=ministry_name,
        paragraphs=_paragraphs(campaign_body(content)),
        cta_text=content.get("cta_text"),
        cta_url=content.get("cta_url"),
        unsubscribe_url=unsubscribe_url(site_url),
    )


def personalise(text: str, first_name: str, email: str, *, html: bool = True) -> str:
    name = first_name or "Friend"
    if html:
        name, email = escape(name), escape(email)
    return text.replace("{{firstName}}", name).replace("{{email}}", email)


def render_newsletter_html(
    *,
    first_name: str,
    week_date: str,
    summary: str,
    stats: dict,
    featured_teaching: dict | None,
    prophecies: list[dict],
    events: list[dict],
    ministry_name: str,
    site_url: str,
) -> str:
    return _template("newsletter").render(
        first_name=first_name or "Friend",
        week_date=week_date,
        summary=summary,
        stats=stats,
        featured_teaching=featured_teaching,
        prophecies=prophecies,
        events=events,
        ministry_name=ministry_name,
        unsubscribe_url=unsubscribe_url(site_url),
    )


def render_contact_notice(
    *, name: str, email: str, subject: str | None, message: str,
    ministry_name: str, site_url: str,
) -> str:
    return _template("contact").render(
        name=name, email=email, subject=subject,
        paragraphs=_paragraphs(message) or [message],
        ministry_name=ministry_name,
        unsubscribe_url=unsubscribe_url(site_url),
    )


def newsletter_fallback_summary(stats: dict) -> str:
    return (
        "This week has been filled with God's faithfulness! "
        f"We welcomed {stats['new_members']} new members to our family, "
        f"witnessed {stats['prayers_answered']} answered prayers, "
        f"and saw {stats['teachings_watched']} teachings consumed by our community. "
        "God is moving!"
    )
