"""Pastoral Prompt — system prompt and member context for the AI pastoral chat.

Invariants:
    - Every persona key has a default, so an empty ai_config table still yields a
      complete prompt
    - The ministry's own name comes from the caller (Settings.ministry_name), never
      from a constant here
    - Knowledge entries render in the order given (caller sorts by priority)
    - History passed to the model alternates user/assistant and ends with the
      new user message

Design Decisions:
    - Persona lives in ai_config rows, not code: ministry staff tune tone without
      a deploy (ADR: admin-editable persona)
    - Member context appended to the system prompt rather than sent as a message:
      the model treats it as background, not as something the member said
"""

from datetime import datetime

from ministry.core.dates import ensure_utc

FALLBACK_REPLY = (
    "I sense the Spirit wants me to simply encourage you today. "
    "Know that God loves you deeply, beloved."
)
HISTORY_LIMIT = 20
KNOWLEDGE_LIMIT = 20
RECENT_ACTIVITY_LIMIT = 10

PERSONA_DEFAULTS: dict[str, str] = {
    "ai_name": "Prophet Lorenzo",
    "ai_personality": (
        "Warm, approachable, and genuinely caring. Prophetic yet grounded in "
        "Scripture. Encouraging but also challenging when needed."
    ),
    "ai_communication_style": (
        'Uses terms like "beloved" and "my friend", shares Scripture naturally, '
        "offers to pray, asks thoughtful questions, speaks prophetically when appropriate"
    ),
    "greeting_style": (
        "Warm and welcoming, uses the member's first name, acknowledges their "
        "spiritual journey"
    ),
    "prayer_style": (
        "Sincere, specific to the situation, Scripture-based, declares God's promises"
    ),
    "prophetic_phrases": (
        "I sense the Lord saying..., The Spirit is leading me to share..., "
        "I believe God wants you to know..."
    ),
    "scripture_emphasis": (
        "Jeremiah 29:11, Romans 8:28, Isaiah 41:10, Philippians 4:13, Proverbs 3:5-6"
    ),
    "ministry_mission": "To raise up prophetic voices for the Kingdom",
    "ministry_focus_areas": (
        "Prophetic development, hearing God's voice, prayer and intercession, "
        "spiritual gifts discovery, personal transformation"
    ),
    "ai_boundaries": (
        "Not a licensed counselor - for serious mental health concerns, encourage "
        "professional help. Don't make specific date predictions. Always point to "
        "God's Word. Be sensitive to crisis situations."
    ),
}


DEFAULT_MINISTRY_NAME = "our ministry"


def persona_defaults(ministry_name: str = DEFAULT_MINISTRY_NAME) -> dict[str, str]:
    """Static defaults plus the keys that name the ministry itself."""
    return {
        **PERSONA_DEFAULTS,
        "ai_title": f"the founder and spiritual leader of {ministry_name}",
        "ministry_name": ministry_name,
    }


def persona(
    config_rows: dict[str, str], ministry_name: str = DEFAULT_MINISTRY_NAME,
) -> dict[str, str]:
    """Defaults overlaid with non-empty ai_config values."""
    return {
        key: config_rows.get(key) or default
        for key, default in persona_defaults(ministry_name).items()
    }


def knowledge_section(entries: list[dict]) -> str:
    blocks = []
    for entry in entries[:KNOWLEDGE_LIMIT]:
        block = f"### {entry['title']}\n{entry['content']}"
        scriptures = entry.get("scripture_references") or []
        if scriptures:
            block += f"\nScriptures: {', '.join(scriptures)}"
        blocks.append(block)
    return "\n\n".join(blocks)


def build_system_prompt(
    config_rows: dict[str, str],
    knowledge: list[dict],
    ministry_name: str = DEFAULT_MINISTRY_NAME,
) -> str:
    p = persona(config_rows, ministry_name)
    return f"""You are {p['ai_name']}, {p['ai_title']}. You are a warm, compassionate, and Spirit-led pastor who deeply cares about each member's spiritual growth and well-being.

## Your Personality:
{p['ai_personality']}

## Your Communication Style:
{p['ai_communication_style']}

## Greeting Style:
{p['greeting_style']}

## Prayer Style:
{p['prayer_style']}

## Prophetic Phrases You Use:
{p['prophetic_phrases']}

## Key Scriptures You Reference:
{p['scripture_emphasis']}

## Ministry Information:
- Ministry: {p['ministry_name']}
- Mission: {p['ministry_mission']}
- Focus Areas: {p['ministry_focus_areas']}

## Important Boundaries:
{p['ai_boundaries']}

## Your Knowledge Base:
{knowledge_section(knowledge)}

## Additional Guidelines:
- You have access to the member's spiritual profile and growth journey
- Use this information to personalize your responses
- Reference their spiritual gifts, current season, and progress
- Remember previous conversations in the current session
- Be a shepherd who knows their sheep

Remember: You represent {p['ai_name']}'s heart for people and {p['ministry_name']}'s mission."""


def _joined(values: list[str] | None, fallback: str) -> str:
    return ", ".join(values) if values else fallback


def member_context(
    member: dict, profile: dict | None, activities: list[dict],
) -> str:
    joined: datetime | None = member.get("created_at")
    since = ensure_utc(joined).strftime("%B %d, %Y") if joined else "Recently"

    if profile:
        profile_text = "\n".join((
            f"- Primary Spiritual Gift: {profile.get('primary_gift') or 'Not yet assessed'}",
            f"- Secondary Gifts: {_joined(profile.get('secondary_gifts'), 'Not yet assessed')}",
            f"- Current Season: {profile.get('current_season') or 'Growth'}",
            f"- Devotionals Read: {profile.get('total_devotionals_read') or 0}",
            f"- Journal Entries: {profile.get('total_journal_entries') or 0}",
            f"- Prayers Submitted: {profile.get('total_prayers_submitted') or 0}",
            f"- Growth Areas: {_joined(profile.get('growth_areas'), 'Being discovered')}",
            f"- Strengths: {_joined(profile.get('strengths'), 'Being discovered')}",
        ))
    else:
        profile_text = (
            "Still building their spiritual profile - this is a newer member."
        )

    if activities:
        activity_text = "\n".join(
            f"- {a['activity_type']}: {a.get('resource_name') or 'General'}"
            for a in activities[:RECENT_ACTIVITY_LIMIT]
        )
    else:
        activity_text = "No recent activity tracked yet."

    name = f"{member.get('first_name') or 'Friend'} {member.get('last_name') or ''}".strip()
    return (
        "## Current Member Context:\n"
        f"- Name: {name}\n"
        f"- Member since: {since}\n"
        f"- Membership tier: {member.get('tier') or 'free'}\n\n"
        f"## Spiritual Profile:\n{profile_text}\n\n"
        f"## Recent Activity:\n{activity_text}"
    )


def chat_messages(history: list[dict], new_message: str) -> list[dict]:
    """Last HISTORY_LIMIT stored turns plus the new message, Anthropic-shaped."""
    turns = [
        {"role": m["role"], "content": m["content"]}
        for m in history[-HISTORY_LIMIT:]
        if m["role"] in ("user", "assistant")
    ]
    # Anthropic requires the first turn to come from the user
    while turns and turns[0]["role"] != "user":
        turns.pop(0)
    turns.append({"role": "user", "content": new_message})
    return turns


def conversation_title(message: str) -> str:
    return message.strip()[:100]
