"""Library — merges teachings, ebooks and sermons into one tier-annotated catalogue.

Invariants:
    - Teaching type: video if video_url, else audio if audio_url, else article
    - Sermons are always free and always accessible
    - progress_percent = round(progress_seconds / (duration_minutes * 60) * 100),
      0 without progress or duration
    - Tags are compared lower-cased

Design Decisions:
    - Merge in application code over a SQL UNION: the three tables share no schema
      and the catalogue is small (ADR: reporting query, not an index)
"""

from datetime import datetime, timezone

from ministry.core.access import can_access_tier, normalize_tier
from ministry.core.dates import ensure_utc

TABS = ("all", "videos", "audio", "ebooks", "progress")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def teaching_type(teaching: dict) -> str:
    if teaching.get("video_url"):
        return "video"
    if teaching.get("audio_url"):
        return "audio"
    return "article"


def progress_percent(progress_seconds: int | None, duration_minutes: int | None) -> int:
    if not progress_seconds or not duration_minutes:
        return 0
    return round(progress_seconds / (duration_minutes * 60) * 100)


def teaching_entry(
    teaching: dict, progress: dict | None, member_tier: str | None, role: str | None,
) -> dict:
    required = normalize_tier(teaching.get("tier_required"))
    progress = progress or {}
    return {
        "id": str(teaching["id"]),
        "title": teaching["title"],
        "description": teaching.get("description"),
        "author": teaching.get("speaker"),
        "type": teaching_type(teaching),
        "source": "teaching",
        "thumbnail_url": teaching.get("thumbnail_url"),
        "duration_minutes": teaching.get("duration_minutes"),
        "tier_required": required,
        "has_access": can_access_tier(member_tier, required, role),
        "progress_percent": progress_percent(
            progress.get("progress_seconds"), teaching.get("duration_minutes"),
        ),
        "completed": bool(progress.get("completed")),
        "last_accessed": progress.get("last_watched_at"),
        "tags": [],
        "created_at": teaching["created_at"],
    }


def resource_entry(resource: dict, member_tier: str | None, role: str | None) -> dict:
    required = normalize_tier(resource.get("tier_required"))
    return {
        "id": str(resource["id"]),
        "title": resource["title"],
        "description": resource.get("description"),
        "author": resource.get("author"),
        "type": "ebook",
        "source": "resource",
        "thumbnail_url": resource.get("thumbnail_url"),
        "tier_required": required,
        "has_access": can_access_tier(member_tier, required, role),
        "download_count": resource.get("download_count") or 0,
        "progress_percent": 0,
        "completed": False,
        "last_accessed": None,
        "tags": [t.lower() for t in resource.get("tags") or []],
        "created_at": resource["created_at"],
    }


def sermon_entry(sermon: dict) -> dict:
    return {
        "id": str(sermon["id"]),
        "title": sermon["title"],
        "description": sermon.get("description"),
        "author": sermon.get("speaker"),
        "type": "sermon",
        "source": "sermon",
        "thumbnail_url": sermon.get("thumbnail_url"),
        "duration_minutes": sermon.get("duration_minutes"),
        "tier_required": "free",
        "has_access": True,
        "sermon_date": sermon.get("sermon_date"),
        "series_name": sermon.get("series_name"),
        "video_url": sermon.get("video_url"),
        "progress_percent": 0,
        "completed": False,
        "last_accessed": None,
        "tags": [],
        "created_at": sermon["created_at"],
    }


def _in_tab(item: dict, tab: str) -> bool:
    match tab:
        case "videos":
            return item["type"] in ("video", "sermon")
        case "audio":
            return item["type"] == "audio"
        case "ebooks":
            return item["type"] == "ebook"
        case "progress":
            return bool(
                item["progress_percent"] > 0 or item["completed"] or item["last_accessed"]
            )
        case _:
            return True


def _sort_key(value: datetime | None) -> datetime:
    return ensure_utc(value) if value else _EPOCH


def matches_search(item: dict, search: str) -> bool:
    needle = search.lower()
    return any(
        needle in (item.get(f) or "").lower()
        for f in ("title", "description", "author", "series_name")
    )


def build_library(
    items: list[dict], tab: str = "all", search: str = "", tag: str = "",
) -> dict:
    """Filter and sort the merged catalogue; stats cover the unfiltered list."""
    filtered = [i for i in items if _in_tab(i, tab)]
    if search:
        filtered = [i for i in filtered if matches_search(i, search)]
    if tag:
        wanted = tag.lower()
        filtered = [i for i in filtered if wanted in i.get("tags", [])]

    if tab == "progress":
        filtered.sort(key=lambda i: _sort_key(i["last_accessed"]), reverse=True)
    else:
        filtered.sort(key=lambda i: _sort_key(i["created_at"]), reverse=True)

    return {
        "data": filtered,
        "stats": {
            "total": len(items),
            "videos": sum(1 for i in items if i["type"] in ("video", "sermon")),
            "audio": sum(1 for i in items if i["type"] == "audio"),
            "ebooks": sum(1 for i in items if i["type"] == "ebook"),
            "in_progress": sum(
                1 for i in items if i["progress_percent"] > 0 and not i["completed"]
            ),
        },
        "tags": sorted({t for i in items for t in i.get("tags", [])}),
    }
