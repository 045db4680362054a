"""Library catalogue — entry shaping, tab filters, search/tag, stats."""

from datetime import datetime, timezone

from ministry.core.library import (
    build_library, progress_percent, resource_entry, sermon_entry,
    teaching_entry, teaching_type,
)


def _ts(day):
    return datetime(2026, 2, day, tzinfo=timezone.utc)


def _teaching(tid, day, **kw):
    return {
        "id": tid, "title": f"Teaching {tid}", "description": None, "speaker": "Pastor Jo",
        "video_url": None, "audio_url": None, "thumbnail_url": None,
        "duration_minutes": 10, "tier_required": "free", "created_at": _ts(day), **kw,
    }


def _catalogue():
    video = teaching_entry(
        _teaching("v", 3, video_url="https://v"),
        {"progress_seconds": 300, "completed": False, "last_watched_at": _ts(9)},
        "free", "member",
    )
    audio = teaching_entry(_teaching("a", 4, audio_url="https://a", tier_required="partner"), None, "free", "member")
    ebook = resource_entry(
        {"id": "r", "title": "Hearing God", "author": "Jo", "tags": ["Prayer", "Faith"],
         "tier_required": "covenant", "created_at": _ts(5)},
        "partner", "member",
    )
    sermon = sermon_entry({"id": "s", "title": "Sunday Word", "speaker": "Jo",
                           "series_name": "Kingdom Come", "created_at": _ts(1)})
    return [video, audio, ebook, sermon]


def test_teaching_type_precedence():
    assert teaching_type({"video_url": "v", "audio_url": "a"}) == "video"
    assert teaching_type({"audio_url": "a"}) == "audio"
    assert teaching_type({}) == "article"


def test_progress_percent():
    assert progress_percent(300, 10) == 50
    assert progress_percent(None, 10) == 0
    assert progress_percent(120, None) == 0


def test_entries_carry_access_and_normalized_tags():
    video, audio, ebook, sermon = _catalogue()
    assert video["progress_percent"] == 50
    assert audio["has_access"] is False
    assert ebook["has_access"] is False
    assert ebook["tags"] == ["prayer", "faith"]
    assert sermon["tier_required"] == "free" and sermon["has_access"] is True


def test_all_tab_sorted_newest_first_with_stats():
    library = build_library(_catalogue())
    assert [i["id"] for i in library["data"]] == ["r", "a", "v", "s"]
    assert library["stats"] == {
        "total": 4, "videos": 2, "audio": 1, "ebooks": 1, "in_progress": 1,
    }
    assert library["tags"] == ["faith", "prayer"]


def test_videos_tab_includes_sermons():
    assert {i["id"] for i in build_library(_catalogue(), tab="videos")["data"]} == {"v", "s"}


def test_progress_tab_only_started_items():
    assert [i["id"] for i in build_library(_catalogue(), tab="progress")["data"]] == ["v"]


def test_search_matches_series_name_case_insensitively():
    assert [i["id"] for i in build_library(_catalogue(), search="kingdom")["data"]] == ["s"]


def test_tag_filter_is_case_insensitive_and_stats_stay_unfiltered():
    library = build_library(_catalogue(), tag="PRAYER")
    assert [i["id"] for i in library["data"]] == ["r"]
    assert library["stats"]["total"] == 4
