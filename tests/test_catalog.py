"""Public catalog ordering, filtering and pagination"""

from datetime import date

import pytest
from sqlalchemy import select

from conftest import auth, course_payload
from jumpstudy.services.catalog import (
    CATALOG_KEY,
    catalog_cache,
    invalidate_catalog,
    matches_badges,
    matches_search,
    paginate,
    sort_courses,
)

TODAY = date(2026, 6, 15)


def _course(title, start, apply_by=None, badges=(), created="2026-01-01T00:00:00"):
    return {
        "title": title,
        "startDate": f"{start}T09:00:00",
        "applyByDate": f"{apply_by}T09:00:00" if apply_by else None,
        "createdAt": created,
        "badges": [{"text": b} for b in badges],
        "outcomes": [],
        "organizationInfo": {"name": "Bright Futures"},
    }


class TestSortCourses:
    def test_start_date_future_before_past(self):
        courses = [
            _course("past-old", "2026-01-01"),
            _course("future-late", "2026-09-01"),
            _course("past-recent", "2026-06-01"),
            _course("today", "2026-06-15"),
            _course("future-soon", "2026-07-01"),
        ]
        ordered = [c["title"] for c in sort_courses(courses, "startDate-asc", TODAY)]
        assert ordered == [
            "today", "future-soon", "future-late", "past-recent", "past-old",
        ]

    def test_apply_by_missing_dates_last(self):
        courses = [
            _course("none", "2026-07-01"),
            _course("closed", "2026-07-01", apply_by="2026-06-01"),
            _course("open", "2026-07-01", apply_by="2026-06-20"),
        ]
        ordered = [c["title"] for c in sort_courses(courses, "applyByDate-asc", TODAY)]
        assert ordered == ["open", "closed", "none"]

    def test_title_and_start_desc(self):
        courses = [_course("b", "2026-01-01"), _course("A", "2026-02-01")]
        assert [c["title"] for c in sort_courses(courses, "title-asc", TODAY)] == ["A", "b"]
        assert [c["title"] for c in sort_courses(courses, "startDate-desc", TODAY)] == ["A", "b"]


class TestFilters:
    def test_search_matches_organization_and_badges(self):
        course = _course("Robotics", "2026-07-01", badges=["Free"])
        assert matches_search(course, "bright")
        assert matches_search(course, "FREE")
        assert not matches_search(course, "painting")

    def test_badges_require_all(self):
        course = _course("Robotics", "2026-07-01", badges=["Free", "Online"])
        assert matches_badges(course, [" free ", "online"])
        assert not matches_badges(course, ["free", "weekend"])


class TestPaginate:
    def test_pages(self):
        result = paginate(list(range(50)), page=3, limit=24)
        assert result["data"] == [48, 49]
        assert result["pagination"] == {
            "page": 3, "limit": 24, "total": 50, "pages": 3, "hasMore": False,
        }

    def test_limit_clamped(self):
        assert paginate(list(range(5)), page=1, limit=500)["pagination"]["limit"] == 100


def test_invalidate_clears_cached_rows():
    catalog_cache[CATALOG_KEY] = [{"id": "x"}]
    invalidate_catalog()
    assert catalog_cache.get(CATALOG_KEY) is None


@pytest.mark.asyncio
async def test_public_catalog_search_and_badges(client, admin_id, organization):
    headers = auth(admin_id)
    await client.post("/api/courses", json=course_payload(title="Robotics Club",
                      organizationId=organization["id"]), headers=headers)
    r = await client.post("/api/courses", json=course_payload(title="Painting",
                          organizationId=organization["id"]), headers=headers)
    painting = r.json()

    r = await client.get("/api/courses/public", params={"search": "painting"})
    assert r.json()["pagination"]["total"] == 1

    r = await client.get("/api/courses/public", params={"badges": "Free", "limit": 1})
    body = r.json()
    assert body["pagination"]["total"] == 2
    assert body["pagination"]["hasMore"] is True
    assert len(body["data"]) == 1

    r = await client.get("/api/courses/badges")
    assert r.json() == ["Free"]
    assert painting["status"] == "PUBLISHED"


@pytest.mark.asyncio
async def test_catalog_cache_serves_stale_rows_until_invalidated(client, admin_id, session_factory):
    from jumpstudy.models.persisted import Course
    from jumpstudy.utils.feature_flags import feature_flags

    feature_flags.set_flag("cache_enabled", True)
    try:
        await client.post("/api/courses", json=course_payload(), headers=auth(admin_id))
        r = await client.get("/api/courses/public")
        assert r.json()["pagination"]["total"] == 1

        # Rows written outside the API do not invalidate the cache
        async with session_factory() as session:
            first = (await session.execute(select(Course))).scalar_one()
            session.add(Course(
                slug="side-door", title="Side Door", subtitle="x",
                start_date=first.start_date, end_date=first.end_date,
            ))
            await session.commit()
        r = await client.get("/api/courses/public")
        assert r.json()["pagination"]["total"] == 1

        invalidate_catalog()
        r = await client.get("/api/courses/public")
        assert r.json()["pagination"]["total"] == 2
    finally:
        feature_flags.set_flag("cache_enabled", False)
        invalidate_catalog()
