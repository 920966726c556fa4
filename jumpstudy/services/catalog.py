"""
Public course catalog

Filtering, ordering and pagination of published courses for the public
listing page, with an optional in-process cache of the published rows.
"""

import logging
import os
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from cachetools import TTLCache
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.repositories.course_repo import CourseRepository
from jumpstudy.utils.feature_flags import is_feature_enabled

logger = logging.getLogger(__name__)

SORT_KEYS = (
    "startDate-asc",
    "startDate-desc",
    "applyByDate-asc",
    "createdAt-desc",
    "title-asc",
)
DEFAULT_SORT = "startDate-asc"
DEFAULT_LIMIT = 24
MAX_LIMIT = 100
CACHE_TTL_SECONDS = int(os.getenv("CATALOG_CACHE_TTL_SECONDS", "300"))

_SEARCH_FIELDS = (
    "title", "titleMm", "subtitle", "subtitleMm", "province", "district",
    "address", "schedule", "scheduleMm", "description", "descriptionMm",
)

CATALOG_KEY = "published"

# Single entry holding the serialized published courses.
catalog_cache: TTLCache = TTLCache(maxsize=1, ttl=CACHE_TTL_SECONDS)


def invalidate_catalog() -> None:
    """Drop the cached rows. Called after course, draft and organization writes."""
    catalog_cache.clear()


def _parse(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


def matches_search(course: Dict[str, Any], term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    haystack: List[str] = [str(course.get(f) or "") for f in _SEARCH_FIELDS]
    organization = course.get("organizationInfo") or {}
    haystack.append(organization.get("name") or "")
    haystack.extend(course.get("outcomes") or [])
    haystack.extend(badge["text"] for badge in course.get("badges") or [])
    return any(needle in text.lower() for text in haystack)


def matches_badges(course: Dict[str, Any], selected: Iterable[str]) -> bool:
    """Every selected badge must be present on the course."""
    owned = {
        badge["text"].strip().lower() for badge in course.get("badges") or []
    }
    return all(b.strip().lower() in owned for b in selected if b.strip())


def _future_first(
    courses: List[Dict[str, Any]], field: str, today: date
) -> List[Dict[str, Any]]:
    upcoming, past, undated = [], [], []
    for course in courses:
        when = _parse(course.get(field))
        if when is None:
            undated.append(course)
        elif when.date() >= today:
            upcoming.append((when, course))
        else:
            past.append((when, course))
    upcoming.sort(key=lambda pair: pair[0])
    past.sort(key=lambda pair: pair[0], reverse=True)
    return [c for _, c in upcoming] + [c for _, c in past] + undated


def sort_courses(
    courses: List[Dict[str, Any]],
    sort_key: str = DEFAULT_SORT,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    today = today or datetime.utcnow().date()
    if sort_key == "startDate-desc":
        return sorted(
            courses, key=lambda c: _parse(c["startDate"]), reverse=True
        )
    if sort_key == "applyByDate-asc":
        return _future_first(courses, "applyByDate", today)
    if sort_key == "createdAt-desc":
        return sorted(
            courses,
            key=lambda c: _parse(c.get("createdAt")) or datetime.min,
            reverse=True,
        )
    if sort_key == "title-asc":
        return sorted(courses, key=lambda c: (c.get("title") or "").lower())
    return _future_first(courses, "startDate", today)


def paginate(items: List[Any], page: int, limit: int) -> Dict[str, Any]:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    total = len(items)
    pages = (total + limit - 1) // limit
    start = (page - 1) * limit
    return {
        "data": items[start:start + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages,
            "hasMore": page < pages,
        },
    }


async def load_published(session: AsyncSession) -> List[Dict[str, Any]]:
    use_cache = is_feature_enabled("cache_enabled")
    if use_cache:
        cached = catalog_cache.get(CATALOG_KEY)
        if cached is not None:
            return cached
    courses = await CourseRepository(session).list_published()
    rows = [course.to_dict() for course in courses]
    if use_cache:
        catalog_cache[CATALOG_KEY] = rows
        logger.info(f"Catalog cache refreshed with {len(rows)} courses")
    return rows


async def query_catalog(
    session: AsyncSession,
    search: str = "",
    badges: Optional[List[str]] = None,
    sort: str = DEFAULT_SORT,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Any]:
    rows = await load_published(session)
    if search:
        rows = [c for c in rows if matches_search(c, search)]
    if badges:
        rows = [c for c in rows if matches_badges(c, badges)]
    if sort not in SORT_KEYS:
        sort = DEFAULT_SORT
    return paginate(sort_courses(rows, sort), page, limit)
