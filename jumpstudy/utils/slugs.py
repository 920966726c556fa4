"""URL slug helpers for courses and organizations."""

import re
from typing import Awaitable, Callable, Optional

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def generate_slug(text: str) -> str:
    """Lowercase ASCII slug; non-English characters are dropped."""
    slug = (text or "").lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def build_course_slug(title: str, organization_name: Optional[str] = None) -> str:
    title_slug = generate_slug(title) or "course"
    org_slug = generate_slug(organization_name) if organization_name else ""
    if org_slug:
        return f"{org_slug}/{title_slug}"
    return title_slug


def parse_course_slug(slug: str) -> dict:
    """Split ``org-slug/course-slug`` into its parts."""
    parts = slug.split("/", 1)
    if len(parts) == 2:
        return {
            "organizationSlug": parts[0],
            "courseSlug": parts[1],
            "fullSlug": slug,
        }
    return {"organizationSlug": None, "courseSlug": slug, "fullSlug": slug}


async def ensure_unique_slug(
    base_slug: str, exists: Callable[[str], Awaitable[bool]]
) -> str:
    """Probe ``base``, ``base-1``, ``base-2``... until ``exists`` is false."""
    candidate = base_slug
    counter = 1
    while await exists(candidate):
        candidate = f"{base_slug}-{counter}"
        counter += 1
    return candidate
