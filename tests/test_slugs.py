"""Slug helper tests"""

import pytest

from jumpstudy.utils.slugs import (
    build_course_slug,
    ensure_unique_slug,
    generate_slug,
    parse_course_slug,
)


class TestGenerateSlug:
    def test_basic(self):
        assert generate_slug("Intro to Coding!") == "intro-to-coding"

    def test_collapses_separators(self):
        assert generate_slug("  a -- b __ c  ") == "a-b-c"

    def test_non_ascii_dropped(self):
        assert generate_slug("မြန်မာ") == ""

    def test_course_slug_with_org(self):
        assert build_course_slug("Art Class", "Bright Futures") == "bright-futures/art-class"

    def test_course_slug_fallback(self):
        assert build_course_slug("!!!") == "course"

    def test_parse(self):
        parts = parse_course_slug("org/course-1")
        assert parts["organizationSlug"] == "org"
        assert parts["courseSlug"] == "course-1"
        assert parse_course_slug("solo")["organizationSlug"] is None


@pytest.mark.asyncio
async def test_ensure_unique_slug_appends_counter():
    taken = {"art", "art-1"}

    async def exists(candidate):
        return candidate in taken

    assert await ensure_unique_slug("art", exists) == "art-2"
    assert await ensure_unique_slug("music", exists) == "music"
