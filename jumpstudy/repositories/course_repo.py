"""Repository layer for Course persistence.

Provides an abstraction over direct SQLAlchemy session usage so that routers
and services remain thin and testable. Child collections (images, badges,
FAQ) are never diffed: every write replaces them wholesale.
"""
from __future__ import annotations
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from jumpstudy.models.enums import CourseStatus
from jumpstudy.models.persisted import (
    Badge,
    Course,
    FAQ,
    Image,
    Organization,
)
from jumpstudy.models.schemas import CoursePayload
from jumpstudy.utils.slugs import build_course_slug, ensure_unique_slug

# payload attribute -> column attribute
_SCALAR_FIELDS = {
    "title": "title",
    "titleMm": "title_mm",
    "subtitle": "subtitle",
    "subtitleMm": "subtitle_mm",
    "description": "description",
    "descriptionMm": "description_mm",
    "province": "province",
    "district": "district",
    "address": "address",
    "startDate": "start_date",
    "startDateMm": "start_date_mm",
    "endDate": "end_date",
    "endDateMm": "end_date_mm",
    "applyByDate": "apply_by_date",
    "applyByDateMm": "apply_by_date_mm",
    "duration": "duration",
    "durationMm": "duration_mm",
    "schedule": "schedule",
    "scheduleMm": "schedule_mm",
    "feeAmount": "fee_amount",
    "feeAmountMm": "fee_amount_mm",
    "ageMin": "age_min",
    "ageMinMm": "age_min_mm",
    "ageMax": "age_max",
    "ageMaxMm": "age_max_mm",
    "document": "document",
    "documentMm": "document_mm",
    "availableDays": "available_days",
    "outcomes": "outcomes",
    "outcomesMm": "outcomes_mm",
    "scheduleDetails": "schedule_details",
    "scheduleDetailsMm": "schedule_details_mm",
    "selectionCriteria": "selection_criteria",
    "selectionCriteriaMm": "selection_criteria_mm",
    "howToApply": "how_to_apply",
    "howToApplyMm": "how_to_apply_mm",
    "applyButtonText": "apply_button_text",
    "applyButtonTextMm": "apply_button_text_mm",
    "applyLink": "apply_link",
    "estimatedDate": "estimated_date",
    "estimatedDateMm": "estimated_date_mm",
    "organizationId": "organization_id",
}


class CourseNotFoundError(Exception):
    """Raised when a course record could not be located."""


class CourseOrganizationError(Exception):
    """Raised when a course references an organization that does not exist."""


def _build_children(payload: CoursePayload):
    images = [
        Image(url=url, position=index)
        for index, url in enumerate(payload.imageUrls)
        if url
    ]
    badges = [
        Badge(
            text=badge.text,
            color=badge.color,
            background_color=badge.backgroundColor,
        )
        for badge in payload.badges
    ]
    faq = [
        FAQ(
            question=item.question,
            question_mm=item.questionMm,
            answer=item.answer,
            answer_mm=item.answerMm,
        )
        for item in payload.faq
        if item.question.strip() and item.answer.strip()
    ]
    return images, badges, faq


class CourseRepository:
    def __init__(self, session: AsyncSession, autocommit: bool = True):
        self.session = session
        # False when the caller owns the surrounding transaction
        self.autocommit = autocommit

    async def _persist(self) -> None:
        if self.autocommit:
            await self.session.commit()
        else:
            await self.session.flush()

    async def _reload(self, pk: str) -> Course:
        result = await self.session.execute(
            select(Course)
            .where(Course.id == pk)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _organization_name(
        self, organization_id: Optional[str]
    ) -> Optional[str]:
        if not organization_id:
            return None
        organization = await self.session.get(Organization, organization_id)
        if organization is None:
            raise CourseOrganizationError("Organization not found")
        return organization.name

    async def slug_exists(self, slug: str) -> bool:
        result = await self.session.execute(
            select(Course.id).where(Course.slug == slug)
        )
        return result.first() is not None

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        payload: CoursePayload,
        created_by: Optional[str] = None,
        status: CourseStatus = CourseStatus.PUBLISHED,
    ) -> Course:
        organization_name = await self._organization_name(
            payload.organizationId
        )
        slug = await ensure_unique_slug(
            build_course_slug(payload.title, organization_name),
            self.slug_exists,
        )
        images, badges, faq = _build_children(payload)
        course = Course(
            slug=slug,
            status=status.value,
            created_by_user_id=created_by,
            images=images,
            badges=badges,
            faq=faq,
        )
        for attr, column in _SCALAR_FIELDS.items():
            setattr(course, column, getattr(payload, attr))
        self.session.add(course)
        await self.session.flush()
        course_id = course.id
        await self._persist()
        return await self._reload(course_id)

    # READ -------------------------------------------------------------------
    async def list(
        self, organization_id: Optional[str] = None
    ) -> Sequence[Course]:
        stmt = select(Course).order_by(Course.created_at.desc())
        if organization_id is not None:
            stmt = stmt.where(Course.organization_id == organization_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_published(self) -> Sequence[Course]:
        result = await self.session.execute(
            select(Course).where(
                Course.status == CourseStatus.PUBLISHED.value
            )
        )
        return result.scalars().all()

    async def get(self, pk: str) -> Course:
        result = await self.session.execute(
            select(Course).where(Course.id == pk)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise CourseNotFoundError
        return record

    async def get_by_slug(self, slug: str) -> Course:
        result = await self.session.execute(
            select(Course).where(Course.slug == slug)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise CourseNotFoundError
        return record

    async def distinct_badges(self) -> list:
        result = await self.session.execute(
            select(Badge.text)
            .join(Course, Course.id == Badge.course_id)
            .where(Course.status == CourseStatus.PUBLISHED.value)
            .distinct()
            .order_by(Badge.text)
        )
        return [row[0] for row in result.all()]

    # UPDATE -----------------------------------------------------------------
    async def update(
        self,
        pk: str,
        payload: CoursePayload,
        status: Optional[CourseStatus] = None,
    ) -> Course:
        course = await self.get(pk)
        await self._organization_name(payload.organizationId)
        for attr, column in _SCALAR_FIELDS.items():
            setattr(course, column, getattr(payload, attr))
        if status is not None:
            course.status = status.value

        # Delete every child row, then recreate from the payload
        course.images.clear()
        course.badges.clear()
        course.faq.clear()
        await self.session.flush()
        images, badges, faq = _build_children(payload)
        course.images.extend(images)
        course.badges.extend(badges)
        course.faq.extend(faq)
        await self.session.flush()

        await self._persist()
        return await self._reload(pk)

    # DELETE -----------------------------------------------------------------
    async def delete(self, pk: str) -> None:
        record = await self.get(pk)
        await self.session.delete(record)
        await self._persist()
