"""
Draft review workflow

Applies an administrator's decision to a ContentDraft. Approval materializes
the draft into a live Organization or Course and deletes the draft in a single
transaction; rejection records the reviewer's notes and brings a course that
was taken offline for an edit request back online.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import TRANSACTION_TIMEOUT_SECONDS
from jumpstudy.models.enums import CourseStatus, DraftStatus, DraftType
from jumpstudy.models.persisted import ContentDraft, Course, User
from jumpstudy.models.schemas import CoursePayload, OrganizationPayload
from jumpstudy.repositories.course_repo import CourseRepository
from jumpstudy.repositories.draft_repo import DraftRepository
from jumpstudy.repositories.organization_repo import OrganizationRepository
from jumpstudy.services.catalog import invalidate_catalog

logger = logging.getLogger(__name__)

# Bookkeeping keys carried in draft content, never part of the entity
_REFERENCE_KEYS = (
    "originalCourseId",
    "originalCourseStatus",
    "originalOrganizationId",
)


class InvalidReviewError(Exception):
    """Raised for a review request that cannot be applied as submitted."""


class ReviewTimeoutError(Exception):
    """Raised when the approval transaction runs past TRANSACTION_TIMEOUT_SECONDS."""


def _entity_fields(content: Dict[str, Any]) -> Dict[str, Any]:
    fields = {k: v for k, v in content.items() if k not in _REFERENCE_KEYS}
    # Older drafts stored plain image URLs under "images"
    if "imageUrls" not in fields and isinstance(fields.get("images"), list):
        fields["imageUrls"] = [
            url for url in fields.pop("images") if isinstance(url, str)
        ]
    return fields


def _merged_content(
    draft: ContentDraft, edited: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    original = dict(draft.content or {})
    if edited is None:
        return original
    merged = dict(edited)
    for key in _REFERENCE_KEYS:
        if key in original and key not in merged:
            merged[key] = original[key]
    return merged


def _course_fields(course: Course) -> Dict[str, Any]:
    current = course.to_dict()
    fields = {k: v for k, v in current.items() if k in CoursePayload.model_fields}
    fields["imageUrls"] = current["images"]
    return fields


async def _apply_approval(
    session: AsyncSession,
    draft_id: str,
    edited_content: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    drafts = DraftRepository(session, autocommit=False)
    try:
        draft = await drafts.get(draft_id)
        content = _merged_content(draft, edited_content)

        if draft.type == DraftType.ORGANIZATION.value:
            payload = OrganizationPayload.model_validate(_entity_fields(content))
            organizations = OrganizationRepository(session, autocommit=False)
            original_id = content.get("originalOrganizationId")
            if original_id:
                organization = await organizations.update(original_id, payload)
            else:
                organization = await organizations.create(payload)
            result = {"organization": organization.to_dict()}
        else:
            fields = _entity_fields(content)
            fields.setdefault("organizationId", draft.organization_id)
            payload = CoursePayload.model_validate(fields)
            courses = CourseRepository(session, autocommit=False)
            original_id = content.get("originalCourseId")
            if original_id:
                course = await courses.update(
                    original_id, payload, status=CourseStatus.PUBLISHED
                )
            else:
                course = await courses.create(
                    payload,
                    created_by=draft.created_by,
                    status=CourseStatus.PUBLISHED,
                )
            result = {"course": course.to_dict()}

        await drafts.discard(draft_id)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return result


async def approve_draft(
    session: AsyncSession,
    draft_id: str,
    edited_content: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    try:
        result = await asyncio.wait_for(
            _apply_approval(session, draft_id, edited_content),
            timeout=TRANSACTION_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        await session.rollback()
        logger.error(f"Approval of draft {draft_id} timed out")
        raise ReviewTimeoutError("Draft approval timed out")
    invalidate_catalog()
    logger.info(f"Draft {draft_id} approved")
    return result


async def reject_draft(
    session: AsyncSession, draft_id: str, reviewer: User, notes: str
) -> ContentDraft:
    drafts = DraftRepository(session, autocommit=False)
    try:
        draft = await drafts.review(
            draft_id, DraftStatus.REJECTED, reviewer.id, notes
        )
        content = draft.content or {}
        original_id = content.get("originalCourseId")
        if original_id:
            course = await session.get(Course, original_id)
            if course and course.status == CourseStatus.UNDER_REVIEW.value:
                course.status = content.get(
                    "originalCourseStatus", CourseStatus.PUBLISHED.value
                )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    invalidate_catalog()
    logger.info(f"Draft {draft_id} rejected by {reviewer.id}")
    return draft


async def review_draft(
    session: AsyncSession,
    draft_id: str,
    status: str,
    reviewer: User,
    notes: Optional[str] = None,
    edited_content: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Dispatch an admin review decision; returns the response body."""
    try:
        decision = DraftStatus(status)
    except ValueError:
        raise InvalidReviewError("Invalid status")

    if decision == DraftStatus.REJECTED:
        if not notes or not notes.strip():
            raise InvalidReviewError(
                "Review notes are required when rejecting a draft"
            )
        draft = await reject_draft(session, draft_id, reviewer, notes.strip())
        return {"draft": draft.to_dict()}

    if decision == DraftStatus.APPROVED:
        result = await approve_draft(session, draft_id, edited_content)
        return {"approved": True, **result}

    draft = await DraftRepository(session).review(
        draft_id, decision, reviewer.id, notes
    )
    return {"draft": draft.to_dict()}


async def submit_course_edit_request(
    session: AsyncSession,
    author: User,
    course_id: str,
    changes: Dict[str, Any],
    title: Optional[str] = None,
) -> ContentDraft:
    """
    Stage changes to a live course and take it offline until reviewed.

    The changes are merged over the course's current fields and the result
    must pass CoursePayload validation, so a partial edit stages a complete
    course that approval can publish. Invalid changes raise
    pydantic.ValidationError before the course status is touched.
    """
    courses = CourseRepository(session, autocommit=False)
    drafts = DraftRepository(session, autocommit=False)
    try:
        course = await courses.get(course_id)
        staged = CoursePayload.model_validate(
            {**_course_fields(course), **_entity_fields(changes)}
        )
        previous_status = course.status
        if previous_status == CourseStatus.UNDER_REVIEW.value:
            previous_status = CourseStatus.PUBLISHED.value
        draft = await drafts.create_course_edit_request(
            author,
            course_id=course.id,
            course_status=previous_status,
            title=title or f"Edit: {course.title}",
            changes=staged.model_dump(mode="json"),
        )
        course.status = CourseStatus.UNDER_REVIEW.value
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    invalidate_catalog()
    return draft
