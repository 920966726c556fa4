"""Platform-admin review of content drafts."""
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import require_platform_admin
from jumpstudy.models.persisted import User
from jumpstudy.models.schemas import DraftReview
from jumpstudy.repositories.course_repo import (
    CourseNotFoundError,
    CourseOrganizationError,
)
from jumpstudy.repositories.draft_repo import DraftNotFoundError, DraftRepository
from jumpstudy.repositories.organization_repo import OrganizationNotFoundError
from jumpstudy.services.draft_review import (
    InvalidReviewError,
    ReviewTimeoutError,
    review_draft,
)
from jumpstudy.utils.validation import format_validation_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/drafts", tags=["Admin"])


@router.get("")
async def list_drafts_for_review(
    _: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    drafts = await DraftRepository(session).list_for_review()
    return [d.to_dict() for d in drafts]


@router.get("/{draft_id}")
async def get_draft_for_review(
    draft_id: str,
    _: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    try:
        draft = await DraftRepository(session).get(draft_id)
    except DraftNotFoundError:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft.to_dict()


@router.patch("/{draft_id}")
async def review(
    draft_id: str,
    payload: DraftReview,
    reviewer: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    try:
        return await review_draft(
            session,
            draft_id,
            payload.status,
            reviewer,
            notes=payload.reviewNotes,
            edited_content=payload.content,
        )
    except InvalidReviewError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DraftNotFoundError:
        raise HTTPException(status_code=404, detail="Draft not found")
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Original course not found")
    except OrganizationNotFoundError:
        raise HTTPException(
            status_code=404, detail="Original organization not found"
        )
    except CourseOrganizationError:
        raise HTTPException(status_code=400, detail="Organization not found")
    except ValidationError as e:
        # Draft content failed the course/organization payload rules
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Draft content is invalid",
                "details": format_validation_errors(e.errors()),
            },
        )
    except ReviewTimeoutError:
        raise HTTPException(status_code=500, detail="Failed to update draft")
    except Exception as e:
        logger.error(f"Draft review failed for {draft_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update draft")
