"""Repository layer for ContentDraft persistence."""
from __future__ import annotations
from datetime import datetime
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import case, or_, select

from jumpstudy.models.enums import DraftStatus, DraftType, Role
from jumpstudy.models.persisted import ContentDraft, User
from jumpstudy.models.schemas import DraftCreate, DraftUpdate

# States in which the author may still edit a draft
EDITABLE_STATUSES = (
    DraftStatus.DRAFT.value,
    DraftStatus.PENDING.value,
    DraftStatus.REJECTED.value,
)


class DraftNotFoundError(Exception):
    """Raised when a draft could not be located."""


class DraftStateError(Exception):
    """Raised when a draft is not in a state that allows the operation."""


class DraftRepository:
    def __init__(self, session: AsyncSession, autocommit: bool = True):
        self.session = session
        self.autocommit = autocommit

    async def _persist(self) -> None:
        if self.autocommit:
            await self.session.commit()
        else:
            await self.session.flush()

    async def _reload(self, pk: str) -> ContentDraft:
        result = await self.session.execute(
            select(ContentDraft)
            .where(ContentDraft.id == pk)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # CREATE -----------------------------------------------------------------
    async def create(self, payload: DraftCreate, author: User) -> ContentDraft:
        draft = ContentDraft(
            title=payload.title,
            type=payload.type.value,
            content=payload.content,
            status=payload.status.value,
            created_by=author.id,
            organization_id=author.organization_id,
            submitted_at=datetime.utcnow(),
        )
        self.session.add(draft)
        await self.session.flush()
        draft_id = draft.id
        await self._persist()
        return await self._reload(draft_id)

    async def create_course_edit_request(
        self,
        author: User,
        course_id: str,
        course_status: str,
        title: str,
        changes: dict,
    ) -> ContentDraft:
        content = {
            **changes,
            "originalCourseId": course_id,
            "originalCourseStatus": course_status,
        }
        draft = ContentDraft(
            title=title,
            type=DraftType.COURSE.value,
            content=content,
            status=DraftStatus.PENDING.value,
            created_by=author.id,
            organization_id=author.organization_id,
            submitted_at=datetime.utcnow(),
        )
        self.session.add(draft)
        await self.session.flush()
        draft_id = draft.id
        await self._persist()
        return await self._reload(draft_id)

    async def copy(self, pk: str, author: User) -> ContentDraft:
        source = await self.get(pk)
        clone = ContentDraft(
            title=f"Copy of {source.title}",
            type=source.type,
            content=dict(source.content or {}),
            status=DraftStatus.DRAFT.value,
            created_by=author.id,
            organization_id=source.organization_id or author.organization_id,
            submitted_at=datetime.utcnow(),
        )
        self.session.add(clone)
        await self.session.flush()
        clone_id = clone.id
        await self._persist()
        return await self._reload(clone_id)

    # READ -------------------------------------------------------------------
    async def get(self, pk: str) -> ContentDraft:
        record = await self.session.get(ContentDraft, pk)
        if not record:
            raise DraftNotFoundError
        return record

    async def list_visible(
        self,
        user: User,
        status: Optional[str] = None,
        draft_type: Optional[str] = None,
    ) -> Sequence[ContentDraft]:
        stmt = select(ContentDraft)
        if user.role == Role.PLATFORM_ADMIN.value:
            pass
        elif (
            user.role == Role.ORGANIZATION_ADMIN.value
            and user.organization_id
        ):
            stmt = stmt.where(
                or_(
                    ContentDraft.organization_id == user.organization_id,
                    ContentDraft.created_by == user.id,
                )
            )
        else:
            stmt = stmt.where(ContentDraft.created_by == user.id)
        if status:
            stmt = stmt.where(ContentDraft.status == status)
        if draft_type:
            stmt = stmt.where(ContentDraft.type == draft_type)
        stmt = stmt.order_by(ContentDraft.submitted_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_for_review(self) -> Sequence[ContentDraft]:
        pending_first = case(
            (ContentDraft.status == DraftStatus.PENDING.value, 0), else_=1
        )
        result = await self.session.execute(
            select(ContentDraft).order_by(
                pending_first, ContentDraft.submitted_at.desc()
            )
        )
        return result.scalars().all()

    # UPDATE -----------------------------------------------------------------
    async def update(self, pk: str, payload: DraftUpdate) -> ContentDraft:
        draft = await self.get(pk)
        if draft.status not in EDITABLE_STATUSES:
            raise DraftStateError("Cannot edit draft in current status")
        if payload.title is not None:
            draft.title = payload.title
        if payload.content is not None:
            draft.content = payload.content
        if payload.status is not None:
            draft.status = payload.status.value
            if payload.status == DraftStatus.PENDING:
                draft.submitted_at = datetime.utcnow()
        await self._persist()
        return await self._reload(pk)

    async def review(
        self,
        pk: str,
        status: DraftStatus,
        reviewer_id: str,
        notes: Optional[str] = None,
    ) -> ContentDraft:
        draft = await self.get(pk)
        draft.status = status.value
        draft.reviewed_by = reviewer_id
        draft.reviewed_at = datetime.utcnow()
        if notes is not None:
            draft.review_notes = notes
        await self._persist()
        return await self._reload(pk)

    # DELETE -----------------------------------------------------------------
    async def delete(self, pk: str) -> None:
        draft = await self.get(pk)
        if draft.status == DraftStatus.APPROVED.value:
            raise DraftStateError("Cannot delete approved drafts")
        await self.session.delete(draft)
        await self._persist()

    async def discard(self, pk: str) -> None:
        """Remove a draft regardless of status (used once it is applied)."""
        draft = await self.get(pk)
        await self.session.delete(draft)
        await self._persist()
