"""Content drafts router for authors (advocates and organization admins)."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import (
    get_current_user,
    is_org_admin_of,
    is_platform_admin,
    require_roles,
)
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import ContentDraft, User
from jumpstudy.models.schemas import DraftCreate, DraftUpdate
from jumpstudy.repositories.draft_repo import (
    DraftNotFoundError,
    DraftRepository,
    DraftStateError,
)

router = APIRouter(prefix="/drafts", tags=["Drafts"])


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> DraftRepository:
    return DraftRepository(session)


async def _load(repo: DraftRepository, draft_id: str) -> ContentDraft:
    try:
        return await repo.get(draft_id)
    except DraftNotFoundError:
        raise HTTPException(status_code=404, detail="Draft not found")


def _ensure_author(user: User, draft: ContentDraft) -> None:
    if draft.created_by != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized")


@router.get("")
async def list_drafts(
    status: Optional[str] = None,
    type: Optional[str] = None,
    user: User = Depends(get_current_user),
    repo: DraftRepository = Depends(_get_repo),
):
    drafts = await repo.list_visible(user, status=status, draft_type=type)
    return [d.to_dict() for d in drafts]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_draft(
    payload: DraftCreate,
    user: User = Depends(
        require_roles(Role.YOUTH_ADVOCATE, Role.ORGANIZATION_ADMIN)
    ),
    repo: DraftRepository = Depends(_get_repo),
):
    draft = await repo.create(payload, user)
    return draft.to_dict()


@router.get("/{draft_id}")
async def get_draft(
    draft_id: str,
    user: User = Depends(get_current_user),
    repo: DraftRepository = Depends(_get_repo),
):
    draft = await _load(repo, draft_id)
    if not (
        is_platform_admin(user)
        or draft.created_by == user.id
        or is_org_admin_of(user, draft.organization_id)
    ):
        raise HTTPException(status_code=403, detail="Unauthorized")
    return draft.to_dict()


@router.patch("/{draft_id}")
async def update_draft(
    draft_id: str,
    payload: DraftUpdate,
    user: User = Depends(get_current_user),
    repo: DraftRepository = Depends(_get_repo),
):
    _ensure_author(user, await _load(repo, draft_id))
    try:
        draft = await repo.update(draft_id, payload)
    except DraftStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return draft.to_dict()


@router.delete("/{draft_id}")
async def delete_draft(
    draft_id: str,
    user: User = Depends(get_current_user),
    repo: DraftRepository = Depends(_get_repo),
):
    _ensure_author(user, await _load(repo, draft_id))
    try:
        await repo.delete(draft_id)
    except DraftStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


@router.post("/{draft_id}/copy", status_code=status.HTTP_201_CREATED)
async def copy_draft(
    draft_id: str,
    user: User = Depends(get_current_user),
    repo: DraftRepository = Depends(_get_repo),
):
    source = await _load(repo, draft_id)
    same_org = (
        source.organization_id is not None
        and source.organization_id == user.organization_id
    )
    if source.created_by != user.id and not same_org:
        raise HTTPException(status_code=403, detail="Unauthorized")
    draft = await repo.copy(draft_id, user)
    return draft.to_dict()
