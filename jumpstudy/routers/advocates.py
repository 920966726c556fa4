"""Youth advocate profiles: self-service, moderation and the public listing."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import (
    is_platform_admin,
    require_platform_admin,
    require_roles,
)
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import AdvocateProfile, User
from jumpstudy.models.schemas import ProfilePayload, ProfileReview
from jumpstudy.repositories.advocate_repo import (
    AdvocateProfileRepository,
    ProfileExistsError,
    ProfileNotFoundError,
)

router = APIRouter(tags=["Advocates"])

require_advocate = require_roles(Role.YOUTH_ADVOCATE)
require_moderator = require_roles(Role.PLATFORM_ADMIN, Role.ORGANIZATION_ADMIN)


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> AdvocateProfileRepository:
    return AdvocateProfileRepository(session)


def _moderation_scope(user: User) -> Optional[str]:
    """Organization id an org admin is limited to; None for platform admins."""
    if is_platform_admin(user):
        return None
    if not user.organization_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return user.organization_id


async def _load_in_scope(
    repo: AdvocateProfileRepository, profile_id: str, user: User
) -> AdvocateProfile:
    try:
        profile = await repo.get(profile_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    scope = _moderation_scope(user)
    if scope is not None and (
        profile.user is None or profile.user.organization_id != scope
    ):
        raise HTTPException(status_code=403, detail="Unauthorized")
    return profile


# Own profile --------------------------------------------------------------


@router.get("/advocate/profile")
async def get_own_profile(
    user: User = Depends(require_advocate),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    profile = await repo.get_for_user(user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile.to_dict()


@router.post("/advocate/profile", status_code=status.HTTP_201_CREATED)
async def create_own_profile(
    payload: ProfilePayload,
    user: User = Depends(require_advocate),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    try:
        profile = await repo.create(user.id, payload)
    except ProfileExistsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return profile.to_dict()


@router.put("/advocate/profile")
async def update_own_profile(
    payload: ProfilePayload,
    user: User = Depends(require_advocate),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    try:
        profile = await repo.update_own(user.id, payload)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile.to_dict()


# Moderation ---------------------------------------------------------------


@router.get("/admin/profiles")
async def list_profiles(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    user: User = Depends(require_moderator),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    profiles, total = await repo.list_paginated(
        page=page,
        limit=limit,
        status=status,
        organization_id=_moderation_scope(user),
    )
    pages = (total + limit - 1) // limit
    return {
        "profiles": [p.to_dict() for p in profiles],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages,
        },
    }


@router.get("/admin/profiles/{profile_id}")
async def get_profile(
    profile_id: str,
    user: User = Depends(require_moderator),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    profile = await _load_in_scope(repo, profile_id, user)
    return profile.to_dict()


@router.patch("/admin/profiles/{profile_id}")
async def review_profile(
    profile_id: str,
    payload: ProfileReview,
    user: User = Depends(require_moderator),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    await _load_in_scope(repo, profile_id, user)
    profile = await repo.review(
        profile_id, payload.status, user.id, payload.reviewNotes
    )
    return profile.to_dict()


@router.delete("/admin/profiles/{profile_id}")
async def delete_profile(
    profile_id: str,
    _: User = Depends(require_platform_admin),
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    try:
        await repo.delete(profile_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True}


# Public -------------------------------------------------------------------


@router.get("/advocates/public")
async def list_public_advocates(
    repo: AdvocateProfileRepository = Depends(_get_repo),
):
    return [p.to_public_dict() for p in await repo.list_public()]
