"""Platform-admin management of user accounts and the admin allowlist."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import require_platform_admin
from jumpstudy.models.persisted import User
from jumpstudy.models.schemas import AllowListCreate, UserUpdate
from jumpstudy.repositories.organization_repo import OrganizationNotFoundError
from jumpstudy.repositories.user_repo import (
    AllowListConflictError,
    AllowListNotFoundError,
    AllowListRepository,
    LastPlatformAdminError,
    SelfModificationError,
    UserNotFoundError,
    UserRepository,
)

router = APIRouter(prefix="/admin", tags=["Admin"])


async def _get_users(
    session: AsyncSession = Depends(get_session),
) -> UserRepository:
    return UserRepository(session)


async def _get_allowlist(
    session: AsyncSession = Depends(get_session),
) -> AllowListRepository:
    return AllowListRepository(session)


# Users --------------------------------------------------------------------


@router.get("/users")
async def list_users(
    role: Optional[str] = None,
    status: Optional[str] = None,
    _: User = Depends(require_platform_admin),
    repo: UserRepository = Depends(_get_users),
):
    users = await repo.list(role=role, status=status)
    return [u.to_dict() for u in users]


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    admin: User = Depends(require_platform_admin),
    repo: UserRepository = Depends(_get_users),
):
    try:
        user = await repo.update(
            user_id,
            admin,
            status=payload.status,
            role=payload.role,
            organization_id=payload.organizationId,
            set_organization="organizationId" in payload.model_fields_set,
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except OrganizationNotFoundError:
        raise HTTPException(status_code=400, detail="Organization not found")
    except (SelfModificationError, LastPlatformAdminError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user.to_dict()


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_platform_admin),
    repo: UserRepository = Depends(_get_users),
):
    try:
        await repo.delete(user_id, admin)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except (SelfModificationError, LastPlatformAdminError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


# Allowlist ----------------------------------------------------------------


@router.get("/allowlist")
async def list_allowlist(
    _: User = Depends(require_platform_admin),
    repo: AllowListRepository = Depends(_get_allowlist),
):
    return [entry.to_dict() for entry in await repo.list()]


@router.post("/allowlist", status_code=status.HTTP_201_CREATED)
async def add_allowlist_entry(
    payload: AllowListCreate,
    admin: User = Depends(require_platform_admin),
    repo: AllowListRepository = Depends(_get_allowlist),
):
    try:
        entry = await repo.create(payload.email, payload.notes, admin.id)
    except AllowListConflictError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return entry.to_dict()


@router.delete("/allowlist")
async def remove_allowlist_entry(
    id: Optional[str] = None,
    _: User = Depends(require_platform_admin),
    repo: AllowListRepository = Depends(_get_allowlist),
):
    if not id:
        raise HTTPException(status_code=400, detail="ID is required")
    try:
        await repo.delete(id)
    except LastPlatformAdminError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AllowListNotFoundError:
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"success": True}
