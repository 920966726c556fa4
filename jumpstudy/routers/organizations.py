"""Organizations router."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import (
    get_current_user,
    is_org_admin_of,
    is_platform_admin,
    require_platform_admin,
)
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import User
from jumpstudy.models.schemas import OrganizationPayload
from jumpstudy.repositories.organization_repo import (
    OrganizationInUseError,
    OrganizationNotFoundError,
    OrganizationRepository,
)
from jumpstudy.services import catalog

router = APIRouter(prefix="/organizations", tags=["Organizations"])


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> OrganizationRepository:
    return OrganizationRepository(session)


def _ensure_member_admin(user: User, organization_id: str) -> None:
    if not (is_platform_admin(user) or is_org_admin_of(user, organization_id)):
        raise HTTPException(status_code=403, detail="Unauthorized")


@router.get("")
async def list_organizations(
    user: User = Depends(get_current_user),
    repo: OrganizationRepository = Depends(_get_repo),
):
    if is_platform_admin(user):
        return [o.to_dict() for o in await repo.list()]
    if user.role == Role.ORGANIZATION_ADMIN.value and user.organization_id:
        organization = await repo.get_optional(user.organization_id)
        return [organization.to_dict()] if organization else []
    raise HTTPException(status_code=403, detail="Unauthorized")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationPayload,
    _: User = Depends(require_platform_admin),
    repo: OrganizationRepository = Depends(_get_repo),
):
    organization = await repo.create(payload)
    return organization.to_dict()


@router.get("/{organization_id}")
async def get_organization(
    organization_id: str,
    user: User = Depends(get_current_user),
    repo: OrganizationRepository = Depends(_get_repo),
):
    _ensure_member_admin(user, organization_id)
    try:
        organization = await repo.get(organization_id)
    except OrganizationNotFoundError:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization.to_dict()


@router.put("/{organization_id}")
async def update_organization(
    organization_id: str,
    payload: OrganizationPayload,
    _: User = Depends(require_platform_admin),
    repo: OrganizationRepository = Depends(_get_repo),
):
    try:
        organization = await repo.update(organization_id, payload)
    except OrganizationNotFoundError:
        raise HTTPException(status_code=404, detail="Organization not found")
    catalog.invalidate_catalog()
    return organization.to_dict()


@router.delete("/{organization_id}")
async def delete_organization(
    organization_id: str,
    _: User = Depends(require_platform_admin),
    repo: OrganizationRepository = Depends(_get_repo),
):
    try:
        await repo.delete(organization_id)
    except OrganizationNotFoundError:
        raise HTTPException(status_code=404, detail="Organization not found")
    except OrganizationInUseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    catalog.invalidate_catalog()
    return {"success": True}


@router.get("/{organization_id}/courses")
async def list_organization_courses(
    organization_id: str,
    user: User = Depends(get_current_user),
    repo: OrganizationRepository = Depends(_get_repo),
):
    _ensure_member_admin(user, organization_id)
    try:
        courses = await repo.list_courses(organization_id)
    except OrganizationNotFoundError:
        raise HTTPException(status_code=404, detail="Organization not found")
    return [c.to_dict() for c in courses]


@router.get("/{organization_id}/users")
async def list_organization_users(
    organization_id: str,
    user: User = Depends(get_current_user),
    repo: OrganizationRepository = Depends(_get_repo),
):
    _ensure_member_admin(user, organization_id)
    try:
        users = await repo.list_users(organization_id)
    except OrganizationNotFoundError:
        raise HTTPException(status_code=404, detail="Organization not found")
    return [u.to_dict() for u in users]
