"""Courses router: admin CRUD, edit requests and the public catalog."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import (
    get_current_user,
    is_org_admin_of,
    is_platform_admin,
    require_roles,
)
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import User
from jumpstudy.models.schemas import CourseEditRequest, CoursePayload
from jumpstudy.repositories.course_repo import (
    CourseNotFoundError,
    CourseOrganizationError,
    CourseRepository,
)
from jumpstudy.services import catalog
from jumpstudy.services.draft_review import submit_course_edit_request
from jumpstudy.utils.validation import format_validation_errors

router = APIRouter(prefix="/courses", tags=["Courses"])

# Helpers ------------------------------------------------------------------


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> CourseRepository:
    return CourseRepository(session)


def _ensure_can_manage(user: User, organization_id: Optional[str]) -> None:
    if is_platform_admin(user) or is_org_admin_of(user, organization_id):
        return
    raise HTTPException(status_code=403, detail="Unauthorized")


def _scope_payload(user: User, payload: CoursePayload) -> CoursePayload:
    # Organization admins always publish under their own organization
    if not is_platform_admin(user) and not payload.organizationId:
        payload.organizationId = user.organization_id
    _ensure_can_manage(user, payload.organizationId)
    return payload


# Public routes ------------------------------------------------------------


@router.get("/public")
async def public_catalog(
    search: str = "",
    badges: Optional[str] = Query(None, description="Comma-separated badge texts"),
    sort: str = catalog.DEFAULT_SORT,
    page: int = Query(1, ge=1),
    limit: int = Query(catalog.DEFAULT_LIMIT, ge=1),
    session: AsyncSession = Depends(get_session),
):
    selected = [b for b in (badges or "").split(",") if b.strip()]
    return await catalog.query_catalog(
        session,
        search=search,
        badges=selected,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get("/badges")
async def list_badges(repo: CourseRepository = Depends(_get_repo)):
    return await repo.distinct_badges()


@router.get("/slug/{slug:path}")
async def get_course_by_slug(
    slug: str, repo: CourseRepository = Depends(_get_repo)
):
    try:
        course = await repo.get_by_slug(slug)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    return course.to_dict()


# Admin routes -------------------------------------------------------------


@router.get("")
async def list_courses(
    user: User = Depends(get_current_user),
    repo: CourseRepository = Depends(_get_repo),
):
    if is_platform_admin(user):
        courses = await repo.list()
    elif user.role == Role.ORGANIZATION_ADMIN.value and user.organization_id:
        courses = await repo.list(organization_id=user.organization_id)
    else:
        raise HTTPException(status_code=403, detail="Unauthorized")
    return [c.to_dict() for c in courses]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CoursePayload,
    user: User = Depends(
        require_roles(Role.PLATFORM_ADMIN, Role.ORGANIZATION_ADMIN)
    ),
    repo: CourseRepository = Depends(_get_repo),
):
    payload = _scope_payload(user, payload)
    try:
        course = await repo.create(payload, created_by=user.id)
    except CourseOrganizationError:
        raise HTTPException(status_code=400, detail="Organization not found")
    catalog.invalidate_catalog()
    return course.to_dict()


@router.get("/{course_id}")
async def get_course(
    course_id: str, repo: CourseRepository = Depends(_get_repo)
):
    try:
        course = await repo.get(course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    return course.to_dict()


@router.put("/{course_id}")
async def update_course(
    course_id: str,
    payload: CoursePayload,
    user: User = Depends(
        require_roles(Role.PLATFORM_ADMIN, Role.ORGANIZATION_ADMIN)
    ),
    repo: CourseRepository = Depends(_get_repo),
):
    try:
        existing = await repo.get(course_id)
        _ensure_can_manage(user, existing.organization_id)
        payload = _scope_payload(user, payload)
        course = await repo.update(course_id, payload)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    except CourseOrganizationError:
        raise HTTPException(status_code=400, detail="Organization not found")
    catalog.invalidate_catalog()
    return course.to_dict()


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    user: User = Depends(
        require_roles(Role.PLATFORM_ADMIN, Role.ORGANIZATION_ADMIN)
    ),
    repo: CourseRepository = Depends(_get_repo),
):
    try:
        existing = await repo.get(course_id)
        _ensure_can_manage(user, existing.organization_id)
        await repo.delete(course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    catalog.invalidate_catalog()
    return {"success": True}


@router.post("/{course_id}/edit-request", status_code=status.HTTP_201_CREATED)
async def request_course_edit(
    course_id: str,
    payload: CourseEditRequest,
    user: User = Depends(require_roles(Role.ORGANIZATION_ADMIN)),
    repo: CourseRepository = Depends(_get_repo),
    session: AsyncSession = Depends(get_session),
):
    try:
        course = await repo.get(course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    if not is_org_admin_of(user, course.organization_id):
        raise HTTPException(status_code=403, detail="Unauthorized")

    try:
        draft = await submit_course_edit_request(
            session, user, course_id, payload.changes, payload.title
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Course changes are invalid",
                "details": format_validation_errors(e.errors()),
            },
        )
    return draft.to_dict()
