"""Repository layer for Organization persistence."""
from __future__ import annotations
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from jumpstudy.models.persisted import Course, Organization, User
from jumpstudy.models.schemas import OrganizationPayload
from jumpstudy.utils.slugs import ensure_unique_slug, generate_slug

_FIELDS = {
    "name": "name",
    "description": "description",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "facebookPage": "facebook_page",
    "latitude": "latitude",
    "longitude": "longitude",
    "district": "district",
    "province": "province",
    "logoImage": "logo_image",
}


class OrganizationNotFoundError(Exception):
    """Raised when an organization could not be located."""


class OrganizationInUseError(Exception):
    """Raised when deleting an organization that still owns courses or users."""


class OrganizationRepository:
    def __init__(self, session: AsyncSession, autocommit: bool = True):
        self.session = session
        self.autocommit = autocommit

    async def _persist(self) -> None:
        if self.autocommit:
            await self.session.commit()
        else:
            await self.session.flush()

    async def slug_exists(self, slug: str) -> bool:
        result = await self.session.execute(
            select(Organization.id).where(Organization.slug == slug)
        )
        return result.first() is not None

    # CREATE -----------------------------------------------------------------
    async def create(self, payload: OrganizationPayload) -> Organization:
        slug = await ensure_unique_slug(
            generate_slug(payload.name) or "organization", self.slug_exists
        )
        record = Organization(slug=slug)
        for attr, column in _FIELDS.items():
            setattr(record, column, getattr(payload, attr))
        self.session.add(record)
        await self._persist()
        await self.session.refresh(record)
        return record

    # READ -------------------------------------------------------------------
    async def list(self) -> Sequence[Organization]:
        result = await self.session.execute(
            select(Organization).order_by(Organization.name.asc())
        )
        return result.scalars().all()

    async def get(self, pk: str) -> Organization:
        record = await self.session.get(Organization, pk)
        if not record:
            raise OrganizationNotFoundError
        return record

    async def get_optional(self, pk: Optional[str]) -> Optional[Organization]:
        if not pk:
            return None
        return await self.session.get(Organization, pk)

    async def list_courses(self, pk: str) -> Sequence[Course]:
        await self.get(pk)
        result = await self.session.execute(
            select(Course)
            .where(Course.organization_id == pk)
            .order_by(Course.created_at.desc())
        )
        return result.scalars().all()

    async def list_users(self, pk: str) -> Sequence[User]:
        await self.get(pk)
        result = await self.session.execute(
            select(User)
            .where(User.organization_id == pk)
            .order_by(User.name.asc())
        )
        return result.scalars().all()

    # UPDATE -----------------------------------------------------------------
    async def update(
        self, pk: str, payload: OrganizationPayload
    ) -> Organization:
        record = await self.get(pk)
        for attr, column in _FIELDS.items():
            setattr(record, column, getattr(payload, attr))
        await self._persist()
        await self.session.refresh(record)
        return record

    # DELETE -----------------------------------------------------------------
    async def delete(self, pk: str) -> None:
        record = await self.get(pk)
        courses = await self.session.scalar(
            select(func.count(Course.id)).where(Course.organization_id == pk)
        )
        users = await self.session.scalar(
            select(func.count(User.id)).where(User.organization_id == pk)
        )
        if courses or users:
            raise OrganizationInUseError(
                "Cannot delete organization with associated courses or users"
            )
        await self.session.delete(record)
        await self._persist()
