"""Repository layer for youth advocate profiles."""
from __future__ import annotations
from datetime import datetime
from typing import Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from jumpstudy.models.enums import ProfileStatus
from jumpstudy.models.persisted import AdvocateProfile, User
from jumpstudy.models.schemas import ProfilePayload


class ProfileNotFoundError(Exception):
    """Raised when an advocate profile could not be located."""


class ProfileExistsError(Exception):
    """Raised when a user already owns a profile."""


class AdvocateProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _reload(self, pk: str) -> AdvocateProfile:
        result = await self.session.execute(
            select(AdvocateProfile)
            .where(AdvocateProfile.id == pk)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # CREATE -----------------------------------------------------------------
    async def create(
        self, user_id: str, payload: ProfilePayload
    ) -> AdvocateProfile:
        if await self.get_for_user(user_id) is not None:
            raise ProfileExistsError("Profile already exists")
        profile = AdvocateProfile(
            user_id=user_id,
            public_name=payload.publicName,
            bio=payload.bio,
            avatar_url=payload.avatarUrl,
            show_organization=payload.showOrganization,
            status=payload.status.value,
            submitted_at=(
                datetime.utcnow()
                if payload.status == ProfileStatus.PENDING else None
            ),
        )
        self.session.add(profile)
        await self.session.flush()
        profile_id = profile.id
        await self.session.commit()
        return await self._reload(profile_id)

    # READ -------------------------------------------------------------------
    async def get(self, pk: str) -> AdvocateProfile:
        record = await self.session.get(AdvocateProfile, pk)
        if not record:
            raise ProfileNotFoundError
        return record

    async def get_for_user(self, user_id: str) -> Optional[AdvocateProfile]:
        result = await self.session.execute(
            select(AdvocateProfile).where(AdvocateProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Tuple[Sequence[AdvocateProfile], int]:
        stmt = select(AdvocateProfile)
        count_stmt = select(func.count(AdvocateProfile.id))
        if organization_id is not None:
            stmt = stmt.join(User, User.id == AdvocateProfile.user_id).where(
                User.organization_id == organization_id
            )
            count_stmt = count_stmt.join(
                User, User.id == AdvocateProfile.user_id
            ).where(User.organization_id == organization_id)
        if status:
            stmt = stmt.where(AdvocateProfile.status == status)
            count_stmt = count_stmt.where(AdvocateProfile.status == status)

        total = await self.session.scalar(count_stmt) or 0
        result = await self.session.execute(
            stmt.order_by(AdvocateProfile.updated_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), total

    async def list_public(self) -> Sequence[AdvocateProfile]:
        result = await self.session.execute(
            select(AdvocateProfile)
            .where(AdvocateProfile.status == ProfileStatus.APPROVED.value)
            .order_by(AdvocateProfile.reviewed_at.desc())
        )
        return result.scalars().all()

    # UPDATE -----------------------------------------------------------------
    async def update_own(
        self, user_id: str, payload: ProfilePayload
    ) -> AdvocateProfile:
        profile = await self.get_for_user(user_id)
        if profile is None:
            raise ProfileNotFoundError
        profile.public_name = payload.publicName
        profile.bio = payload.bio
        profile.avatar_url = payload.avatarUrl
        profile.show_organization = payload.showOrganization

        # Any edit to an approved profile goes back through moderation
        if (
            payload.status == ProfileStatus.PENDING
            or profile.status == ProfileStatus.APPROVED.value
        ):
            profile.status = ProfileStatus.PENDING.value
            profile.submitted_at = datetime.utcnow()
        else:
            profile.status = payload.status.value
        await self.session.commit()
        return await self._reload(profile.id)

    async def review(
        self,
        pk: str,
        status: ProfileStatus,
        reviewer_id: str,
        notes: Optional[str] = None,
    ) -> AdvocateProfile:
        profile = await self.get(pk)
        profile.status = status.value
        profile.reviewed_by = reviewer_id
        profile.reviewed_at = datetime.utcnow()
        profile.review_notes = notes
        await self.session.commit()
        return await self._reload(pk)

    # DELETE -----------------------------------------------------------------
    async def delete(self, pk: str) -> None:
        profile = await self.get(pk)
        await self.session.delete(profile)
        await self.session.commit()
