"""Repository layer for users and the platform-admin allowlist."""
from __future__ import annotations
import os
from datetime import datetime
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select, update

from jumpstudy.models.enums import Role, UserStatus
from jumpstudy.models.persisted import (
    AdminAllowList,
    AdvocateProfile,
    ContentDraft,
    Organization,
    User,
)
from jumpstudy.repositories.organization_repo import OrganizationNotFoundError
from jumpstudy.utils.feature_flags import is_feature_enabled


class UserNotFoundError(Exception):
    """Raised when a user could not be located."""


class LastPlatformAdminError(Exception):
    """Raised when an operation would leave no PLATFORM_ADMIN behind."""


class SelfModificationError(Exception):
    """Raised when an admin tries to suspend or delete their own account."""


class UserSuspendedError(Exception):
    """Raised when a suspended account tries to sign in."""


class AllowListNotFoundError(Exception):
    pass


class AllowListConflictError(Exception):
    pass


def admin_emails_from_env() -> set:
    raw = os.getenv("ADMIN_EMAILS", "")
    return {email.strip().lower() for email in raw.split(",") if email.strip()}


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # READ -------------------------------------------------------------------
    async def get(self, pk: str) -> User:
        record = await self.session.get(User, pk)
        if not record:
            raise UserNotFoundError
        return record

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def list(
        self, role: Optional[str] = None, status: Optional[str] = None
    ) -> Sequence[User]:
        stmt = select(User).order_by(User.created_at.desc())
        if role:
            stmt = stmt.where(User.role == role)
        if status:
            stmt = stmt.where(User.status == status)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_platform_admins(self) -> int:
        return await self.session.scalar(
            select(func.count(User.id)).where(
                User.role == Role.PLATFORM_ADMIN.value
            )
        ) or 0

    # UPDATE -----------------------------------------------------------------
    async def update(
        self,
        pk: str,
        acting_user: User,
        status: Optional[UserStatus] = None,
        role: Optional[Role] = None,
        organization_id: Optional[str] = None,
        set_organization: bool = False,
    ) -> User:
        user = await self.get(pk)
        if status == UserStatus.SUSPENDED and user.id == acting_user.id:
            raise SelfModificationError("Cannot suspend your own account")
        if (
            role is not None
            and role != Role.PLATFORM_ADMIN
            and user.role == Role.PLATFORM_ADMIN.value
            and await self.count_platform_admins() <= 1
        ):
            raise LastPlatformAdminError(
                "Cannot demote the last platform admin"
            )
        if set_organization and organization_id:
            if await self.session.get(Organization, organization_id) is None:
                raise OrganizationNotFoundError("Organization not found")

        if status is not None:
            user.status = status.value
        if role is not None:
            user.role = role.value
        if set_organization:
            user.organization_id = organization_id
        await self.session.commit()
        await self.session.refresh(user, attribute_names=["organization"])
        return user

    # DELETE -----------------------------------------------------------------
    async def delete(self, pk: str, acting_user: User) -> None:
        user = await self.get(pk)
        if user.id == acting_user.id:
            raise SelfModificationError("Cannot delete your own account")
        if (
            user.role == Role.PLATFORM_ADMIN.value
            and await self.count_platform_admins() <= 1
        ):
            raise LastPlatformAdminError(
                "Cannot delete the last platform admin"
            )

        try:
            await self.session.execute(
                delete(ContentDraft).where(ContentDraft.created_by == pk)
            )
            await self.session.execute(
                update(ContentDraft)
                .where(ContentDraft.reviewed_by == pk)
                .values(reviewed_by=None, reviewed_at=None, review_notes=None)
            )
            await self.session.execute(
                update(AdvocateProfile)
                .where(AdvocateProfile.reviewed_by == pk)
                .values(reviewed_by=None, reviewed_at=None, review_notes=None)
            )
            await self.session.execute(
                delete(AdvocateProfile).where(AdvocateProfile.user_id == pk)
            )
            await self.session.delete(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    # SIGN-IN ----------------------------------------------------------------
    async def is_authorized_admin(self, email: str) -> bool:
        email = email.lower()
        if is_feature_enabled("env_admin_emails") and (
            email in admin_emails_from_env()
        ):
            return True
        result = await self.session.execute(
            select(AdminAllowList.id).where(AdminAllowList.email == email)
        )
        return result.first() is not None

    async def sign_in(
        self, email: str, name: str = "", image: Optional[str] = None
    ) -> User:
        """Upsert the account and apply allowlist promotion."""
        user = await self.get_by_email(email)
        if user is None:
            user = User(email=email.lower(), name=name or email, image=image)
            self.session.add(user)
        elif user.status == UserStatus.SUSPENDED.value:
            raise UserSuspendedError("Account suspended")
        else:
            if name:
                user.name = name
            if image:
                user.image = image

        if await self.is_authorized_admin(email):
            user.role = Role.PLATFORM_ADMIN.value
        user.last_login_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(user, attribute_names=["organization"])
        return user


class AllowListRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> Sequence[AdminAllowList]:
        result = await self.session.execute(
            select(AdminAllowList).order_by(AdminAllowList.added_at.desc())
        )
        return result.scalars().all()

    async def create(
        self, email: str, notes: Optional[str], added_by: str
    ) -> AdminAllowList:
        existing = await self.session.execute(
            select(AdminAllowList).where(AdminAllowList.email == email)
        )
        if existing.scalar_one_or_none():
            raise AllowListConflictError("Email already in allowlist")

        entry = AdminAllowList(email=email, notes=notes, added_by=added_by)
        self.session.add(entry)

        # Existing accounts are promoted immediately
        await self.session.execute(
            update(User)
            .where(User.email == email)
            .values(role=Role.PLATFORM_ADMIN.value)
        )
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def delete(self, pk: str) -> None:
        admins = await self.session.scalar(
            select(func.count(User.id)).where(
                User.role == Role.PLATFORM_ADMIN.value
            )
        )
        if (admins or 0) <= 1:
            raise LastPlatformAdminError(
                "Cannot remove the last platform admin"
            )
        entry = await self.session.get(AdminAllowList, pk)
        if entry is None:
            raise AllowListNotFoundError
        # Removing an entry never demotes an existing account
        await self.session.delete(entry)
        await self.session.commit()
