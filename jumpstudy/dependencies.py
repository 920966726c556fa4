"""Request identity and role guards shared by the routers.

The upstream auth layer terminates the session cookie and forwards the
signed-in user's id in ``X-User-Id``; this module only resolves that id
against the users table.
"""
from __future__ import annotations
import hmac
import os
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.models.enums import Role, UserStatus
from jumpstudy.models.persisted import User

USER_HEADER = "X-User-Id"


async def get_optional_user(
    x_user_id: Optional[str] = Header(None, alias=USER_HEADER),
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    if not x_user_id:
        return None
    result = await session.execute(select(User).where(User.id == x_user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status == UserStatus.SUSPENDED.value:
        return None
    return user


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
        )
    return user


def require_roles(*roles: Role):
    """Dependency factory: 403 unless the caller holds one of ``roles``."""
    allowed = {r.value for r in roles}

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized"
            )
        return user

    return dependency


require_platform_admin = require_roles(Role.PLATFORM_ADMIN)


def is_platform_admin(user: User) -> bool:
    return user.role == Role.PLATFORM_ADMIN.value


def is_org_admin_of(user: User, organization_id: Optional[str]) -> bool:
    return (
        user.role == Role.ORGANIZATION_ADMIN.value
        and user.organization_id is not None
        and user.organization_id == organization_id
    )

AUTH_HOOK_HEADER = "X-Auth-Hook-Secret"


async def require_auth_hook(
    secret: Optional[str] = Header(None, alias=AUTH_HOOK_HEADER),
) -> None:
    """Only the upstream auth layer, holding ``AUTH_HOOK_SECRET``, may call."""
    expected = os.getenv("AUTH_HOOK_SECRET")
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sign-in hook is not configured",
        )
    if not secret or not hmac.compare_digest(secret, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
        )
