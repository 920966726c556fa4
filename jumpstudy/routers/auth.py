"""Sign-in hook called by the upstream auth layer after OAuth succeeds.

The response carries the user's id, which is what ``X-User-Id`` trusts, so
the route answers only requests bearing the shared ``AUTH_HOOK_SECRET``.
"""
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from jumpstudy.db.config import get_session
from jumpstudy.dependencies import require_auth_hook
from jumpstudy.models.schemas import SignInRequest
from jumpstudy.repositories.user_repo import UserRepository, UserSuspendedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/sign-in", dependencies=[Depends(require_auth_hook)])
async def sign_in(
    payload: SignInRequest, session: AsyncSession = Depends(get_session)
):
    try:
        user = await UserRepository(session).sign_in(
            payload.email, payload.name, payload.image
        )
    except UserSuspendedError as e:
        logger.warning(f"Rejected sign-in for suspended account {payload.email}")
        raise HTTPException(status_code=403, detail=str(e))
    logger.info(f"User signed in: {user.email} ({user.role})")
    return user.to_dict()
