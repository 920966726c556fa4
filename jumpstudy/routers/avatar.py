"""Avatar generation endpoint."""
from fastapi import APIRouter, Depends, HTTPException

from jumpstudy.models.schemas import AvatarRequest
from jumpstudy.services.avatar import UnknownStyleError, generate_avatar
from jumpstudy.utils.feature_flags import require_feature

router = APIRouter(prefix="/avatar", tags=["Avatar"])


@router.post("/generate", dependencies=[Depends(require_feature("avatar_generation"))])
async def generate(payload: AvatarRequest):
    if not payload.style or not payload.seed:
        raise HTTPException(status_code=400, detail="Style and seed are required")
    try:
        return generate_avatar(payload.style, payload.seed, payload.size)
    except UnknownStyleError as e:
        raise HTTPException(status_code=400, detail=str(e))
