"""Current user's own account."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user
from golftrip.database.db import get_db_session
from golftrip.services import user_service
from golftrip.models.schemas import UpdateProfileRequest, UserResponse

router = APIRouter()


@router.get("/api/account", response_model=UserResponse)
async def get_account(user: dict = Depends(get_current_user)):
    return user


@router.put("/api/account", response_model=UserResponse)
async def update_account(
    payload: UpdateProfileRequest,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update name, phone and avatar URL."""
    return await user_service.update_profile(
        session, user["id"], payload.name, phone=payload.phone, avatar=payload.avatar
    )
