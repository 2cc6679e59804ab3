"""Admin user management."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import require_admin
from golftrip.database.db import get_db_session
from golftrip.services import user_service
from golftrip.models.schemas import UserCreate, UserUpdate, UserResponse, MessageResponse
from golftrip.utils.errors import NotFound

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/users", response_model=List[UserResponse])
async def list_users(
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await user_service.list_users(session)


@router.post("/api/users", response_model=UserResponse, status_code=201)
async def create_user(
    payload: UserCreate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await user_service.create_user(
        session, payload.email, payload.password, payload.name, is_admin=payload.is_admin
    )


@router.get("/api/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.put("/api/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit a user, including admin rights and the linked golfer."""
    return await user_service.update_user(
        session,
        user_id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        is_admin=payload.is_admin,
        golfer_id=payload.golfer_id,
        create_new_golfer=payload.create_new_golfer,
        new_golfer_name=payload.new_golfer_name,
        new_golfer_phone=payload.new_golfer_phone,
    )


@router.delete("/api/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    await user_service.delete_user(session, user_id, acting_user_id=admin["id"])
    return MessageResponse(message="User deleted")
