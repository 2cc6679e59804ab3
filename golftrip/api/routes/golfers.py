"""Golfer roster routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user, require_admin
from golftrip.api.routes import resolve_year
from golftrip.database.db import get_db_session
from golftrip.services import golfer_service
from golftrip.models.schemas import GolferCreate, GolferUpdate, GolferResponse, MessageResponse

router = APIRouter()


@router.get("/api/golfers", response_model=List[GolferResponse])
async def list_golfers(
    year: Optional[int] = Query(None),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """All golfers, newest first, with their status for ``year`` when they have one."""
    year = resolve_year(year)
    golfers = await golfer_service.list_golfers(session)
    statuses = {s.golfer_id: s for s in await golfer_service.list_statuses(session, year)}
    return [golfer_service.golfer_to_dict(g, statuses.get(g.id)) for g in golfers]


@router.get("/api/golfers/{golfer_id}", response_model=GolferResponse)
async def get_golfer(
    golfer_id: int,
    year: Optional[int] = Query(None),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    golfer = await golfer_service.get_golfer(session, golfer_id)
    status = await golfer_service.get_status(session, golfer_id, resolve_year(year))
    return golfer_service.golfer_to_dict(golfer, status)


@router.post("/api/golfers", response_model=GolferResponse, status_code=201)
async def create_golfer(
    payload: GolferCreate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await golfer_service.create_golfer(
        session,
        payload.name,
        email=payload.email,
        phone=payload.phone,
        cabin=payload.cabin,
        year=payload.year,
    )


@router.put("/api/golfers/{golfer_id}", response_model=GolferResponse)
async def update_golfer(
    golfer_id: int,
    payload: GolferUpdate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await golfer_service.update_golfer(
        session,
        golfer_id,
        payload.name,
        email=payload.email,
        phone=payload.phone,
        cabin=payload.cabin,
        year=payload.year,
    )


@router.delete("/api/golfers/{golfer_id}", response_model=MessageResponse)
async def delete_golfer(
    golfer_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    await golfer_service.delete_golfer(session, golfer_id)
    return MessageResponse(message="Golfer deleted")
