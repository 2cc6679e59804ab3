"""Standings and per-year golfer status routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user, require_admin
from golftrip.api.routes import resolve_year
from golftrip.database.db import get_db_session
from golftrip.services import golfer_service, standings_service
from golftrip.models.schemas import (
    CabinUpdate,
    GolferStatusResponse,
    GolferStatusToggle,
    GolferYearEnrollment,
    StandingsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/scores", response_model=StandingsResponse)
async def get_standings(
    year: Optional[int] = Query(None),
    sort: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Leaderboard for a year. Unknown ``sort``/``order`` values fall back to
    score ascending. Non-admins only see golfers active that year.
    """
    return await standings_service.load_standings(
        session, resolve_year(year), viewer_is_admin=user["is_admin"], sort=sort, order=order
    )


@router.post("/api/scores/toggle-status", response_model=GolferStatusResponse)
async def toggle_golfer_status(
    payload: GolferStatusToggle,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    status = await golfer_service.toggle_status(
        session, payload.golfer_id, payload.year, payload.current_status
    )
    logger.info(
        f"Golfer {payload.golfer_id} {'activated' if status.is_active else 'deactivated'} for {payload.year}"
    )
    return golfer_service.status_to_dict(status)


@router.post("/api/scores/cabin", response_model=GolferStatusResponse)
async def update_golfer_cabin(
    payload: CabinUpdate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    status = await golfer_service.set_cabin(session, payload.golfer_id, payload.year, payload.cabin)
    return golfer_service.status_to_dict(status)


@router.post("/api/scores/enroll", response_model=GolferStatusResponse)
async def enroll_golfer(
    payload: GolferYearEnrollment,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Add a golfer to a tournament year."""
    status = await golfer_service.enroll(
        session, payload.golfer_id, payload.year, is_active=payload.is_active, cabin=payload.cabin
    )
    return golfer_service.status_to_dict(status)
