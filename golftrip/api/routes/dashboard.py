"""Home dashboard and health check."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user
from golftrip.api.routes import resolve_year
from golftrip.database.db import get_db_session
from golftrip.services import (
    champion_service,
    foursome_service,
    golfer_service,
    standings_service,
    weather_service,
)
from golftrip.models.schemas import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/dashboard")
async def get_dashboard(
    year: Optional[int] = Query(None),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Everything the home page shows for ``year``: the viewer's golfer, total
    and next tee time, the leader, cabins, last year's champion and the
    weather at the course (None when unavailable).
    """
    year = resolve_year(year)

    golfer = None
    total_score = None
    next_tee_time = None
    if user.get("golfer_id"):
        golfer = golfer_service.golfer_to_dict(await golfer_service.get_golfer(session, user["golfer_id"]))
        standing = await standings_service.golfer_standing(session, user["golfer_id"], year)
        total_score = standing["total_score"] if standing else None
        next_tee_time = await foursome_service.next_tee_time(session, user["golfer_id"])

    return {
        "year": year,
        "user": user,
        "golfer": golfer,
        "total_score": total_score,
        "next_tee_time": next_tee_time,
        "leader": await standings_service.tournament_leader(session, year),
        "cabins": await golfer_service.cabin_assignments(session, year),
        "previous_champion": await champion_service.get_champion_for_year(session, year - 1),
        "weather": await weather_service.get_current_weather(),
    }


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="healthy", message="Golf Trip API is running")
