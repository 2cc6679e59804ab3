"""Foursome routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user, require_admin
from golftrip.database.db import get_db_session
from golftrip.services import foursome_service
from golftrip.models.schemas import FoursomeRequest, FoursomeResponse, MessageResponse

router = APIRouter()


def _validate(payload: FoursomeRequest) -> foursome_service.ValidatedFoursome:
    return foursome_service.validate_foursome(
        round=payload.round,
        course=payload.course,
        tee_time_local=payload.tee_time,
        golfer_slots=payload.golfer_slots,
        year=payload.year,
        score=payload.score,
    )


@router.get("/api/foursomes", response_model=List[FoursomeResponse])
async def list_foursomes(
    year: Optional[int] = Query(None),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Foursomes, newest first; every year unless ``year`` is given."""
    foursomes = await foursome_service.list_foursomes(session, year=year)
    return [foursome_service.foursome_to_dict(f) for f in foursomes]


@router.get("/api/foursomes/{foursome_id}", response_model=FoursomeResponse)
async def get_foursome(
    foursome_id: int,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return foursome_service.foursome_to_dict(await foursome_service.get_foursome(session, foursome_id))


@router.post("/api/foursomes", response_model=FoursomeResponse, status_code=201)
async def create_foursome(
    payload: FoursomeRequest,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Tee time is Eastern Time wall-clock (``YYYY-MM-DDTHH:MM``)."""
    return await foursome_service.create_foursome(session, _validate(payload))


@router.put("/api/foursomes/{foursome_id}", response_model=FoursomeResponse)
async def update_foursome(
    foursome_id: int,
    payload: FoursomeRequest,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await foursome_service.update_foursome(session, foursome_id, _validate(payload))


@router.delete("/api/foursomes/{foursome_id}", response_model=MessageResponse)
async def delete_foursome(
    foursome_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    await foursome_service.delete_foursome(session, foursome_id)
    return MessageResponse(message="Foursome deleted")
