"""Champion routes. Create and edit take multipart forms with an optional photo."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user, require_admin
from golftrip.api.routes import read_image_upload
from golftrip.database.db import get_db_session
from golftrip.services import champion_service
from golftrip.models.schemas import ChampionResponse, MessageResponse

router = APIRouter()


@router.get("/api/champions", response_model=List[ChampionResponse])
async def list_champions(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await champion_service.list_champions(session)


@router.get("/api/champions/{champion_id}", response_model=ChampionResponse)
async def get_champion(
    champion_id: int,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await champion_service.get_champion(session, champion_id)


@router.post("/api/champions", response_model=ChampionResponse, status_code=201)
async def create_champion(
    year: int = Form(...),
    golfer_id: int = Form(...),
    display_name: Optional[str] = Form(None),
    motivation: Optional[str] = Form(None),
    meaning: Optional[str] = Form(None),
    life_change: Optional[str] = Form(None),
    favorite_quote: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Record a year's champion (one per year)."""
    image_bytes, content_type = await read_image_upload(photo)
    return await champion_service.create_champion(
        session,
        year=year,
        golfer_id=golfer_id,
        created_by=admin["id"],
        image_bytes=image_bytes,
        content_type=content_type,
        display_name=display_name,
        motivation=motivation,
        meaning=meaning,
        life_change=life_change,
        favorite_quote=favorite_quote,
    )


@router.put("/api/champions/{champion_id}", response_model=ChampionResponse)
async def update_champion(
    champion_id: int,
    year: int = Form(...),
    golfer_id: int = Form(...),
    display_name: Optional[str] = Form(None),
    motivation: Optional[str] = Form(None),
    meaning: Optional[str] = Form(None),
    life_change: Optional[str] = Form(None),
    favorite_quote: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit a champion. Omitting ``photo`` keeps the current one."""
    image_bytes, content_type = await read_image_upload(photo)
    return await champion_service.update_champion(
        session,
        champion_id,
        year=year,
        golfer_id=golfer_id,
        image_bytes=image_bytes,
        content_type=content_type,
        display_name=display_name,
        motivation=motivation,
        meaning=meaning,
        life_change=life_change,
        favorite_quote=favorite_quote,
    )


@router.delete("/api/champions/{champion_id}", response_model=MessageResponse)
async def delete_champion(
    champion_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    await champion_service.delete_champion(session, champion_id)
    return MessageResponse(message="Champion deleted")
