"""Photo gallery routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.auth_dependencies import get_current_user, require_admin
from golftrip.api.routes import read_image_upload
from golftrip.database.db import get_db_session
from golftrip.services import photo_service
from golftrip.models.schemas import MessageResponse, PhotoPage, PhotoResponse

router = APIRouter()

CUSTOM_CATEGORY = "custom"


@router.get("/api/photos", response_model=PhotoPage)
async def list_photos(
    category: Optional[str] = Query(None),
    page: int = Query(1),
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await photo_service.list_photos(session, category=category, page=page)


@router.post("/api/photos", response_model=PhotoResponse, status_code=201)
async def upload_photo(
    file: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    custom_category: Optional[str] = Form(None),
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Add a photo. Choosing the ``custom`` category uses ``custom_category``
    as the category name.
    """
    if category == CUSTOM_CATEGORY:
        category = custom_category
    image_bytes, content_type = await read_image_upload(file)
    return await photo_service.add_photo(
        session,
        image_bytes,
        content_type,
        created_by=admin["id"],
        caption=caption,
        category=category,
    )


@router.delete("/api/photos/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    await photo_service.delete_photo(session, photo_id)
    return MessageResponse(message="Photo deleted")
