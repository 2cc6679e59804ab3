"""
Photo gallery.
"""

import asyncio
import logging
import math
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.database.models import Photo
from golftrip.services import s3_service
from golftrip.utils.constants import PHOTOS_PER_PAGE
from golftrip.utils.datetime_utils import ensure_utc
from golftrip.utils.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

GALLERY_IMAGE_PREFIX = "gallery"
ALL_CATEGORIES = "ALL"


def _photo_to_dict(photo: Photo) -> Dict:
    return {
        "id": photo.id,
        "url": photo.url,
        "caption": photo.caption,
        "category": photo.category,
        "created_by": photo.created_by,
        "created_at": ensure_utc(photo.created_at).isoformat() if photo.created_at else None,
    }


async def list_categories(session: AsyncSession) -> List[str]:
    """Distinct non-empty categories, alphabetical."""
    result = await session.execute(
        select(Photo.category).where(Photo.category.is_not(None)).distinct().order_by(Photo.category)
    )
    return [c for c in result.scalars().all() if c]


async def list_photos(
    session: AsyncSession,
    category: Optional[str] = None,
    page: int = 1,
    per_page: int = PHOTOS_PER_PAGE,
) -> Dict:
    """
    One page of photos, newest first.

    Args:
        session: Database session
        category: Only photos in this category; None or ``"ALL"`` means every photo
        page: 1-based page number; out-of-range values are clamped
        per_page: Page size

    Returns:
        ``{"photos", "page", "total_pages", "total", "categories"}``
    """
    filters = []
    if category and category != ALL_CATEGORIES:
        filters.append(Photo.category == category)

    total = (await session.execute(select(func.count()).select_from(Photo).where(*filters))).scalar_one()
    total_pages = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), total_pages)

    result = await session.execute(
        select(Photo)
        .where(*filters)
        .order_by(Photo.created_at.desc(), Photo.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )

    return {
        "photos": [_photo_to_dict(p) for p in result.scalars().all()],
        "page": page,
        "total_pages": total_pages,
        "total": total,
        "categories": await list_categories(session),
    }


async def add_photo(
    session: AsyncSession,
    image_bytes: bytes,
    content_type: Optional[str],
    created_by: int,
    caption: Optional[str] = None,
    category: Optional[str] = None,
) -> Dict:
    """
    Upload a photo to the gallery.

    Raises:
        ValidationError: Missing file, non-image or too large
        UpstreamCollaboratorError: Upload failed
    """
    if not image_bytes:
        raise ValidationError(
            "Please select a file to upload", field_errors={"file": ["Please select a file to upload"]}
        )
    s3_service.check_image(content_type, len(image_bytes), field="file")

    uploaded = await asyncio.to_thread(
        s3_service.upload_image, image_bytes, content_type, prefix=GALLERY_IMAGE_PREFIX
    )
    photo = Photo(
        image_id=uploaded["id"],
        url=uploaded["url"],
        caption=(caption or "").strip() or None,
        category=(category or "").strip() or None,
        created_by=created_by,
    )
    session.add(photo)
    await session.commit()
    await session.refresh(photo)

    logger.info(f"Added photo {photo.id} to gallery")
    return _photo_to_dict(photo)


async def delete_photo(session: AsyncSession, photo_id: int) -> None:
    """Delete a photo; the stored image is removed best-effort first."""
    photo = await session.get(Photo, photo_id)
    if photo is None:
        raise NotFound("Photo not found")

    if not await asyncio.to_thread(s3_service.delete_image, photo.image_id):
        logger.warning(f"Image {photo.image_id} for photo {photo_id} was not removed from the store")

    await session.delete(photo)
    await session.commit()
    logger.info(f"Deleted photo {photo_id}")
