"""
Past champions, one per tournament year.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from golftrip.database.models import Champion, Golfer
from golftrip.services import s3_service
from golftrip.utils.errors import DuplicateChampionYear, NotFound

logger = logging.getLogger(__name__)

CHAMPION_IMAGE_PREFIX = "champions"

TEXT_FIELDS = ("display_name", "motivation", "meaning", "life_change", "favorite_quote")


def _champion_to_dict(champion: Champion) -> Dict:
    return {
        "id": champion.id,
        "year": champion.year,
        "golfer_id": champion.golfer_id,
        "golfer_name": champion.golfer.name if champion.golfer else None,
        "display_name": champion.display_name,
        "motivation": champion.motivation,
        "meaning": champion.meaning,
        "life_change": champion.life_change,
        "favorite_quote": champion.favorite_quote,
        "photo_url": champion.photo_url,
        "created_by": champion.created_by,
    }


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() == "":
        return None
    return value.strip()


async def _get_champion(session: AsyncSession, champion_id: int) -> Champion:
    result = await session.execute(
        select(Champion).options(selectinload(Champion.golfer)).where(Champion.id == champion_id)
    )
    champion = result.scalar_one_or_none()
    if champion is None:
        raise NotFound("Champion not found")
    return champion


async def _check_year_free(session: AsyncSession, year: int, exclude_id: Optional[int] = None) -> None:
    query = select(Champion.id).where(Champion.year == year)
    if exclude_id is not None:
        query = query.where(Champion.id != exclude_id)
    result = await session.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise DuplicateChampionYear(f"A champion already exists for year {year}")


async def _check_golfer(session: AsyncSession, golfer_id: int) -> None:
    if await session.get(Golfer, golfer_id) is None:
        raise NotFound("Selected golfer not found")


async def _commit_champion(session: AsyncSession, year: int, uploaded: Optional[Dict]) -> None:
    """Commit, mapping a year uniqueness race to DuplicateChampionYear."""
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        if uploaded:
            await asyncio.to_thread(s3_service.delete_image, uploaded["id"])
        raise DuplicateChampionYear(f"A champion already exists for year {year}") from e


async def list_champions(session: AsyncSession) -> List[Dict]:
    """All champions, most recent year first."""
    result = await session.execute(
        select(Champion).options(selectinload(Champion.golfer)).order_by(Champion.year.desc())
    )
    return [_champion_to_dict(c) for c in result.scalars().all()]


async def get_champion(session: AsyncSession, champion_id: int) -> Dict:
    return _champion_to_dict(await _get_champion(session, champion_id))


async def get_champion_for_year(session: AsyncSession, year: int) -> Optional[Dict]:
    result = await session.execute(
        select(Champion).options(selectinload(Champion.golfer)).where(Champion.year == year)
    )
    champion = result.scalar_one_or_none()
    return _champion_to_dict(champion) if champion else None


async def create_champion(
    session: AsyncSession,
    year: int,
    golfer_id: int,
    created_by: int,
    image_bytes: Optional[bytes] = None,
    content_type: Optional[str] = None,
    **text_fields: Optional[str],
) -> Dict:
    """
    Record the champion for a year.

    Args:
        session: Database session
        year: Tournament year (unique)
        golfer_id: Winning golfer
        created_by: Admin user ID
        image_bytes: Optional photo
        content_type: Photo MIME type
        **text_fields: display_name, motivation, meaning, life_change, favorite_quote

    Returns:
        Champion dictionary

    Raises:
        DuplicateChampionYear: A champion is already recorded for the year
        NotFound: Unknown golfer
        ValidationError: Photo is not an image or too large
        UpstreamCollaboratorError: Photo upload failed
    """
    await _check_year_free(session, year)
    await _check_golfer(session, golfer_id)

    uploaded = None
    if image_bytes:
        s3_service.check_image(content_type, len(image_bytes))
        uploaded = await asyncio.to_thread(
            s3_service.upload_image, image_bytes, content_type, prefix=CHAMPION_IMAGE_PREFIX
        )

    champion = Champion(
        year=year,
        golfer_id=golfer_id,
        created_by=created_by,
        photo_url=uploaded["url"] if uploaded else None,
        image_id=uploaded["id"] if uploaded else None,
        **{name: _clean(text_fields.get(name)) for name in TEXT_FIELDS},
    )
    session.add(champion)
    await _commit_champion(session, year, uploaded)

    logger.info(f"Recorded champion {champion.id} for {year}")
    return await get_champion(session, champion.id)


async def update_champion(
    session: AsyncSession,
    champion_id: int,
    year: int,
    golfer_id: int,
    image_bytes: Optional[bytes] = None,
    content_type: Optional[str] = None,
    **text_fields: Optional[str],
) -> Dict:
    """
    Edit a champion. A new photo replaces the old one, whose image is
    deleted best-effort.
    """
    champion = await _get_champion(session, champion_id)
    await _check_year_free(session, year, exclude_id=champion_id)
    await _check_golfer(session, golfer_id)

    old_image_id = None
    uploaded = None
    if image_bytes:
        s3_service.check_image(content_type, len(image_bytes))
        uploaded = await asyncio.to_thread(
            s3_service.upload_image, image_bytes, content_type, prefix=CHAMPION_IMAGE_PREFIX
        )
        old_image_id = champion.image_id
        champion.photo_url = uploaded["url"]
        champion.image_id = uploaded["id"]

    champion.year = year
    champion.golfer_id = golfer_id
    for name in TEXT_FIELDS:
        setattr(champion, name, _clean(text_fields.get(name)))

    await _commit_champion(session, year, uploaded)

    if old_image_id and not await asyncio.to_thread(s3_service.delete_image, old_image_id):
        logger.warning(f"Old photo {old_image_id} for champion {champion_id} was not removed")

    session.expire(champion)
    return await get_champion(session, champion_id)


async def delete_champion(session: AsyncSession, champion_id: int) -> None:
    """Delete a champion; its photo is removed from the image store best-effort."""
    champion = await _get_champion(session, champion_id)
    image_id = champion.image_id

    await session.delete(champion)
    await session.commit()
    logger.info(f"Deleted champion {champion_id}")

    if image_id and not await asyncio.to_thread(s3_service.delete_image, image_id):
        logger.warning(f"Photo {image_id} for deleted champion {champion_id} was not removed")
