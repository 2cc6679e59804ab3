"""
Golfer roster and per-year status (active flag, cabin) operations.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.database.models import Golfer, GolferStatus, Foursome, Champion
from golftrip.utils.constants import MIN_CABIN, MAX_CABIN
from golftrip.utils.datetime_utils import current_tournament_year
from golftrip.utils.errors import ConflictError, NotFound, ValidationError

logger = logging.getLogger(__name__)

# Marks "leave unchanged" for optional upsert arguments where None is meaningful
UNSET = object()


def golfer_to_dict(golfer: Golfer, status: Optional[GolferStatus] = None) -> Dict:
    data = {
        "id": golfer.id,
        "name": golfer.name,
        "email": golfer.email,
        "phone": golfer.phone,
    }
    if status is not None:
        data["is_active"] = status.is_active
        data["cabin"] = status.cabin
    return data


def status_to_dict(status: GolferStatus) -> Dict:
    return {
        "id": status.id,
        "golfer_id": status.golfer_id,
        "year": status.year,
        "is_active": status.is_active,
        "cabin": status.cabin,
    }


async def get_golfer(session: AsyncSession, golfer_id: int) -> Golfer:
    """
    Fetch a golfer.

    Raises:
        NotFound: If no golfer has this ID
    """
    golfer = await session.get(Golfer, golfer_id)
    if golfer is None:
        raise NotFound("Golfer not found")
    return golfer


async def list_golfers(session: AsyncSession, order_by: str = "created") -> List[Golfer]:
    """All golfers, newest first (or alphabetically with ``order_by="name"``)."""
    query = select(Golfer)
    if order_by == "name":
        query = query.order_by(Golfer.name.asc(), Golfer.id.asc())
    else:
        query = query.order_by(Golfer.created_at.desc(), Golfer.id.desc())
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_status(session: AsyncSession, golfer_id: int, year: int) -> Optional[GolferStatus]:
    result = await session.execute(
        select(GolferStatus).where(GolferStatus.golfer_id == golfer_id, GolferStatus.year == year)
    )
    return result.scalar_one_or_none()


async def list_statuses(session: AsyncSession, year: int) -> List[GolferStatus]:
    result = await session.execute(select(GolferStatus).where(GolferStatus.year == year))
    return list(result.scalars().all())


async def upsert_status(
    session: AsyncSession,
    golfer_id: int,
    year: int,
    is_active=UNSET,
    cabin=UNSET,
) -> GolferStatus:
    """
    Create or update the (golfer, year) status row.

    A newly created row defaults to active with no cabin. Arguments left as
    ``UNSET`` keep their current value on update.

    Args:
        session: Database session
        golfer_id: Golfer ID
        year: Tournament year
        is_active: New active flag
        cabin: New cabin (1-4) or None to clear it

    Returns:
        The GolferStatus row

    Raises:
        ConflictError: A concurrent request inserted the same (golfer, year) row
    """
    status = await get_status(session, golfer_id, year)
    if status is None:
        status = GolferStatus(
            golfer_id=golfer_id,
            year=year,
            is_active=True if is_active is UNSET else is_active,
            cabin=None if cabin is UNSET else cabin,
        )
        session.add(status)
        try:
            await session.flush()
        except IntegrityError:
            # Another request created the row between our read and insert
            await session.rollback()
            raise ConflictError("This golfer's status was changed by someone else; please try again")
    else:
        if is_active is not UNSET:
            status.is_active = is_active
        if cabin is not UNSET:
            status.cabin = cabin

    await session.commit()
    return status


async def create_golfer(
    session: AsyncSession,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    cabin: Optional[int] = None,
    year: Optional[int] = None,
) -> Dict:
    """
    Add a golfer to the roster.

    A cabin, when given, is recorded on the golfer's status for ``year``
    (default: the current tournament year), which also enrolls them.
    """
    golfer = Golfer(name=name.strip(), email=email or None, phone=phone or None)
    session.add(golfer)
    await session.flush()

    status = None
    if cabin is not None:
        status = await upsert_status(session, golfer.id, year or current_tournament_year(), cabin=cabin)
    else:
        await session.commit()

    logger.info(f"Created golfer {golfer.id}")
    return golfer_to_dict(golfer, status)


async def update_golfer(
    session: AsyncSession,
    golfer_id: int,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    cabin: Optional[int] = None,
    year: Optional[int] = None,
) -> Dict:
    """
    Edit a golfer and their cabin for ``year``.

    Raises:
        NotFound: Unknown golfer
        ConflictError: Another golfer already has this name
    """
    golfer = await get_golfer(session, golfer_id)
    name = name.strip()

    conflict = await session.execute(
        select(Golfer.id).where(Golfer.name == name, Golfer.id != golfer_id).limit(1)
    )
    if conflict.scalar_one_or_none() is not None:
        raise ConflictError(f'A golfer named "{name}" already exists')

    golfer.name = name
    golfer.email = email or None
    golfer.phone = phone or None
    await session.flush()

    year = year or current_tournament_year()
    status = await get_status(session, golfer_id, year)
    if status is not None or cabin is not None:
        status = await upsert_status(session, golfer_id, year, cabin=cabin)
    else:
        await session.commit()
    return golfer_to_dict(golfer, status)


async def delete_golfer(session: AsyncSession, golfer_id: int) -> None:
    """
    Remove a golfer and their yearly statuses.

    Raises:
        NotFound: Unknown golfer
        ConflictError: The golfer is a recorded champion or still assigned to a foursome
    """
    golfer = await get_golfer(session, golfer_id)

    champions = await session.execute(
        select(func.count()).select_from(Champion).where(Champion.golfer_id == golfer_id)
    )
    if champions.scalar_one() > 0:
        raise ConflictError(f"{golfer.name} is a recorded champion and cannot be deleted")

    foursomes = await session.execute(
        select(func.count())
        .select_from(Foursome)
        .where(
            or_(
                Foursome.golfer1_id == golfer_id,
                Foursome.golfer2_id == golfer_id,
                Foursome.golfer3_id == golfer_id,
                Foursome.golfer4_id == golfer_id,
            )
        )
    )
    if foursomes.scalar_one() > 0:
        raise ConflictError(f"{golfer.name} is assigned to foursomes; remove them first")

    await session.delete(golfer)
    await session.commit()
    logger.info(f"Deleted golfer {golfer_id}")


async def toggle_status(
    session: AsyncSession, golfer_id: int, year: int, current_status: bool
) -> GolferStatus:
    """
    Flip a golfer's active flag for a year.

    The status row must already exist.

    Raises:
        NotFound: Unknown golfer, or no status row for the year
    """
    await get_golfer(session, golfer_id)
    status = await get_status(session, golfer_id, year)
    if status is None:
        raise NotFound("Golfer status not found for this year")

    status.is_active = not current_status
    await session.commit()
    return status


async def set_cabin(
    session: AsyncSession, golfer_id: int, year: int, cabin: Optional[int]
) -> GolferStatus:
    """
    Assign (or clear) a golfer's cabin for a year, creating the status row if needed.

    Raises:
        NotFound: Unknown golfer
    """
    await get_golfer(session, golfer_id)
    return await upsert_status(session, golfer_id, year, cabin=cabin)


async def enroll(
    session: AsyncSession,
    golfer_id: int,
    year: int,
    is_active: bool = True,
    cabin: Optional[int] = None,
) -> GolferStatus:
    """Register a golfer for a tournament year (upsert)."""
    await get_golfer(session, golfer_id)
    return await upsert_status(session, golfer_id, year, is_active=is_active, cabin=cabin)


async def cabin_assignments(session: AsyncSession, year: int) -> Dict[int, List[str]]:
    """
    Active golfers grouped by cabin for a year.

    Returns:
        ``{cabin_number: [golfer names, alphabetical]}``; unassigned golfers are omitted
    """
    result = await session.execute(
        select(GolferStatus.cabin, Golfer.name)
        .join(Golfer, Golfer.id == GolferStatus.golfer_id)
        .where(
            GolferStatus.year == year,
            GolferStatus.is_active.is_(True),
            GolferStatus.cabin.is_not(None),
        )
        .order_by(GolferStatus.cabin, Golfer.name)
    )
    cabins: Dict[int, List[str]] = {}
    for cabin, name in result.all():
        cabins.setdefault(cabin, []).append(name)
    return cabins


def check_cabin(cabin: Optional[int]) -> Optional[int]:
    """Validate a cabin number outside of a pydantic schema."""
    if cabin is not None and not MIN_CABIN <= cabin <= MAX_CABIN:
        message = f"Cabin must be a number between {MIN_CABIN} and {MAX_CABIN}"
        raise ValidationError(message, field_errors={"cabin": [message]})
    return cabin
