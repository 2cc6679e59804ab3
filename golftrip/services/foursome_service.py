"""
Foursome scheduling: form validation plus create/read/update/delete.

Tee times are entered as Eastern Time wall-clock strings and stored as UTC.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from golftrip.database.models import Course, Foursome, Golfer, Round
from golftrip.utils.constants import FOURSOME_SIZE
from golftrip.utils.datetime_utils import (
    ensure_utc,
    format_datetime_local,
    format_tee_time_display,
    parse_datetime_local,
    to_venue_time,
    utcnow,
)
from golftrip.utils.errors import (
    DuplicateGolferInFoursome,
    NoGolfersAssigned,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidatedFoursome:
    """Foursome form values after validation, ready to persist."""

    round: Round
    course: Course
    tee_time: datetime  # UTC
    year: int
    score: int = 0
    golfer_ids: List[Optional[int]] = field(default_factory=lambda: [None] * FOURSOME_SIZE)


def _parse_score(score) -> int:
    if score is None:
        return 0
    if isinstance(score, bool):
        raise ValueError("Score must be a whole number")
    if isinstance(score, int):
        return score
    text = str(score).strip()
    if text == "":
        return 0
    try:
        return int(text)
    except ValueError:
        raise ValueError("Score must be a whole number (e.g. -3 for three under par)")


def validate_foursome(
    round: str,
    course: str,
    tee_time_local: str,
    golfer_slots: Sequence[Optional[int]],
    year: Optional[int] = None,
    score=None,
) -> ValidatedFoursome:
    """
    Apply the scheduling rules to a submitted foursome form.

    Args:
        round: Round name (e.g. ``"FRIDAY_MORNING"``)
        course: Course name (``"BLACK"`` or ``"SILVER"``)
        tee_time_local: ``YYYY-MM-DDTHH:MM`` in Eastern Time
        golfer_slots: Up to four golfer IDs; None or blank means an empty slot
        year: Tournament year; defaults to the Eastern Time year of the tee time
        score: Strokes relative to par; blank means 0

    Returns:
        ValidatedFoursome with empty slots stored as None

    Raises:
        NoGolfersAssigned: Every slot is empty
        DuplicateGolferInFoursome: A golfer fills more than one slot of an otherwise valid form
        ValidationError: Any other field is invalid
    """
    errors: Dict[str, List[str]] = {}
    values = {
        "round": round,
        "course": course,
        "tee_time": tee_time_local,
        "year": year,
        "score": score,
    }

    slots = list(golfer_slots)
    if len(slots) > FOURSOME_SIZE:
        errors.setdefault("golfers", []).append(f"A foursome has at most {FOURSOME_SIZE} golfers")
    slots = (slots + [None] * FOURSOME_SIZE)[:FOURSOME_SIZE]
    for index, slot in enumerate(slots, start=1):
        values[f"golfer{index}_id"] = slot
    try:
        slots = [None if slot in (None, "") else int(slot) for slot in slots]
        slots_parsed = True
    except (TypeError, ValueError):
        errors.setdefault("golfers", []).append("Golfer selections must be golfer IDs")
        slots_parsed = False

    try:
        parsed_round = Round(round)
    except ValueError:
        parsed_round = None
        errors.setdefault("round", []).append(
            "Round must be one of: " + ", ".join(r.value for r in Round)
        )

    try:
        parsed_course = Course(course)
    except ValueError:
        parsed_course = None
        errors.setdefault("course", []).append(
            "Course must be one of: " + ", ".join(c.value for c in Course)
        )

    tee_time = None
    try:
        tee_time = parse_datetime_local(tee_time_local)
    except ValueError as e:
        errors.setdefault("tee_time", []).append(str(e))

    parsed_score = 0
    try:
        parsed_score = _parse_score(score)
    except ValueError as e:
        errors.setdefault("score", []).append(str(e))

    error_class = ValidationError
    if slots_parsed:
        filled = [slot for slot in slots if slot is not None]
        if not filled:
            error_class = NoGolfersAssigned
            errors.setdefault("golfers", []).append("At least one golfer must be assigned")
        elif len(set(filled)) != len(filled):
            errors.setdefault("golfers", []).append("Each golfer can only be assigned once per foursome")
            # A conflict only when the rest of the form is valid
            if set(errors) == {"golfers"}:
                error_class = DuplicateGolferInFoursome

    if errors:
        message = "; ".join(msg for msgs in errors.values() for msg in msgs)
        raise error_class(message, field_errors=errors, values=values)

    if year is None:
        year = to_venue_time(tee_time).year

    return ValidatedFoursome(
        round=parsed_round,
        course=parsed_course,
        tee_time=tee_time,
        year=year,
        score=parsed_score,
        golfer_ids=slots,
    )


def _slot_golfers(foursome: Foursome) -> List[Optional[Golfer]]:
    return [foursome.golfer1, foursome.golfer2, foursome.golfer3, foursome.golfer4]


def foursome_to_dict(foursome: Foursome) -> Dict:
    tee_time = ensure_utc(foursome.tee_time)
    return {
        "id": foursome.id,
        "round": foursome.round.value,
        "round_label": foursome.round.label,
        "course": foursome.course.value,
        "tee_time": tee_time.isoformat(),
        "tee_time_local": format_datetime_local(tee_time),
        "tee_time_display": format_tee_time_display(tee_time),
        "year": foursome.year,
        "score": foursome.score,
        "golfer1_id": foursome.golfer1_id,
        "golfer2_id": foursome.golfer2_id,
        "golfer3_id": foursome.golfer3_id,
        "golfer4_id": foursome.golfer4_id,
        "golfers": [
            {"id": golfer.id, "name": golfer.name}
            for golfer in _slot_golfers(foursome)
            if golfer is not None
        ],
    }


def _with_golfers(query):
    return query.options(
        selectinload(Foursome.golfer1),
        selectinload(Foursome.golfer2),
        selectinload(Foursome.golfer3),
        selectinload(Foursome.golfer4),
    )


def _involving(golfer_id: int):
    return or_(
        Foursome.golfer1_id == golfer_id,
        Foursome.golfer2_id == golfer_id,
        Foursome.golfer3_id == golfer_id,
        Foursome.golfer4_id == golfer_id,
    )


async def _check_golfers_exist(session: AsyncSession, golfer_ids: Sequence[Optional[int]]) -> None:
    wanted = {gid for gid in golfer_ids if gid is not None}
    result = await session.execute(select(Golfer.id).where(Golfer.id.in_(wanted)))
    missing = wanted - set(result.scalars().all())
    if missing:
        raise NotFound(f"Golfer not found: {', '.join(str(gid) for gid in sorted(missing))}")


async def get_foursome(session: AsyncSession, foursome_id: int) -> Foursome:
    result = await session.execute(_with_golfers(select(Foursome)).where(Foursome.id == foursome_id))
    foursome = result.scalar_one_or_none()
    if foursome is None:
        raise NotFound("Foursome not found")
    return foursome


async def list_foursomes(session: AsyncSession, year: Optional[int] = None) -> List[Foursome]:
    """Foursomes newest first, optionally limited to one tournament year."""
    query = _with_golfers(select(Foursome)).order_by(Foursome.created_at.desc(), Foursome.id.desc())
    if year is not None:
        query = query.where(Foursome.year == year)
    result = await session.execute(query)
    return list(result.scalars().all())


async def foursomes_for_year(session: AsyncSession, year: int) -> List[Foursome]:
    result = await session.execute(select(Foursome).where(Foursome.year == year))
    return list(result.scalars().all())


def _apply(foursome: Foursome, data: ValidatedFoursome) -> None:
    foursome.round = data.round
    foursome.course = data.course
    foursome.tee_time = data.tee_time
    foursome.year = data.year
    foursome.score = data.score
    (
        foursome.golfer1_id,
        foursome.golfer2_id,
        foursome.golfer3_id,
        foursome.golfer4_id,
    ) = data.golfer_ids


async def create_foursome(session: AsyncSession, data: ValidatedFoursome) -> Dict:
    """
    Persist a validated foursome.

    Raises:
        NotFound: A slot references an unknown golfer
    """
    await _check_golfers_exist(session, data.golfer_ids)

    foursome = Foursome()
    _apply(foursome, data)
    session.add(foursome)
    await session.commit()

    logger.info(f"Created foursome {foursome.id} for {data.round.value} {data.year}")
    return foursome_to_dict(await get_foursome(session, foursome.id))


async def update_foursome(session: AsyncSession, foursome_id: int, data: ValidatedFoursome) -> Dict:
    foursome = await get_foursome(session, foursome_id)
    await _check_golfers_exist(session, data.golfer_ids)

    _apply(foursome, data)
    await session.commit()

    # Reload so slot relationships reflect the new IDs
    session.expire(foursome)
    return foursome_to_dict(await get_foursome(session, foursome_id))


async def delete_foursome(session: AsyncSession, foursome_id: int) -> None:
    foursome = await get_foursome(session, foursome_id)
    await session.delete(foursome)
    await session.commit()
    logger.info(f"Deleted foursome {foursome_id}")


async def next_tee_time(
    session: AsyncSession, golfer_id: int, now: Optional[datetime] = None
) -> Optional[Dict]:
    """
    The golfer's earliest foursome teeing off after ``now``.

    Returns:
        Foursome dictionary, or None if nothing is scheduled
    """
    now = now or utcnow()
    result = await session.execute(
        _with_golfers(select(Foursome))
        .where(_involving(golfer_id), Foursome.tee_time > now)
        .order_by(Foursome.tee_time.asc())
        .limit(1)
    )
    foursome = result.scalar_one_or_none()
    return foursome_to_dict(foursome) if foursome is not None else None
