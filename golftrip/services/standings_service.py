"""
Tournament standings.

Totals are always derived from the year's foursomes and golfer statuses;
nothing is cached on the golfer rows.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.services import foursome_service, golfer_service

logger = logging.getLogger(__name__)

SORT_FIELDS = ("name", "score", "rounds")
SORT_ORDERS = ("asc", "desc")
DEFAULT_SORT = "score"
DEFAULT_ORDER = "asc"


@dataclass
class GolferStanding:
    golfer_id: int
    name: str
    total_score: Optional[int]  # None when no rounds were played
    rounds_played: int
    is_active: bool
    cabin: Optional[int]

    def to_dict(self) -> Dict:
        return asdict(self)


def normalize_sort(sort: Optional[str], order: Optional[str]) -> Tuple[str, str]:
    """Fall back to score/asc for unknown sort fields or directions."""
    sort = sort if sort in SORT_FIELDS else DEFAULT_SORT
    order = order if order in SORT_ORDERS else DEFAULT_ORDER
    return sort, order


def compute_standings(
    year: int,
    golfers: Iterable,
    foursomes: Iterable,
    statuses: Iterable,
    viewer_is_admin: bool,
    sort: str = DEFAULT_SORT,
    order: str = DEFAULT_ORDER,
) -> List[GolferStanding]:
    """
    Rank golfers for a tournament year.

    Golfers without a status row for ``year`` are left out. Non-admin viewers
    also do not see inactive golfers. A golfer with no rounds has a total of
    None and ranks after every golfer with a score, whichever the direction.
    Equal keys keep their incoming order.

    Args:
        year: Tournament year
        golfers: Objects with ``id`` and ``name``
        foursomes: Objects with ``year``, ``score`` and ``golfer_ids``
        statuses: Objects with ``golfer_id``, ``year``, ``is_active`` and ``cabin``
        viewer_is_admin: Whether the viewer is an admin
        sort: ``"name"``, ``"score"`` or ``"rounds"``
        order: ``"asc"`` or ``"desc"``

    Returns:
        Ordered list of GolferStanding
    """
    sort, order = normalize_sort(sort, order)
    descending = order == "desc"

    status_by_golfer = {s.golfer_id: s for s in statuses if s.year == year}

    scores: Dict[int, List[int]] = {}
    for foursome in foursomes:
        if foursome.year != year:
            continue
        for golfer_id in foursome.golfer_ids:
            scores.setdefault(golfer_id, []).append(foursome.score)

    standings = []
    for golfer in sorted(golfers, key=lambda g: g.name):
        status = status_by_golfer.get(golfer.id)
        if status is None:
            continue
        if not viewer_is_admin and not status.is_active:
            continue

        played = scores.get(golfer.id, [])
        standings.append(
            GolferStanding(
                golfer_id=golfer.id,
                name=golfer.name,
                total_score=sum(played) if played else None,
                rounds_played=len(played),
                is_active=bool(status.is_active),
                cabin=status.cabin,
            )
        )

    if sort == "name":
        return sorted(standings, key=lambda s: s.name, reverse=descending)

    if sort == "rounds":
        return sorted(standings, key=lambda s: s.rounds_played, reverse=descending)

    scored = [s for s in standings if s.total_score is not None]
    unscored = [s for s in standings if s.total_score is None]
    return sorted(scored, key=lambda s: s.total_score, reverse=descending) + unscored


async def load_standings(
    session: AsyncSession,
    year: int,
    viewer_is_admin: bool,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> Dict:
    """
    Read a year's golfers, foursomes and statuses and rank them.

    Returns:
        ``{"year", "sort", "order", "standings": [...]}``
    """
    sort, order = normalize_sort(sort, order)
    golfers = await golfer_service.list_golfers(session, order_by="name")
    foursomes = await foursome_service.foursomes_for_year(session, year)
    statuses = await golfer_service.list_statuses(session, year)

    standings = compute_standings(year, golfers, foursomes, statuses, viewer_is_admin, sort, order)
    return {
        "year": year,
        "sort": sort,
        "order": order,
        "standings": [s.to_dict() for s in standings],
    }


async def tournament_leader(session: AsyncSession, year: int) -> Optional[Dict]:
    """Lowest total among active golfers who have played, or None."""
    result = await load_standings(session, year, viewer_is_admin=False, sort="score", order="asc")
    for standing in result["standings"]:
        if standing["total_score"] is not None:
            return standing
    return None


async def golfer_standing(session: AsyncSession, golfer_id: int, year: int) -> Optional[Dict]:
    """One golfer's row from the admin view of the year, or None if not enrolled."""
    result = await load_standings(session, year, viewer_is_admin=True)
    for standing in result["standings"]:
        if standing["golfer_id"] == golfer_id:
            return standing
    return None
