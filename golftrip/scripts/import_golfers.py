#!/usr/bin/env python3
"""
Import golfers from a CSV file.

CSV headers: name (required), email, phone, cabin (all optional).
Golfers whose name already exists are skipped. A cabin enrolls the golfer
for the tournament year.

Usage:
    python -m golftrip.scripts.import_golfers <csv_file> [--year 2025]
"""

import argparse
import asyncio
import csv
import logging
from typing import Dict, List, Optional, TextIO

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.database import db
from golftrip.database.models import Golfer
from golftrip.services import golfer_service
from golftrip.utils.datetime_utils import current_tournament_year
from golftrip.utils.errors import ValidationError

logger = logging.getLogger(__name__)

KNOWN_HEADERS = ("name", "email", "phone", "cabin")


def read_golfers(f: TextIO) -> List[Dict]:
    """
    Parse golfer rows.

    Rows without a name, or with a cabin that is not 1-4, are skipped with
    a warning.

    Raises:
        ValueError: The file has no ``name`` column
    """
    reader = csv.DictReader(f)
    headers = [h.strip().lower() for h in (reader.fieldnames or [])]
    if "name" not in headers:
        raise ValueError("Missing required header: name (optional: email, phone, cabin)")
    for header in headers:
        if header not in KNOWN_HEADERS:
            logger.warning(f"Unknown header: {header}, ignoring")
    reader.fieldnames = headers

    golfers = []
    for line_num, row in enumerate(reader, start=2):
        values = {k: (v or "").strip() for k, v in row.items() if k in KNOWN_HEADERS}
        if not values.get("name"):
            logger.warning(f"Line {line_num}: missing name, skipping")
            continue

        cabin: Optional[int] = None
        if values.get("cabin"):
            try:
                cabin = golfer_service.check_cabin(int(values["cabin"]))
            except (ValueError, ValidationError):
                logger.warning(f"Line {line_num}: invalid cabin '{values['cabin']}', skipping")
                continue

        golfers.append(
            {
                "name": values["name"],
                "email": values.get("email") or None,
                "phone": values.get("phone") or None,
                "cabin": cabin,
            }
        )
    return golfers


async def import_golfers(session: AsyncSession, golfers: List[Dict], year: int) -> Dict[str, int]:
    """
    Create the golfers that do not exist yet.

    Returns:
        ``{"imported", "skipped"}`` counts
    """
    result = await session.execute(select(Golfer.name).where(Golfer.name.in_([g["name"] for g in golfers])))
    existing = set(result.scalars().all())

    imported = 0
    for golfer in golfers:
        if golfer["name"] in existing:
            logger.info(f"Golfer {golfer['name']} already exists, skipping")
            continue
        await golfer_service.create_golfer(session, year=year, **golfer)
        existing.add(golfer["name"])
        imported += 1

    return {"imported": imported, "skipped": len(golfers) - imported}


async def main():
    parser = argparse.ArgumentParser(description="Import golfers from CSV")
    parser.add_argument("csv_file", help="CSV with a name column and optional email, phone, cabin")
    parser.add_argument("--year", type=int, help="Tournament year for cabin assignments")
    args = parser.parse_args()

    with open(args.csv_file, newline="") as f:
        golfers = read_golfers(f)
    logger.info(f"Found {len(golfers)} valid golfers to import")

    engine = db.create_engine()
    try:
        session_factory = db.create_session_factory(engine)
        async with session_factory() as session:
            counts = await import_golfers(session, golfers, args.year or current_tournament_year())
    finally:
        await engine.dispose()

    logger.info(f"✓ Imported {counts['imported']} golfers ({counts['skipped']} already existed)")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
