"""
Tests for the golfer CSV import script.
"""

import io

import pytest

from golftrip.scripts import import_golfers
from golftrip.services import golfer_service


class TestReadGolfers:
    def test_parses_optional_columns(self):
        f = io.StringIO("Name,Email,Phone,Cabin\nAlex,alex@example.com,555-0100,2\nBlair,,,\n")
        assert import_golfers.read_golfers(f) == [
            {"name": "Alex", "email": "alex@example.com", "phone": "555-0100", "cabin": 2},
            {"name": "Blair", "email": None, "phone": None, "cabin": None},
        ]

    def test_skips_bad_rows(self):
        f = io.StringIO("name,cabin,nickname\n,1,x\nCasey,9,c\nDana,abc,d\nEli,4,e\n")
        golfers = import_golfers.read_golfers(f)
        assert [g["name"] for g in golfers] == ["Eli"]

    def test_requires_name_header(self):
        with pytest.raises(ValueError):
            import_golfers.read_golfers(io.StringIO("email,phone\na@example.com,555\n"))


class TestImportGolfers:
    @pytest.mark.asyncio
    async def test_skips_existing_names(self, db_session):
        await golfer_service.create_golfer(db_session, "Alex")
        golfers = [
            {"name": "Alex", "email": None, "phone": None, "cabin": None},
            {"name": "Blair", "email": None, "phone": None, "cabin": 3},
            {"name": "Blair", "email": None, "phone": None, "cabin": 1},
        ]

        counts = await import_golfers.import_golfers(db_session, golfers, 2025)

        assert counts == {"imported": 1, "skipped": 2}
        assert await golfer_service.cabin_assignments(db_session, 2025) == {3: ["Blair"]}
