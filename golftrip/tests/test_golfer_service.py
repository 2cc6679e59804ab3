"""
Tests for the golfer roster and per-year statuses.
"""

import pytest
from sqlalchemy import select, func

from golftrip.database.models import Champion, GolferStatus
from golftrip.services import foursome_service, golfer_service, user_service
from golftrip.utils.errors import ConflictError, NotFound, ValidationError

YEAR = 2025


async def _status_count(db_session, golfer_id):
    result = await db_session.execute(
        select(func.count()).select_from(GolferStatus).where(GolferStatus.golfer_id == golfer_id)
    )
    return result.scalar_one()


class TestGolferRoster:
    @pytest.mark.asyncio
    async def test_create_without_cabin_does_not_enroll(self, db_session):
        golfer = await golfer_service.create_golfer(db_session, "  Alex  ", email="", phone="555-0100")

        assert golfer["name"] == "Alex"
        assert golfer["email"] is None
        assert golfer["phone"] == "555-0100"
        assert "cabin" not in golfer
        assert await _status_count(db_session, golfer["id"]) == 0

    @pytest.mark.asyncio
    async def test_create_with_cabin_enrolls(self, db_session):
        golfer = await golfer_service.create_golfer(db_session, "Alex", cabin=3, year=YEAR)

        assert golfer["cabin"] == 3
        assert golfer["is_active"] is True
        status = await golfer_service.get_status(db_session, golfer["id"], YEAR)
        assert status.cabin == 3

    @pytest.mark.asyncio
    async def test_list_golfers_by_name(self, db_session):
        for name in ("Casey", "Alex", "Blair"):
            await golfer_service.create_golfer(db_session, name)
        golfers = await golfer_service.list_golfers(db_session, order_by="name")
        assert [g.name for g in golfers] == ["Alex", "Blair", "Casey"]

    @pytest.mark.asyncio
    async def test_update_name_conflict(self, db_session):
        await golfer_service.create_golfer(db_session, "Alex")
        blair = await golfer_service.create_golfer(db_session, "Blair")
        with pytest.raises(ConflictError):
            await golfer_service.update_golfer(db_session, blair["id"], name="Alex")

    @pytest.mark.asyncio
    async def test_update_keeps_own_name(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        updated = await golfer_service.update_golfer(db_session, alex["id"], name="Alex", email="a@example.com")
        assert updated["email"] == "a@example.com"
        assert await _status_count(db_session, alex["id"]) == 0

    @pytest.mark.asyncio
    async def test_update_sets_cabin_for_year(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        updated = await golfer_service.update_golfer(db_session, alex["id"], name="Alex", cabin=2, year=YEAR)
        assert updated["cabin"] == 2

    @pytest.mark.asyncio
    async def test_get_unknown(self, db_session):
        with pytest.raises(NotFound):
            await golfer_service.get_golfer(db_session, 404)

    @pytest.mark.asyncio
    async def test_delete_cascades_statuses_and_unlinks_user(self, db_session):
        user = await user_service.register(db_session, "alex@example.com", "password123", "Alex")
        golfer_id = user["golfer_id"]
        await golfer_service.enroll(db_session, golfer_id, YEAR, cabin=1)

        await golfer_service.delete_golfer(db_session, golfer_id)

        assert await _status_count(db_session, golfer_id) == 0
        db_session.expire_all()
        refreshed = await user_service.get_user_by_id(db_session, user["id"])
        assert refreshed["golfer_id"] is None

    @pytest.mark.asyncio
    async def test_delete_blocked_by_foursome(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        await foursome_service.create_foursome(
            db_session,
            foursome_service.validate_foursome("FRIDAY_MORNING", "BLACK", "2025-06-13T08:30", [None, alex["id"]]),
        )
        with pytest.raises(ConflictError):
            await golfer_service.delete_golfer(db_session, alex["id"])

    @pytest.mark.asyncio
    async def test_delete_blocked_by_champion(self, db_session):
        admin = await user_service.create_user(db_session, "admin@example.com", "password123", "A", is_admin=True)
        alex = await golfer_service.create_golfer(db_session, "Alex")
        db_session.add(Champion(year=2024, golfer_id=alex["id"], created_by=admin["id"]))
        await db_session.commit()

        with pytest.raises(ConflictError):
            await golfer_service.delete_golfer(db_session, alex["id"])


class TestGolferStatus:
    @pytest.mark.asyncio
    async def test_upsert_does_not_duplicate(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")

        first = await golfer_service.upsert_status(db_session, alex["id"], YEAR, cabin=1)
        second = await golfer_service.upsert_status(db_session, alex["id"], YEAR, is_active=False)

        assert first.id == second.id
        assert second.cabin == 1
        assert second.is_active is False
        assert await _status_count(db_session, alex["id"]) == 1

    @pytest.mark.asyncio
    async def test_statuses_are_per_year(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        await golfer_service.enroll(db_session, alex["id"], YEAR, cabin=1)
        await golfer_service.enroll(db_session, alex["id"], YEAR + 1, is_active=False)

        assert (await golfer_service.get_status(db_session, alex["id"], YEAR)).is_active is True
        assert (await golfer_service.get_status(db_session, alex["id"], YEAR + 1)).is_active is False

    @pytest.mark.asyncio
    async def test_toggle_requires_status(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        with pytest.raises(NotFound):
            await golfer_service.toggle_status(db_session, alex["id"], YEAR, current_status=True)

    @pytest.mark.asyncio
    async def test_toggle_flips_reported_status(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        await golfer_service.enroll(db_session, alex["id"], YEAR)

        status = await golfer_service.toggle_status(db_session, alex["id"], YEAR, current_status=True)
        assert status.is_active is False
        status = await golfer_service.toggle_status(db_session, alex["id"], YEAR, current_status=False)
        assert status.is_active is True

    @pytest.mark.asyncio
    async def test_set_cabin_creates_active_row(self, db_session):
        alex = await golfer_service.create_golfer(db_session, "Alex")
        status = await golfer_service.set_cabin(db_session, alex["id"], YEAR, 4)
        assert status.cabin == 4
        assert status.is_active is True

        cleared = await golfer_service.set_cabin(db_session, alex["id"], YEAR, None)
        assert cleared.cabin is None

    @pytest.mark.asyncio
    async def test_set_cabin_unknown_golfer(self, db_session):
        with pytest.raises(NotFound):
            await golfer_service.set_cabin(db_session, 404, YEAR, 1)

    @pytest.mark.asyncio
    async def test_cabin_assignments(self, db_session):
        for name, cabin, active in (
            ("Casey", 1, True),
            ("Alex", 1, True),
            ("Blair", 2, True),
            ("Dana", 2, False),
            ("Eli", None, True),
        ):
            golfer = await golfer_service.create_golfer(db_session, name)
            await golfer_service.enroll(db_session, golfer["id"], YEAR, is_active=active, cabin=cabin)

        assert await golfer_service.cabin_assignments(db_session, YEAR) == {
            1: ["Alex", "Casey"],
            2: ["Blair"],
        }
        assert await golfer_service.cabin_assignments(db_session, YEAR + 1) == {}

    @pytest.mark.parametrize("cabin", [0, 5, -1])
    def test_check_cabin_rejects_out_of_range(self, cabin):
        with pytest.raises(ValidationError):
            golfer_service.check_cabin(cabin)

    @pytest.mark.parametrize("cabin", [None, 1, 4])
    def test_check_cabin_accepts(self, cabin):
        assert golfer_service.check_cabin(cabin) == cabin
