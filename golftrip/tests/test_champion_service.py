"""
Tests for champion records. Image storage is mocked.
"""

from unittest.mock import patch

import pytest
import pytest_asyncio

from golftrip.services import champion_service, golfer_service, user_service
from golftrip.utils.errors import DuplicateChampionYear, NotFound, UpstreamCollaboratorError, ValidationError

PNG = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def mock_images():
    """Patch the image store; uploads get sequential keys."""
    counter = {"n": 0}

    def fake_upload(image_bytes, content_type, prefix="images"):
        counter["n"] += 1
        key = f"{prefix}/img{counter['n']}.png"
        return {"id": key, "url": f"https://test-bucket.s3.us-east-1.amazonaws.com/{key}"}

    with patch.object(champion_service.s3_service, "upload_image", side_effect=fake_upload) as upload, \
         patch.object(champion_service.s3_service, "delete_image", return_value=True) as delete:
        yield upload, delete


@pytest_asyncio.fixture
async def people(db_session):
    admin = await user_service.create_user(db_session, "admin@example.com", "password123", "A", is_admin=True)
    alex = await golfer_service.create_golfer(db_session, "Alex")
    blair = await golfer_service.create_golfer(db_session, "Blair")
    return admin, alex, blair


class TestChampions:
    @pytest.mark.asyncio
    async def test_create_without_photo(self, db_session, people, mock_images):
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], display_name="  Big Al ", motivation="   "
        )

        assert champion["golfer_name"] == "Alex"
        assert champion["display_name"] == "Big Al"
        assert champion["motivation"] is None
        assert champion["photo_url"] is None
        mock_images[0].assert_not_called()

    @pytest.mark.asyncio
    async def test_create_with_photo(self, db_session, people, mock_images):
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
        )
        assert champion["photo_url"].endswith("champions/img1.png")

    @pytest.mark.asyncio
    async def test_non_image_rejected_before_upload(self, db_session, people, mock_images):
        admin, alex, _ = people
        with pytest.raises(ValidationError):
            await champion_service.create_champion(
                db_session, 2024, alex["id"], admin["id"], image_bytes=b"text", content_type="text/plain"
            )
        mock_images[0].assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_failure_saves_nothing(self, db_session, people):
        admin, alex, _ = people
        with patch.object(
            champion_service.s3_service, "upload_image", side_effect=UpstreamCollaboratorError("down")
        ):
            with pytest.raises(UpstreamCollaboratorError):
                await champion_service.create_champion(
                    db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
                )
        assert await champion_service.get_champion_for_year(db_session, 2024) is None

    @pytest.mark.asyncio
    async def test_duplicate_year(self, db_session, people, mock_images):
        admin, alex, blair = people
        await champion_service.create_champion(db_session, 2024, alex["id"], admin["id"])
        with pytest.raises(DuplicateChampionYear):
            await champion_service.create_champion(db_session, 2024, blair["id"], admin["id"])

    @pytest.mark.asyncio
    async def test_unknown_golfer(self, db_session, people, mock_images):
        admin, _, _ = people
        with pytest.raises(NotFound):
            await champion_service.create_champion(db_session, 2024, 404, admin["id"])

    @pytest.mark.asyncio
    async def test_list_newest_year_first(self, db_session, people, mock_images):
        admin, alex, blair = people
        await champion_service.create_champion(db_session, 2022, alex["id"], admin["id"])
        await champion_service.create_champion(db_session, 2024, blair["id"], admin["id"])
        await champion_service.create_champion(db_session, 2023, alex["id"], admin["id"])

        assert [c["year"] for c in await champion_service.list_champions(db_session)] == [2024, 2023, 2022]

    @pytest.mark.asyncio
    async def test_update_keeps_own_year(self, db_session, people, mock_images):
        admin, alex, blair = people
        champion = await champion_service.create_champion(db_session, 2024, alex["id"], admin["id"])

        updated = await champion_service.update_champion(
            db_session, champion["id"], 2024, blair["id"], favorite_quote="Grip it and rip it"
        )

        assert updated["golfer_name"] == "Blair"
        assert updated["favorite_quote"] == "Grip it and rip it"

    @pytest.mark.asyncio
    async def test_update_to_taken_year(self, db_session, people, mock_images):
        admin, alex, blair = people
        await champion_service.create_champion(db_session, 2023, alex["id"], admin["id"])
        champion = await champion_service.create_champion(db_session, 2024, blair["id"], admin["id"])
        with pytest.raises(DuplicateChampionYear):
            await champion_service.update_champion(db_session, champion["id"], 2023, blair["id"])

    @pytest.mark.asyncio
    async def test_new_photo_replaces_old(self, db_session, people, mock_images):
        upload, delete = mock_images
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
        )

        updated = await champion_service.update_champion(
            db_session, champion["id"], 2024, alex["id"], image_bytes=PNG, content_type="image/png"
        )

        assert updated["photo_url"].endswith("champions/img2.png")
        delete.assert_called_once_with("champions/img1.png")

    @pytest.mark.asyncio
    async def test_update_without_photo_keeps_it(self, db_session, people, mock_images):
        _, delete = mock_images
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
        )
        updated = await champion_service.update_champion(db_session, champion["id"], 2024, alex["id"])
        assert updated["photo_url"] == champion["photo_url"]
        delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_removes_photo(self, db_session, people, mock_images):
        _, delete = mock_images
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
        )

        await champion_service.delete_champion(db_session, champion["id"])

        delete.assert_called_once_with("champions/img1.png")
        with pytest.raises(NotFound):
            await champion_service.get_champion(db_session, champion["id"])

    @pytest.mark.asyncio
    async def test_delete_succeeds_when_image_cleanup_fails(self, db_session, people, mock_images):
        _, delete = mock_images
        delete.return_value = False
        admin, alex, _ = people
        champion = await champion_service.create_champion(
            db_session, 2024, alex["id"], admin["id"], image_bytes=PNG, content_type="image/png"
        )
        await champion_service.delete_champion(db_session, champion["id"])
        assert await champion_service.get_champion_for_year(db_session, 2024) is None
