"""
Tests for s3_service: image checks, upload and delete with mocked boto3.
"""

from unittest.mock import MagicMock, patch

import pytest

from golftrip.services import s3_service
from golftrip.utils.constants import MAX_IMAGE_BYTES
from golftrip.utils.errors import UpstreamCollaboratorError, ValidationError


# ============================================================================
# check_image
# ============================================================================


class TestCheckImage:
    def test_accepts_image(self):
        s3_service.check_image("image/jpeg", 1024)

    @pytest.mark.parametrize("content_type", [None, "", "text/plain", "application/pdf"])
    def test_rejects_non_image(self, content_type):
        with pytest.raises(ValidationError) as exc_info:
            s3_service.check_image(content_type, 1024)
        assert exc_info.value.field_errors == {"photo": ["File must be an image"]}

    def test_rejects_oversized(self):
        with pytest.raises(ValidationError) as exc_info:
            s3_service.check_image("image/png", MAX_IMAGE_BYTES + 1, field="file")
        assert "file" in exc_info.value.field_errors

    def test_limit_is_inclusive(self):
        s3_service.check_image("image/png", MAX_IMAGE_BYTES)

    def test_rejects_empty(self):
        with pytest.raises(ValidationError):
            s3_service.check_image("image/png", 0)


# ============================================================================
# upload_image (mocked)
# ============================================================================


class TestUploadImage:
    @pytest.fixture(autouse=True)
    def _env(self, s3_env):
        pass

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_upload_returns_id_and_url(self, mock_get_client):
        mock_client = MagicMock()
        mock_get_client.return_value = mock_client

        result = s3_service.upload_image(b"fake-image-bytes", "image/png", prefix="gallery")

        assert result["id"].startswith("gallery/")
        assert result["id"].endswith(".png")
        assert result["url"] == f"https://test-bucket.s3.us-east-1.amazonaws.com/{result['id']}"

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_upload_calls_put_object(self, mock_get_client):
        mock_client = MagicMock()
        mock_get_client.return_value = mock_client

        result = s3_service.upload_image(b"img-data", "image/jpeg", prefix="champions")

        mock_client.put_object.assert_called_once()
        kwargs = mock_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket"
        assert kwargs["Key"] == result["id"]
        assert kwargs["Body"] == b"img-data"
        assert kwargs["ContentType"] == "image/jpeg"

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_keys_are_unique(self, mock_get_client):
        mock_get_client.return_value = MagicMock()
        first = s3_service.upload_image(b"a", "image/png")
        second = s3_service.upload_image(b"a", "image/png")
        assert first["id"] != second["id"]

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_upload_failure_raises(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.put_object.side_effect = Exception("S3 error")
        mock_get_client.return_value = mock_client

        with pytest.raises(UpstreamCollaboratorError):
            s3_service.upload_image(b"img", "image/png")

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_unconfigured_store_raises(self, mock_get_client):
        mock_get_client.side_effect = ValueError("AWS S3 environment variables not configured.")
        with pytest.raises(UpstreamCollaboratorError):
            s3_service.upload_image(b"img", "image/png")


# ============================================================================
# delete_image (mocked)
# ============================================================================


class TestDeleteImage:
    @pytest.fixture(autouse=True)
    def _env(self, s3_env):
        pass

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_delete_success(self, mock_get_client):
        mock_client = MagicMock()
        mock_get_client.return_value = mock_client

        assert s3_service.delete_image("gallery/abc.png") is True
        mock_client.delete_object.assert_called_once_with(Bucket="test-bucket", Key="gallery/abc.png")

    @patch("golftrip.services.s3_service._get_s3_client")
    def test_delete_failure_returns_false(self, mock_get_client):
        """S3 errors are logged, never raised."""
        mock_client = MagicMock()
        mock_client.delete_object.side_effect = Exception("S3 error")
        mock_get_client.return_value = mock_client

        assert s3_service.delete_image("gallery/abc.png") is False

    @pytest.mark.parametrize("image_id", [None, ""])
    def test_delete_without_id(self, image_id):
        assert s3_service.delete_image(image_id) is False
