"""
Image store backed by S3.

Champion photos and gallery images are uploaded here. An image's ID is its
S3 object key.
"""

import logging
import mimetypes
import os
import uuid
from typing import Dict, Optional

from golftrip.utils.constants import MAX_IMAGE_BYTES
from golftrip.utils.errors import UpstreamCollaboratorError, ValidationError

logger = logging.getLogger(__name__)

# Lazy-initialized S3 client
_s3_client = None


def _get_config():
    """Read S3 configuration from environment at call time (not import time)."""
    return {
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        "bucket": os.getenv("AWS_S3_BUCKET"),
        "region": os.getenv("AWS_S3_REGION", "us-east-1"),
    }


def _get_s3_client():
    """Get or create the boto3 S3 client. Lazy-imports boto3 to avoid import-time dependency."""
    global _s3_client
    if _s3_client is None:
        cfg = _get_config()
        if not all([cfg["access_key_id"], cfg["secret_access_key"], cfg["bucket"]]):
            raise ValueError(
                "AWS S3 environment variables not configured. "
                "Set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, and AWS_S3_BUCKET."
            )
        import boto3

        _s3_client = boto3.client(
            "s3",
            aws_access_key_id=cfg["access_key_id"],
            aws_secret_access_key=cfg["secret_access_key"],
            region_name=cfg["region"],
        )
    return _s3_client


def check_image(content_type: Optional[str], size: int, field: str = "photo") -> None:
    """
    Reject non-images and files over the upload limit.

    Raises:
        ValidationError: With the message under ``field``
    """
    message = None
    if not content_type or not content_type.startswith("image/"):
        message = "File must be an image"
    elif size > MAX_IMAGE_BYTES:
        message = f"Image must be smaller than {MAX_IMAGE_BYTES // (1024 * 1024)}MB"
    elif size == 0:
        message = "Image file is empty"

    if message:
        raise ValidationError(message, field_errors={field: [message]})


def image_url(key: str) -> str:
    cfg = _get_config()
    return f"https://{cfg['bucket']}.s3.{cfg['region']}.amazonaws.com/{key}"


def upload_image(image_bytes: bytes, content_type: str, prefix: str = "images") -> Dict[str, str]:
    """
    Upload an image.

    Stores at key: {prefix}/{uuid}{extension}

    Args:
        image_bytes: Raw file content
        content_type: MIME type, e.g. ``image/jpeg``
        prefix: Key prefix grouping the upload (``champions``, ``gallery``)

    Returns:
        ``{"id": key, "url": public URL}``

    Raises:
        UpstreamCollaboratorError: If the store is unconfigured or rejects the upload
    """
    extension = mimetypes.guess_extension(content_type) or ""
    key = f"{prefix}/{uuid.uuid4().hex}{extension}"

    try:
        client = _get_s3_client()
        client.put_object(
            Bucket=_get_config()["bucket"],
            Key=key,
            Body=image_bytes,
            ContentType=content_type,
        )
    except Exception as e:
        logger.error(f"Failed to upload image to S3: {e}")
        raise UpstreamCollaboratorError("Image upload failed. Please try again.") from e

    logger.info(f"Uploaded image to S3: {key}")
    return {"id": key, "url": image_url(key)}


def delete_image(image_id: Optional[str]) -> bool:
    """
    Delete an image by ID. Best-effort: logs errors but doesn't raise.

    Returns:
        True if deleted successfully, False otherwise
    """
    if not image_id:
        return False
    try:
        client = _get_s3_client()
        client.delete_object(Bucket=_get_config()["bucket"], Key=image_id)
        logger.info(f"Deleted image from S3: {image_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to delete S3 image {image_id}: {e}")
        return False
