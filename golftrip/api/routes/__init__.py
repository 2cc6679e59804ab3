"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, helpers) lives here; every sub-router
imports what it needs from this package.
"""

import os
from typing import Optional, Tuple

from fastapi import APIRouter, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from golftrip.utils.constants import MAX_IMAGE_BYTES
from golftrip.utils.datetime_utils import current_tournament_year

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
limiter = Limiter(key_func=get_remote_address, enabled=not IS_TEST_ENV)

# Login, registration and password reset requests per client
AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "10/minute")


def resolve_year(year: Optional[int]) -> int:
    """Requested tournament year, or the current one."""
    return year if year is not None else current_tournament_year()


async def read_image_upload(file: Optional[UploadFile]) -> Tuple[Optional[bytes], Optional[str]]:
    """
    Bytes and MIME type of an optional upload; (None, None) when no file was chosen.

    Reads at most one byte past the size limit so oversized files are
    rejected without buffering them whole.
    """
    if file is None or not file.filename:
        return None, None
    data = await file.read(MAX_IMAGE_BYTES + 1)
    return (data or None), file.content_type


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from golftrip.api.routes.auth import router as auth_router  # noqa: E402
from golftrip.api.routes.account import router as account_router  # noqa: E402
from golftrip.api.routes.users import router as users_router  # noqa: E402
from golftrip.api.routes.golfers import router as golfers_router  # noqa: E402
from golftrip.api.routes.scores import router as scores_router  # noqa: E402
from golftrip.api.routes.foursomes import router as foursomes_router  # noqa: E402
from golftrip.api.routes.champions import router as champions_router  # noqa: E402
from golftrip.api.routes.photos import router as photos_router  # noqa: E402
from golftrip.api.routes.dashboard import router as dashboard_router  # noqa: E402

router = APIRouter()
router.include_router(auth_router)
router.include_router(account_router)
router.include_router(users_router)
router.include_router(golfers_router)
router.include_router(scores_router)
router.include_router(foursomes_router)
router.include_router(champions_router)
router.include_router(photos_router)
router.include_router(dashboard_router)
