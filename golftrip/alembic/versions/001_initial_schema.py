"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2025-05-01 12:00:00.000000

Creates every table for a fresh deployment:
- Auth: users, sessions, password_reset_tokens
- Roster: golfers, golfer_statuses
- Tournament: foursomes, champions
- Gallery: photos
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables from scratch."""
    from golftrip.database.db import Base
    from golftrip.database import models  # noqa: F401

    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    """Drop all tables."""
    from golftrip.database.db import Base
    from golftrip.database import models  # noqa: F401

    Base.metadata.drop_all(bind=op.get_bind(), checkfirst=True)
