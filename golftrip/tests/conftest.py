"""
Shared pytest configuration for golftrip tests.

Service tests run against ``TEST_DATABASE_URL`` (default: in-memory SQLite
via aiosqlite). API tests build a fresh app on a per-test SQLite file so the
app's own event loop owns every connection.

SAFETY: a non-SQLite ``TEST_DATABASE_URL`` must name a database containing
"test"; tables are dropped and recreated for every test.
"""

import os

# Must be set before golftrip.api.routes is imported (disables rate limiting)
os.environ.setdefault("ENV", "test")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool, StaticPool

from golftrip.database import db
from golftrip.database.db import Base

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password-1"
ADMIN_NAME = "Trip Admin"


def _resolve_test_database_url() -> str:
    url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    if not url.startswith("sqlite"):
        db_name = url.rsplit("/", 1)[-1].split("?")[0]
        if "test" not in db_name.lower():
            raise RuntimeError(
                f"SAFETY: Refusing to run tests against database '{db_name}'. "
                f"Set TEST_DATABASE_URL to a database whose name contains 'test'."
            )
    return url


TEST_DATABASE_URL = _resolve_test_database_url()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Fresh schema for every test."""
    if TEST_DATABASE_URL.startswith("sqlite") and ":memory:" in TEST_DATABASE_URL:
        # One shared connection, otherwise each checkout sees an empty database
        engine = db.create_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = db.create_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    session_factory = db.create_session_factory(test_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def s3_env(monkeypatch):
    """S3 configuration for tests that mock the boto3 client."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test-key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test-secret")
    monkeypatch.setenv("AWS_S3_BUCKET", "test-bucket")
    monkeypatch.setenv("AWS_S3_REGION", "us-east-1")


@pytest.fixture
def api_client(tmp_path, monkeypatch):
    """
    TestClient for a new app with an empty database and a bootstrap admin
    (``ADMIN_EMAIL`` / ``ADMIN_PASSWORD``).
    """
    from golftrip.api.main import create_app

    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_NAME", ADMIN_NAME)
    monkeypatch.setenv("DEFAULT_TOURNAMENT_YEAR", "2025")
    monkeypatch.delenv("OPENWEATHERMAP_API_KEY", raising=False)
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
    monkeypatch.delenv("AUTO_PROVISION_ON_LOGIN", raising=False)

    engine = db.create_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    app = create_app(engine=engine)
    with TestClient(app) as client:
        yield client
