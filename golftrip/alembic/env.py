"""
Alembic environment for async migrations.

Used by the Alembic CLI (``alembic -c golftrip/alembic.ini upgrade head``)
and by :func:`run_migrations_programmatic`.
"""

from logging.config import fileConfig
import asyncio
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context, config as alembic_config, command

# Import all models so Alembic can detect them
from golftrip.database.db import Base, DATABASE_URL
from golftrip.database import models  # noqa: F401

logger = logging.getLogger(__name__)

# Only set when Alembic itself loads this file
config = None
try:
    config = context.config
    if config.config_file_name is not None and not config.attributes.get("programmatic"):
        fileConfig(config.config_file_name, disable_existing_loggers=False)
except AttributeError:
    # Imported directly rather than run by Alembic
    pass

target_metadata = Base.metadata

ALEMBIC_INI = Path(__file__).parent.parent / "alembic.ini"


def _database_url(config_obj) -> str:
    url = config_obj.get_main_option("sqlalchemy.url")
    return url if url and "driver://" not in url else DATABASE_URL


def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
    context.configure(
        url=_database_url(config),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = _database_url(config)

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
        logger.info("Migrations executed successfully")
    except Exception as e:
        logger.error(f"Error during migration execution: {e}", exc_info=True)
        raise
    finally:
        await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


async def run_migrations_programmatic(url: Optional[str] = None, revision: str = "head") -> None:
    """
    Upgrade the database to ``revision``.

    Alembic's command API is synchronous and starts its own event loop, so
    it runs in a worker thread.
    """
    alembic_cfg = alembic_config.Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("sqlalchemy.url", url or DATABASE_URL)
    alembic_cfg.attributes["programmatic"] = True

    await asyncio.to_thread(command.upgrade, alembic_cfg, revision)
    logger.info(f"✓ Database upgraded to {revision}")


if config is not None:
    if context.is_offline_mode():
        run_migrations_offline()
    else:
        run_migrations_online()
