"""
Postboard Backend — Database Handle & Session Management
==========================================================

What:  The `Database` object (async engine + session factory + migrations),
       the declarative Base, and the per-request session dependency.
Why:   The storage handle is owned by one explicitly constructed object that
       the application creates at startup and disposes at shutdown, instead
       of a module-level engine created at import time.
How:   main.lifespan builds a Database, runs migrations, stores it on
       `app.state.database`; get_db_session() opens one session per request.

Lifecycle:
    Startup:   Database(url) → await database.run_migrations()
    Request:   get_db_session() → yield session → commit | rollback
    Shutdown:  await database.dispose()
"""

import logging
from pathlib import Path
from typing import Any, AsyncGenerator, Dict

from alembic import command
from alembic.config import Config as AlembicConfig
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from postboard.config import Settings

logger = logging.getLogger(__name__)

# Alembic scripts ship inside the package so startup migrations work from
# an installed wheel as well as from a checkout
MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic's env.py reads as
    `target_metadata`.
    """
    pass


def build_alembic_config(connection: Connection | None = None) -> AlembicConfig:
    """
    Build an in-memory Alembic config pointing at the packaged migrations.

    When a connection is given it is handed to env.py through
    `config.attributes`, so migrations run on the caller's connection
    instead of opening a new engine.
    """
    config = AlembicConfig()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        config.attributes["connection"] = connection
    return config


def _upgrade_to_head(connection: Connection) -> None:
    command.upgrade(build_alembic_config(connection), "head")


class Database:
    """
    Owns the async engine and session factory for one database URL.

    One instance per application. Tests build their own against a
    temporary SQLite file.
    """

    def __init__(self, url: str, echo: bool = False, **engine_options: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **engine_options)

        # expire_on_commit=False: response models read attributes after the
        # session commits in get_db_session
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Build a Database from application settings.

        Pool sizing is only passed for server databases; SQLite engines pick
        their own pool class and reject these arguments for in-memory URLs.
        """
        options: Dict[str, Any] = {}
        if not settings.is_sqlite:
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return cls(settings.database_url, echo=settings.log_level == "DEBUG", **options)

    async def run_migrations(self) -> None:
        """
        Apply every Alembic revision that is not yet recorded in alembic_version.

        Idempotent: a second call finds nothing to apply.
        """
        logger.info("Applying database migrations")
        async with self.engine.begin() as conn:
            await conn.run_sync(_upgrade_to_head)

    async def ping(self) -> bool:
        """Run SELECT 1; used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Close every pooled connection. Called once during shutdown."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the Database stored on app.state
        2. Yields it to the route handler
        3. On success: commits
        4. On error: rolls back and re-raises for the global error handlers
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
