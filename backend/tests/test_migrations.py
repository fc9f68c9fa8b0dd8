"""
Postboard Backend — Schema Migration Tests
============================================

What:  Tests for the Alembic revisions applied at startup.

What we test:
    ✅ A fresh database gets the full posts table
    ✅ A table created before migrations existed gains `read` with rows unread
    ✅ Running migrations again is a no-op
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import inspect, text

from postboard.database import Database


async def _columns(database: Database) -> list:
    async with database.engine.connect() as conn:
        columns = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_columns("posts"))
    return [column["name"] for column in columns]


async def _version(database: Database) -> str:
    async with database.engine.connect() as conn:
        result = await conn.execute(text("SELECT version_num FROM alembic_version"))
        return result.scalar_one()


class TestMigrations:

    @pytest.mark.asyncio
    async def test_fresh_database(self, database_url):
        database = Database(database_url)
        try:
            await database.run_migrations()

            assert await _columns(database) == ["id", "title", "content", "date", "read"]
            assert await _version(database) == "002"
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_legacy_table_gains_read_flag(self, database_url):
        database = Database(database_url)
        try:
            async with database.engine.begin() as conn:
                await conn.execute(text(
                    "CREATE TABLE posts ("
                    " id INTEGER PRIMARY KEY AUTOINCREMENT,"
                    " title TEXT NOT NULL,"
                    " content TEXT NOT NULL,"
                    " date TEXT NOT NULL)"
                ))
                await conn.execute(text(
                    "INSERT INTO posts (title, content, date) VALUES ('Old', 'Post', '2023-05-01')"
                ))

            await database.run_migrations()

            assert "read" in await _columns(database)
            async with database.engine.connect() as conn:
                rows = (await conn.execute(text("SELECT title, read FROM posts"))).all()
            assert [tuple(row) for row in rows] == [("Old", 0)]
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_migrations_are_idempotent(self, database_url):
        database = Database(database_url)
        try:
            await database.run_migrations()
            async with database.engine.begin() as conn:
                await conn.execute(text(
                    "INSERT INTO posts (title, content, date) VALUES ('A', 'B', 'C')"
                ))

            await database.run_migrations()

            assert await _version(database) == "002"
            async with database.engine.connect() as conn:
                count = (await conn.execute(text("SELECT COUNT(*) FROM posts"))).scalar_one()
            assert count == 1
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_app_serves_legacy_rows(self, app, database_url):
        legacy = Database(database_url)
        async with legacy.engine.begin() as conn:
            await conn.execute(text(
                "CREATE TABLE posts ("
                " id INTEGER PRIMARY KEY AUTOINCREMENT,"
                " title TEXT NOT NULL, content TEXT NOT NULL, date TEXT NOT NULL)"
            ))
            await conn.execute(text(
                "INSERT INTO posts (title, content, date) VALUES ('Old', 'Post', '2023-05-01')"
            ))
        await legacy.dispose()

        async with app.router.lifespan_context(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                posts = (await client.get("/api/posts")).json()
                unread = (await client.get("/api/posts/unread-count")).json()

        assert posts == [
            {"id": 1, "title": "Old", "content": "Post", "date": "2023-05-01", "read": 0}
        ]
        assert unread == {"unread": 1}
