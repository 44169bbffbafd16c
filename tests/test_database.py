from __future__ import annotations

import pytest
from sqlalchemy import inspect, text

pytestmark = pytest.mark.anyio("asyncio")


async def test_create_all_builds_every_cache_table(database) -> None:
    async with database.engine.connect() as connection:
        tables = await connection.run_sync(
            lambda sync_connection: set(inspect(sync_connection).get_table_names())
        )
        movie_columns = await connection.run_sync(
            lambda sync_connection: {
                column["name"] for column in inspect(sync_connection).get_columns("movies")
            }
        )

    assert tables == {
        "cache_entries",
        "categories",
        "movies",
        "actors",
        "movie_actors",
        "images",
    }
    assert {"category_id", "position", "last_updated"} <= movie_columns


async def test_sqlite_connections_use_write_ahead_logging(database) -> None:
    async with database.engine.connect() as connection:
        journal_mode = (await connection.execute(text("PRAGMA journal_mode"))).scalar_one()
        busy_timeout = (await connection.execute(text("PRAGMA busy_timeout"))).scalar_one()

    assert journal_mode.lower() == "wal"
    assert busy_timeout == 30000


async def test_create_all_is_idempotent(database) -> None:
    await database.create_all()

    async with database.session_factory() as session:
        count = (await session.execute(text("SELECT COUNT(*) FROM movies"))).scalar_one()
    assert count == 0
