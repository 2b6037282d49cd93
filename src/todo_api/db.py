from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import asyncpg

from .models import TodoEntity
from .repositories import Repository, StorageError
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"


_COLS = _Cols()

# Errors that mean "the database could not run the statement".
_STORAGE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class Database:
    """
    Owner of the process-wide asyncpg connection pool.

    The pool is built by connect() (once, at application startup) and torn
    down by close(). Every query leases one connection for exactly one
    statement and hands it back, also on error.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def pool(self) -> asyncpg.Pool:
        """Return the shared pool. Raises if connect() was never called."""
        if self._pool is None:
            raise RuntimeError("Database pool not initialised; call connect() at startup")
        return self._pool

    async def connect(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        s = self._settings
        self._pool = await asyncpg.create_pool(
            host=s.postgres_host,
            port=s.postgres_port,
            database=s.postgres_db,
            user=s.postgres_user,
            password=s.postgres_password,
            ssl="require" if s.ssl_required else False,
            min_size=0,
            max_size=s.pool_max_size,
            max_inactive_connection_lifetime=s.pool_idle_timeout,
            timeout=s.pool_acquire_timeout,
        )
        logger.info(
            "Connection pool created for %s:%s/%s (max %d connections)",
            s.postgres_host,
            s.postgres_port,
            s.postgres_db,
            s.pool_max_size,
        )
        return self._pool

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("Connection pool closed")

    async def query(self, sql: str, *params: Any) -> List[asyncpg.Record]:
        """
        Run a single parameterized statement on a leased connection and
        return its rows. Driver errors propagate unchanged.
        """
        async with self.pool.acquire(timeout=self._settings.pool_acquire_timeout) as conn:
            return await conn.fetch(sql, *params)


# PUBLIC_INTERFACE
async def initialize_database(db: Database) -> None:
    """
    Create the todos table if it does not exist yet. Idempotent.

    Failures are logged and re-raised: nothing else works without the table.
    """
    try:
        await db.query(
            f"""
            CREATE TABLE IF NOT EXISTS {_COLS.table} (
                {_COLS.id} SERIAL PRIMARY KEY,
                {_COLS.title} VARCHAR(255) NOT NULL,
                {_COLS.completed} BOOLEAN DEFAULT FALSE,
                {_COLS.created_at} TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    except Exception:
        logger.exception("Database initialization failed")
        raise
    logger.info("Database initialized successfully")


class PostgresRepository(Repository):
    """
    PostgreSQL repository implementing the Repository interface. Each
    operation is exactly one statement; not-found is an empty RETURNING set.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def startup(self) -> None:
        await self._db.connect()
        try:
            await initialize_database(self._db)
        except Exception:
            await self._db.close()
            raise

    async def shutdown(self) -> None:
        await self._db.close()

    async def _fetch(self, sql: str, *params: Any) -> List[asyncpg.Record]:
        try:
            return await self._db.query(sql, *params)
        except _STORAGE_ERRORS as exc:
            raise StorageError(str(exc) or exc.__class__.__name__) from exc

    def _row_to_entity(self, row: asyncpg.Record) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "completed": bool(row[_COLS.completed]),
            "created_at": row[_COLS.created_at],
        }

    async def ping(self) -> None:
        await self._fetch("SELECT 1")

    async def list(self) -> List[TodoEntity]:
        rows = await self._fetch(
            f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC"
        )
        return [self._row_to_entity(r) for r in rows]

    async def create(self, title: str) -> TodoEntity:
        rows = await self._fetch(
            f"INSERT INTO {_COLS.table} ({_COLS.title}) VALUES ($1) RETURNING *", title
        )
        return self._row_to_entity(rows[0])

    async def set_completed(self, todo_id: int, completed: bool) -> Optional[TodoEntity]:
        rows = await self._fetch(
            f"UPDATE {_COLS.table} SET {_COLS.completed} = $1 WHERE {_COLS.id} = $2 RETURNING *",
            completed,
            todo_id,
        )
        return self._row_to_entity(rows[0]) if rows else None

    async def delete(self, todo_id: int) -> Optional[TodoEntity]:
        rows = await self._fetch(
            f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = $1 RETURNING *", todo_id
        )
        return self._row_to_entity(rows[0]) if rows else None
