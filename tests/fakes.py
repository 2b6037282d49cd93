from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, Dict, List, Optional

from todo_api.models import TodoEntity
from todo_api.repositories import Repository, StorageError
from todo_api.settings import Settings


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests; never reads the process environment."""
    base = Settings(
        postgres_host="db.test",
        postgres_port=5432,
        postgres_db="todos",
        postgres_user="tester",
        postgres_password="secret",
        app_env="development",
        pool_max_size=20,
        pool_idle_timeout=30.0,
        pool_acquire_timeout=2.0,
        persistence_backend="memory",
        cors_allow_origins=["*"],
        log_level="INFO",
    )
    return replace(base, **overrides)


class FailingRepository(Repository):
    """Repository whose every statement fails like an unreachable database."""

    def __init__(self, message: str = "connection refused") -> None:
        self.message = message

    async def ping(self) -> None:
        raise StorageError(self.message)

    async def list(self) -> List[TodoEntity]:
        raise StorageError(self.message)

    async def create(self, title: str) -> TodoEntity:
        raise StorageError(self.message)

    async def set_completed(self, todo_id: int, completed: bool) -> Optional[TodoEntity]:
        raise StorageError(self.message)

    async def delete(self, todo_id: int) -> Optional[TodoEntity]:
        raise StorageError(self.message)


class FakeConnection:
    """
    Stand-in for an asyncpg connection.

    - Records every (sql, params) it is asked to fetch
    - Returns queued results in order (empty list once the queue runs dry)
    - Raises `error` instead, when set
    """

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.results: List[List[Dict[str, Any]]] = []
        self.error: Optional[BaseException] = None

    async def fetch(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        self.calls.append((" ".join(sql.split()), params))
        if self.error is not None:
            raise self.error
        return self.results.pop(0) if self.results else []


class FakePool:
    """Stand-in for asyncpg.Pool tracking leases of its single connection."""

    def __init__(self) -> None:
        self.conn = FakeConnection()
        self.leased = 0
        self.released = 0
        self.acquire_timeouts: List[Optional[float]] = []
        self.closed = False

    @asynccontextmanager
    async def acquire(self, timeout: Optional[float] = None):
        self.acquire_timeouts.append(timeout)
        self.leased += 1
        try:
            yield self.conn
        finally:
            self.leased -= 1
            self.released += 1

    async def close(self) -> None:
        self.closed = True
