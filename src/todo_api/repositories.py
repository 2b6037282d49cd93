from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import List, Optional

from .models import TodoEntity
from .settings import Settings, get_settings


class StorageError(Exception):
    """Raised by repositories when the storage backend fails a statement."""


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    async def startup(self) -> None:
        """Acquire resources and make sure the schema exists. Called once before serving."""

    async def shutdown(self) -> None:
        """Release resources. Called once when the application stops."""

    @abstractmethod
    async def ping(self) -> None:
        """Run a trivial statement against the backend; raise StorageError if unreachable."""

    @abstractmethod
    async def list(self) -> List[TodoEntity]:
        """Return all TodoEntities, newest first."""

    @abstractmethod
    async def create(self, title: str) -> TodoEntity:
        """Insert a new TodoEntity with the given (already trimmed) title and return it."""

    @abstractmethod
    async def set_completed(self, todo_id: int, completed: bool) -> Optional[TodoEntity]:
        """Set the completion flag. Return the updated entity or None if not found."""

    @abstractmethod
    async def delete(self, todo_id: int) -> Optional[TodoEntity]:
        """Delete a TodoEntity by id. Return the deleted entity or None if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now()

    async def ping(self) -> None:
        return None

    async def list(self) -> List[TodoEntity]:
        with self._lock:
            items = sorted(
                self._items.values(),
                key=lambda t: (t["created_at"], t["id"]),
                reverse=True,
            )
            # Return copies to avoid external mutation
            return [t.copy() for t in items]

    async def create(self, title: str) -> TodoEntity:
        with self._lock:
            entity: TodoEntity = {
                "id": self._next_id,
                "title": title,
                "completed": False,
                "created_at": self._now(),
            }
            self._next_id += 1
            self._items[entity["id"]] = entity
            return entity.copy()

    async def set_completed(self, todo_id: int, completed: bool) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            existing["completed"] = completed
            return existing.copy()

    async def delete(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            return self._items.pop(todo_id, None)


# PUBLIC_INTERFACE
def build_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - postgres: PostgresRepository backed by an asyncpg pool
    - memory: InMemoryRepository
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import Database, PostgresRepository

    return PostgresRepository(Database(settings))
