from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo row as returned by a
    storage backend.

    Fields:
    - id: Unique integer identifier assigned by storage, never reused
    - title: Short title (trimmed and non-blank, enforced via schemas)
    - completed: Boolean completion flag, the only mutable field
    - created_at: Insertion timestamp assigned by storage
    """

    id: int
    title: str
    completed: bool
    created_at: datetime
