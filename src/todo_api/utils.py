from __future__ import annotations

from typing import Any, Dict, Iterable

from .models import TodoEntity


# PUBLIC_INTERFACE
def todo_stats(items: Iterable[TodoEntity]) -> Dict[str, Any]:
    """
    Build summary counts for a collection of todos.

    Args:
        items: The todos to summarize.

    Returns:
        Dict with keys: total, completed, pending, completion_rate (0..100, rounded).
    """
    total = 0
    completed = 0
    for item in items:
        total += 1
        if item["completed"]:
            completed += 1
    # Round half up.
    rate = int(completed * 100 / total + 0.5) if total else 0
    return {
        "total": total,
        "completed": completed,
        "pending": total - completed,
        "completion_rate": rate,
    }
