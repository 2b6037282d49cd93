from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository

from .fakes import FailingRepository, make_settings


@pytest.fixture()
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def client(repo: InMemoryRepository) -> Iterator[TestClient]:
    """TestClient over a fresh app backed by an empty in-memory repository."""
    app = create_app(settings=make_settings(), repository=repo)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def failing_client() -> Iterator[TestClient]:
    """TestClient whose storage backend fails every statement."""
    app = create_app(settings=make_settings(), repository=FailingRepository())
    with TestClient(app) as c:
        yield c
