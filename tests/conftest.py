"""Shared fixtures: a fresh SQLite-backed store per test and a client bound to it."""

import os
import tempfile

# app.main opens its module-level store on import; keep it out of the working tree
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'import.db')}"
)

import pytest
from fastapi.testclient import TestClient

from app.database import create_session_factory
from app.main import app, get_store
from app.store import Store


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'tasks.db'}"


@pytest.fixture
def session_factory(database_url):
    return create_session_factory(database_url)


@pytest.fixture
def store(session_factory):
    return Store(session_factory)


@pytest.fixture
def reopen(database_url):
    """Simulate a restart: a new store over the same durable file."""
    def _reopen():
        return Store(create_session_factory(database_url))
    return _reopen


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
