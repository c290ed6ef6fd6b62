"""Pytest fixtures for the SQLite-backed feed store."""

from __future__ import annotations

import os
from logging import Logger
from typing import Iterator
from unittest.mock import Mock

import pytest

from src.storage.adapters.sqlalchemy_adapter import SQLAlchemyAdapter, SQLAlchemyConnection
from src.storage.post_repository import PostRepository


@pytest.fixture(scope="session", autouse=True)
def _set_required_env_defaults() -> None:
    """Ensure required env vars exist for config validation in tests."""

    os.environ.setdefault("PUBLISHER_DID", "did:plc:testpublisher")


@pytest.fixture()
def database_url(tmp_path) -> str:
    """Return a SQLite URL for a file in the per-test temp directory."""

    return f"sqlite:///{tmp_path / 'feed.db'}"


@pytest.fixture()
def adapter(database_url: str) -> Iterator[SQLAlchemyAdapter]:
    """Create an initialized adapter and dispose of it afterwards."""

    db_adapter = SQLAlchemyAdapter(database_url)
    db_adapter.initialize()
    try:
        yield db_adapter
    finally:
        db_adapter.dispose()


@pytest.fixture()
def db_conn(adapter: SQLAlchemyAdapter) -> Iterator[SQLAlchemyConnection]:
    """Return a DBConnection bound to the per-test database."""

    conn = adapter.get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def post_repo(db_conn: SQLAlchemyConnection) -> PostRepository:
    """Return a PostRepository on the per-test connection."""

    return PostRepository(db_conn)


@pytest.fixture()
def logger() -> Mock:
    """Return a Logger mock."""

    return Mock(spec=Logger)
