"""Database adapter factory."""

from __future__ import annotations

from .adapters import SQLAlchemyAdapter
from .base_repository import DBConnection


_adapter: SQLAlchemyAdapter | None = None
_adapter_url: str | None = None
_adapter_schema: str | None = None
_initialized: bool = False


def get_database_adapter() -> SQLAlchemyAdapter:
    """Return the configured database adapter.

    Connection details are taken from `DATABASE_URL` (default: a SQLite file
    under `data/`) and `DB_SCHEMA` by `src.config`.

    Returns:
        SQLAlchemyAdapter instance.
    """

    from ..config import get_config

    global _adapter, _adapter_url, _adapter_schema, _initialized

    config = get_config()

    # Schema is part of the identity: a changed DB_SCHEMA needs a new engine
    # and a fresh initialization.
    if (
        _adapter is None
        or _adapter_url != config.database_url
        or _adapter_schema != config.database_schema
    ):
        if _adapter is not None:
            _adapter.dispose()
        _adapter = SQLAlchemyAdapter(config.database_url, schema=config.database_schema)
        _adapter_url = config.database_url
        _adapter_schema = config.database_schema
        _initialized = False

    return _adapter


def get_connection() -> DBConnection:
    """
    Convenience function to get a database connection using the configured adapter.

    Creates the schema on first use. Every caller gets its own connection;
    the feed server opens one per request and each worker keeps a dedicated one.

    Returns:
        DBConnection instance compatible with all repositories

    Example:
        >>> from src.storage.database import get_connection
        >>> from src.storage.post_repository import PostRepository
        >>>
        >>> conn = get_connection()
        >>> post_repo = PostRepository(conn)
        >>> # ... use repository
        >>> conn.close()
    """
    global _initialized

    adapter = get_database_adapter()
    if not _initialized:
        adapter.initialize()
        _initialized = True

    return adapter.get_connection()
