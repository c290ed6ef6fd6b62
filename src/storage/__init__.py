"""
Storage layer for the curated feed using SQLAlchemy Core.

Runs on SQLite by default and on PostgreSQL when DATABASE_URL points there.
"""
from .database import get_connection, get_database_adapter
from .base_repository import BaseRepository, DBConnection
from .post_repository import PostRepository

__all__ = [
    "BaseRepository",
    "DBConnection",
    "PostRepository",
    "get_connection",
    "get_database_adapter",
]
