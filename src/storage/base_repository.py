"""Base repository abstractions shared by the feed storage layer."""

from abc import ABC
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert


@runtime_checkable
class DBConnection(Protocol):
    """Abstract database connection used by repositories.

    This protocol defines the minimal surface that repositories rely on.
    It mirrors the SQLAlchemy Session API used in the storage layer so
    repositories can remain backend-agnostic at call sites.
    """

    dialect_name: str

    def execute(self, statement: Any, parameters: Any | None = None) -> Any:
        """Execute a statement and return a result-like object."""

    def commit(self) -> None:
        """Commit the current transaction."""

    def rollback(self) -> None:
        """Roll back the current transaction."""

    def transaction(self) -> AbstractContextManager[Any]:
        """Hold the connection for one logical operation, commit on success."""

    def close(self) -> None:
        """Close the underlying database connection."""


class BaseRepository(ABC):
    """Abstract base repository providing common database operations.

    Every public repository method is one logical operation and runs inside
    ``self._transaction()``: either all of its statements are committed or
    none are.
    """

    def __init__(self, conn: DBConnection):
        """Initialize repository with database connection.

        Args:
            conn: Database connection object implementing :class:`DBConnection`.
        """

        self._conn = conn

    @property
    def conn(self) -> DBConnection:
        """Return the associated database connection abstraction."""

        return self._conn

    def close(self) -> None:
        """Close the underlying database connection, if present."""

        if self._conn:
            self._conn.close()

    def _transaction(self) -> AbstractContextManager[Any]:
        """Open a transaction scope on the connection."""

        return self._conn.transaction()

    def _execute(self, statement: Any, parameters: Any | None = None) -> Any:
        """Execute a statement using the underlying connection."""

        return self._conn.execute(statement, parameters)

    def _fetchone(self, statement: Any, parameters: Any | None = None) -> Any:
        """Execute a statement and fetch one row."""

        result = self._execute(statement, parameters)
        return result.fetchone()

    def _fetchall(self, statement: Any, parameters: Any | None = None) -> Any:
        """Execute a statement and fetch all rows."""

        result = self._execute(statement, parameters)
        return result.fetchall()

    def _scalar(self, statement: Any, parameters: Any | None = None) -> Any:
        """Execute a statement and return scalar value.

        Works with SQLAlchemy result objects.
        """

        result = self._execute(statement, parameters)
        if hasattr(result, "scalar"):
            return result.scalar()
        row = result.fetchone()
        return None if row is None else row[0]

    def _rowcount(self, result: Any) -> int:
        """Return rowcount from a result, if available."""

        if hasattr(result, "rowcount"):
            rowcount = result.rowcount
            return 0 if rowcount is None or rowcount < 0 else int(rowcount)
        return 0

    def _dialect_insert(self, table: Table) -> Any:
        """Return an INSERT construct supporting ``ON CONFLICT`` for this backend."""

        dialect = getattr(self._conn, "dialect_name", "sqlite")
        if dialect == "postgresql":
            return pg_insert(table)
        if dialect == "sqlite":
            return sqlite_insert(table)
        raise ValueError(f"Unsupported database dialect: {dialect}")
