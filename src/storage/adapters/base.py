"""Structural type for storage backends."""

from typing import Protocol, runtime_checkable

from ..base_repository import DBConnection


@runtime_checkable
class DatabaseAdapter(Protocol):
    """What the storage factory needs from a backend.

    An adapter owns the engine for one database URL: it creates the posts
    and likes tables, hands out independent connections, and releases
    pooled resources on shutdown.
    """

    def initialize(self) -> None:
        """Create the feed tables and indexes; safe to call repeatedly."""
        ...

    def get_connection(self) -> DBConnection:
        """Open a new connection for one component or request."""
        ...

    def dispose(self) -> None:
        """Release the engine's pooled connections."""
        ...
