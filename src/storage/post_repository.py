"""Repository for curated posts and their likes using SQLAlchemy Core."""

from sqlalchemy import String, delete, func, literal, select, update

from .base_repository import BaseRepository
from .feed_tables import likes, posts
from ..domain.models import Post


_POST_COLUMNS = (
    posts.c.uri,
    posts.c.text,
    posts.c.timestamp,
    posts.c.priority,
    posts.c.pinned,
    posts.c.deleted,
    posts.c.like_count,
    posts.c.indexed_at,
)

# Newest first; uri breaks timestamp ties so pages stay stable between calls.
_FEED_ORDER = (posts.c.timestamp.desc(), posts.c.uri.desc())


def _row_to_post(row) -> Post:
    return Post(
        uri=row[0],
        text=row[1],
        timestamp=int(row[2]),
        priority=int(row[3]),
        pinned=bool(row[4]),
        deleted=bool(row[5]),
        like_count=int(row[6]),
        indexed_at=row[7],
    )


class PostRepository(BaseRepository):
    """Provides persistence for retained posts and the likes they receive.

    This repository manages two tables using SQLAlchemy Core:
    - posts: one row per retained post, keyed by its at:// URI
    - likes: (post_uri, like_uri) pairs referencing posts, removed with them
    """

    # ========== Posts ==========

    def insert_or_replace(self, uri: str, text: str, priority: int, timestamp: int) -> None:
        """Store a post, replacing any previous record with the same URI.

        The replaced record is reset to unpinned and visible. Existing likes
        and the like counter are kept.

        Args:
            uri: Post at:// URI
            text: Post body
            priority: Classifier score
            timestamp: Epoch seconds used for ordering and eviction
        """
        stmt = self._dialect_insert(posts).values(
            uri=uri,
            text=text,
            pinned=False,
            deleted=False,
            priority=priority,
            timestamp=timestamp,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[posts.c.uri],
            set_={
                "text": stmt.excluded.text,
                "pinned": False,
                "deleted": False,
                "priority": stmt.excluded.priority,
                "timestamp": stmt.excluded.timestamp,
                "indexed_at": func.now(),
            },
        )

        with self._transaction():
            self._execute(stmt)

    def delete(self, uri: str) -> int:
        """Physically remove a post and every like referencing it.

        Args:
            uri: Post at:// URI

        Returns:
            Number of deleted posts (0 if the URI was not stored)
        """
        with self._transaction():
            self._execute(delete(likes).where(likes.c.post_uri == uri))
            result = self._execute(delete(posts).where(posts.c.uri == uri))
            return self._rowcount(result)

    def get_post(self, uri: str) -> Post | None:
        """Get a post by URI, including hidden ones.

        Returns:
            Post or None if not stored
        """
        stmt = select(*_POST_COLUMNS).where(posts.c.uri == uri)
        with self._transaction():
            row = self._fetchone(stmt)
        return None if row is None else _row_to_post(row)

    def set_pinned(self, uri: str, pinned: bool) -> bool:
        """Pin or unpin a post.

        Returns:
            True if the post exists
        """
        stmt = update(posts).where(posts.c.uri == uri).values(pinned=pinned)
        with self._transaction():
            return self._rowcount(self._execute(stmt)) > 0

    def mark_deleted(self, uri: str) -> bool:
        """Hide a post from the feed without removing it.

        The row keeps its likes and is reaped by eviction once it ages out.

        Returns:
            True if the post exists
        """
        stmt = update(posts).where(posts.c.uri == uri).values(deleted=True)
        with self._transaction():
            return self._rowcount(self._execute(stmt)) > 0

    # ========== Likes ==========

    def add_like(self, post_uri: str, like_uri: str) -> bool:
        """Record a like for a stored post.

        Likes for posts the feed never kept are ignored, as are repeats of a
        (post_uri, like_uri) pair already stored.

        Args:
            post_uri: URI of the liked post
            like_uri: URI of the like record

        Returns:
            True if a new like row was written
        """
        post_exists = select(posts.c.uri).where(posts.c.uri == post_uri).exists()
        source = select(
            literal(post_uri, String).label("post_uri"),
            literal(like_uri, String).label("like_uri"),
        ).where(post_exists)
        stmt = (
            self._dialect_insert(likes)
            .from_select(["post_uri", "like_uri"], source)
            .on_conflict_do_nothing(index_elements=[likes.c.post_uri, likes.c.like_uri])
        )

        with self._transaction():
            inserted = self._rowcount(self._execute(stmt)) > 0
            if inserted:
                self._execute(
                    update(posts)
                    .where(posts.c.uri == post_uri)
                    .values(like_count=posts.c.like_count + 1)
                )
            return inserted

    def remove_like(self, like_uri: str) -> int:
        """Remove the like rows recorded under a like URI.

        The DELETE itself reports which posts lost a like, and their counters
        are recounted from the likes table.

        Returns:
            Number of removed like rows
        """
        stmt = delete(likes).where(likes.c.like_uri == like_uri).returning(likes.c.post_uri)
        remaining = (
            select(func.count())
            .select_from(likes)
            .where(likes.c.post_uri == posts.c.uri)
            .scalar_subquery()
        )

        with self._transaction():
            rows = self._execute(stmt).fetchall()
            if not rows:
                return 0

            post_uris = sorted({row[0] for row in rows})
            self._execute(
                update(posts).where(posts.c.uri.in_(post_uris)).values(like_count=remaining)
            )
            return len(rows)

    def count_likes(self, post_uri: str) -> int:
        """Count like rows stored for a post."""
        stmt = select(func.count()).select_from(likes).where(likes.c.post_uri == post_uri)
        with self._transaction():
            return self._scalar(stmt) or 0

    # ========== Feed queries ==========

    def query_page(self, limit: int, offset: int = 0) -> list[Post]:
        """Get visible posts, newest first.

        Args:
            limit: Maximum number of posts to return
            offset: Number of posts to skip

        Returns:
            List of Post objects ordered by timestamp DESC, uri DESC
        """
        if limit <= 0:
            return []

        stmt = (
            select(*_POST_COLUMNS)
            .where(posts.c.deleted == False)  # noqa: E712
            .order_by(*_FEED_ORDER)
            .limit(limit)
            .offset(max(offset, 0))
        )
        with self._transaction():
            rows = self._fetchall(stmt)
        return [_row_to_post(row) for row in rows]

    def query_page_with_total(self, limit: int, offset: int = 0) -> tuple[list[Post], int]:
        """Get a page of visible posts together with the visible total.

        The total is a window count over the same filtered rows, so page and
        total come from one SELECT. When the page is empty no row carries it
        and it is read with ``count()``.

        Returns:
            Tuple of (posts ordered like query_page, number of visible posts)
        """
        if limit > 0:
            stmt = (
                select(*_POST_COLUMNS, func.count().over().label("total"))
                .where(posts.c.deleted == False)  # noqa: E712
                .order_by(*_FEED_ORDER)
                .limit(limit)
                .offset(max(offset, 0))
            )
            with self._transaction():
                rows = self._fetchall(stmt)
            if rows:
                return [_row_to_post(row) for row in rows], int(rows[0][-1])

        return [], self.count()

    def count(self) -> int:
        """Count visible (not deleted) posts."""
        stmt = select(func.count()).select_from(posts).where(posts.c.deleted == False)  # noqa: E712
        with self._transaction():
            return self._scalar(stmt) or 0

    def count_all(self) -> int:
        """Count stored posts, hidden ones included."""
        stmt = select(func.count()).select_from(posts)
        with self._transaction():
            return self._scalar(stmt) or 0

    def get_stats(self) -> dict:
        """Get storage statistics.

        Returns:
            Dictionary with counts: {posts, hidden, pinned, likes}
        """
        stmt_visible = select(func.count()).select_from(posts).where(
            posts.c.deleted == False  # noqa: E712
        )
        stmt_hidden = select(func.count()).select_from(posts).where(
            posts.c.deleted == True  # noqa: E712
        )
        stmt_pinned = select(func.count()).select_from(posts).where(
            posts.c.pinned == True  # noqa: E712
        )
        stmt_likes = select(func.count()).select_from(likes)

        with self._transaction():
            return {
                "posts": self._scalar(stmt_visible) or 0,
                "hidden": self._scalar(stmt_hidden) or 0,
                "pinned": self._scalar(stmt_pinned) or 0,
                "likes": self._scalar(stmt_likes) or 0,
            }

    # ========== Retention ==========

    def evict_oldest(self, max_posts: int) -> int:
        """Delete every post ranked beyond the newest ``max_posts``.

        Ranking uses the feed order over all stored rows, so hidden posts age
        out like visible ones. Priority does not protect a post.

        Args:
            max_posts: Number of newest posts to keep

        Returns:
            Number of deleted posts
        """
        if max_posts < 0:
            raise ValueError("max_posts must be >= 0")

        keep = select(posts.c.uri).order_by(*_FEED_ORDER).limit(max_posts)

        with self._transaction():
            total = self._scalar(select(func.count()).select_from(posts)) or 0
            if total <= max_posts:
                return 0

            self._execute(delete(likes).where(likes.c.post_uri.not_in(keep)))
            result = self._execute(delete(posts).where(posts.c.uri.not_in(keep)))
            return self._rowcount(result)
