"""Serves the curated feed as cursor-paginated skeleton pages."""
from __future__ import annotations

from logging import Logger
from typing import Optional

from ..domain.models import FeedPage
from ..storage.post_repository import PostRepository


def parse_cursor(cursor: Optional[str]) -> int:
    """Decode a cursor into an offset.

    Cursors are the decimal offset into the feed. Anything else, including
    negative numbers, means "start over".
    """
    if not cursor:
        return 0
    try:
        offset = int(cursor.strip())
    except ValueError:
        return 0
    return offset if offset > 0 else 0


class FeedService:
    """Stateless pager over the post store.

    All paging state lives in the client's cursor, so pages may shift when
    posts are added, deleted or evicted between calls.
    """

    def __init__(
        self,
        post_repo: PostRepository,
        logger: Logger,
        max_page_size: int = 100,
    ) -> None:
        self.repo = post_repo
        self.logger = logger
        self.max_page_size = max_page_size

    def serve(self, limit: int, cursor: Optional[str] = None) -> FeedPage:
        """Produce one feed page.

        Args:
            limit: Requested page size, clamped to ``max_page_size``
            cursor: Cursor from the previous page, or None for the first page

        Returns:
            FeedPage with post URIs (newest first) and the next cursor, which
            is None once the end of the feed is reached

        Raises:
            SQLAlchemyError: If the store cannot be read
        """
        limit = max(0, min(limit, self.max_page_size))
        offset = parse_cursor(cursor)

        posts, total = self.repo.query_page_with_total(limit, offset)

        end = offset + len(posts)
        next_cursor = str(end) if end < total else None

        self.logger.info("Served %d posts", len(posts))
        return FeedPage(uris=[post.uri for post in posts], cursor=next_cursor)
