"""Fetch post bodies from the public AppView."""
from __future__ import annotations

from logging import Logger
from typing import Optional

from ..config import get_config
from .http_client import BlueskyHttpClient


class PostLookupService:
    """Resolves post URIs to their record text via ``app.bsky.feed.getPosts``."""

    GET_POSTS_METHOD = "app.bsky.feed.getPosts"
    MAX_URIS_PER_REQUEST = 25  # AppView limit

    def __init__(
        self,
        logger: Logger,
        http_client: Optional[BlueskyHttpClient] = None,
    ) -> None:
        self.logger = logger
        if http_client is None:
            http_client = BlueskyHttpClient(logger, base_url=get_config().bsky_api_url)
        self.http_client = http_client

    def get_post_texts(self, uris: list[str]) -> dict[str, str]:
        """Fetch the text of each post.

        Posts the AppView does not return (deleted, blocked) are absent from
        the result. Records without text map to an empty string.

        Args:
            uris: Post at:// URIs

        Returns:
            Mapping of URI to post text

        Raises:
            requests.RequestException: On transport errors or HTTP failures
        """
        texts: dict[str, str] = {}
        for start in range(0, len(uris), self.MAX_URIS_PER_REQUEST):
            batch = uris[start:start + self.MAX_URIS_PER_REQUEST]
            response = self.http_client.get(
                self.http_client.xrpc_url(self.GET_POSTS_METHOD),
                params=[("uris", uri) for uri in batch],
            )
            payload = response.json()

            for post in payload.get("posts", []):
                uri = post.get("uri")
                if not uri:
                    continue
                record = post.get("record")
                text = record.get("text") if isinstance(record, dict) else None
                texts[uri] = text if isinstance(text, str) else ""

        self.logger.debug("Looked up %d of %d posts", len(texts), len(uris))
        return texts
