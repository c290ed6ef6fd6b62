"""Applies upstream post, like and delete events to the feed store."""
from __future__ import annotations

import time
from logging import Logger
from typing import Any, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError

from ..domain.models import Embed
from ..storage.post_repository import PostRepository
from .classifier import PostClassifier
from .post_lookup_service import PostLookupService
from .text_extractor import embed_from_record, extract_fragments


class IngestionService:
    """Entry point for events discovered by the upstream firehose consumer.

    Storage errors on this path are logged and the event is dropped; the
    upstream source does not redeliver, so retrying here would only stall it.
    """

    EVENT_TYPES = ("post", "delete", "like", "unlike")

    def __init__(
        self,
        post_repo: PostRepository,
        classifier: PostClassifier,
        logger: Logger,
        post_lookup: Optional[PostLookupService] = None,
        owner_did: Optional[str] = None,
    ) -> None:
        """Initialize ingestion service.

        Args:
            post_repo: Repository the accepted posts are written to
            classifier: Post classifier
            logger: Logger instance
            post_lookup: AppView client used when the feed owner likes a post
            owner_did: DID of the feed owner; their likes pull posts into the feed
        """
        self.repo = post_repo
        self.classifier = classifier
        self.logger = logger
        self.post_lookup = post_lookup
        self.owner_did = owner_did

    # ========== Upstream events ==========

    def on_new_post(
        self,
        uri: str,
        text: str,
        embed: Optional[Embed] = None,
        timestamp: Optional[int] = None,
    ) -> bool:
        """Classify a new post and store it when it belongs to the feed.

        Args:
            uri: Post at:// URI
            text: Post body
            embed: Attached embed, if any
            timestamp: Epoch seconds (defaults to now)

        Returns:
            True if the post was stored
        """
        scoring = self.classifier.classify(extract_fragments(text, embed))
        if scoring is None:
            return False

        return self._store(uri, text, scoring.priority, timestamp)

    def on_delete_post(self, uri: str) -> None:
        """Remove a deleted post and its likes."""
        try:
            if self.repo.delete(uri):
                self.logger.info("Deleted post %s", uri)
        except SQLAlchemyError:
            self.logger.exception("Failed to delete post %s", uri)

    def on_like(self, like_uri: str, liked_post_uri: str, liker_did: str) -> None:
        """Record a like; a like by the feed owner may also pull the post in.

        Args:
            like_uri: URI of the like record
            liked_post_uri: URI of the liked post
            liker_did: DID of the account that liked the post
        """
        if self.owner_did and liker_did == self.owner_did:
            self.logger.info("Feed owner liked %s", liked_post_uri)
            self._ingest_owner_like(liked_post_uri)

        try:
            self.repo.add_like(liked_post_uri, like_uri)
        except SQLAlchemyError:
            self.logger.exception("Failed to record like %s", like_uri)

    def on_unlike(self, like_uri: str) -> None:
        """Remove a like."""
        try:
            self.repo.remove_like(like_uri)
        except SQLAlchemyError:
            self.logger.exception("Failed to remove like %s", like_uri)

    # ========== Dispatch ==========

    def handle_event(self, event: dict[str, Any]) -> Optional[bool]:
        """Dispatch one decoded upstream event.

        Expected shapes::

            {"type": "post", "uri": ..., "text": ..., "embed": {...}, "timestamp": 1700000000}
            {"type": "delete", "uri": ...}
            {"type": "like", "uri": <like uri>, "subject": <post uri>, "author": <did>}
            {"type": "unlike", "uri": <like uri>}

        ``embed`` is the embed object of the post record, as published.

        Returns:
            For posts, whether the post was stored; None otherwise

        Raises:
            ValueError: If the event type is unknown or required fields are missing
        """
        event_type = event.get("type")
        if event_type not in self.EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type!r}")

        uri = event.get("uri")
        if not uri:
            raise ValueError("Event is missing 'uri'")

        if event_type == "post":
            timestamp = event.get("timestamp")
            if timestamp is not None:
                try:
                    timestamp = int(timestamp)
                except (TypeError, ValueError):
                    raise ValueError(f"Invalid timestamp: {timestamp!r}")
            return self.on_new_post(
                uri,
                event.get("text") or "",
                embed_from_record(event.get("embed")),
                timestamp,
            )

        if event_type == "delete":
            self.on_delete_post(uri)
        elif event_type == "like":
            subject = event.get("subject")
            if not subject:
                raise ValueError("Like event is missing 'subject'")
            self.on_like(uri, subject, event.get("author") or "")
        else:
            self.on_unlike(uri)
        return None

    # ========== Internals ==========

    def _store(self, uri: str, text: str, priority: int, timestamp: Optional[int]) -> bool:
        if timestamp is None:
            timestamp = int(time.time())
        try:
            self.repo.insert_or_replace(uri, text, priority, timestamp)
        except SQLAlchemyError:
            self.logger.exception("Failed to store post %s, dropping it", uri)
            return False

        self.logger.info("Storing %s (priority=%d)", uri, priority)
        return True

    def _ingest_owner_like(self, post_uri: str) -> None:
        """Classify a post liked by the feed owner using its fetched text."""
        if self.post_lookup is None:
            return

        try:
            texts = self.post_lookup.get_post_texts([post_uri])
        except requests.RequestException as e:
            self.logger.error("Failed to fetch liked post %s: %s", post_uri, e)
            return

        for uri, text in texts.items():
            scoring = self.classifier.classify_text(text)
            if scoring is not None:
                self._store(uri, text, scoring.priority, None)
