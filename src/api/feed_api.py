"""Flask API for the feed generator.

Provides endpoints:
- GET /xrpc/app.bsky.feed.getFeedSkeleton      → paginated feed skeleton
- GET /xrpc/app.bsky.feed.describeFeedGenerator → feeds served by this host
- GET /.well-known/did.json                     → did:web document
- GET /health                                   → liveness probe
- /api/admin/*                                  → event intake and post moderation
- /api/eviction/*                               → retention worker control

Architecture:
- Uses Flask application factory pattern (create_app)
- Per-request database connections via Flask's g object
- Long-lived services (ingestion, eviction) keep dedicated connections
"""

import logging
import threading
from typing import Any, Callable

from flask import Flask, current_app, g

from .feed_routes import (
    register_admin_routes,
    register_eviction_routes,
    register_skeleton_routes,
)
from ..config import Config, get_config
from ..log.logger import setup_logger
from ..storage import get_connection
from ..storage.post_repository import PostRepository
from ..service.classifier import PostClassifier
from ..service.eviction_service import EvictionService
from ..service.feed_service import FeedService
from ..service.http_client import BlueskyHttpClient
from ..service.ingestion_service import IngestionService
from ..service.post_lookup_service import PostLookupService


def get_post_repository() -> PostRepository:
    """Get or create the post repository for the current request.

    Uses Flask's g object to store the per-request database connection.
    """
    if "post_repo" not in g:
        conn = get_connection()
        g.connection = conn
        g.post_repo = PostRepository(conn)

    return g.post_repo


def get_feed_service() -> FeedService:
    """Get or create the feed service for the current request."""
    if "feed_service" not in g:
        config = current_app.config["APP_CONFIG"]
        g.feed_service = FeedService(
            get_post_repository(),
            g.logger,
            max_page_size=config.max_page_size,
        )

    return g.feed_service


def _app_singleton(key: str, factory: Callable[[], Any]) -> Any:
    """Return ``current_app.config[key]``, building it once under the app lock."""
    if key not in current_app.config:
        with current_app.config["SERVICES_LOCK"]:
            if key not in current_app.config:
                current_app.config[key] = factory()

    return current_app.config[key]


def get_classifier() -> PostClassifier:
    """Get or create the post classifier as application-level singleton."""
    return _app_singleton(
        "CLASSIFIER", lambda: PostClassifier(current_app.config["APP_LOGGER"])
    )


def _build_ingestion_service() -> IngestionService:
    config = current_app.config["APP_CONFIG"]
    logger = current_app.config["APP_LOGGER"]
    return IngestionService(
        PostRepository(get_connection()),
        get_classifier(),
        logger,
        post_lookup=PostLookupService(
            logger, BlueskyHttpClient(logger, base_url=config.bsky_api_url)
        ),
        owner_did=config.publisher_did,
    )


def get_ingestion_service() -> IngestionService:
    """Get or create the ingestion service as application-level singleton.

    It uses its own database connection that is NOT closed by teardown_db().
    """
    return _app_singleton("INGESTION_SERVICE", _build_ingestion_service)


def _build_eviction_service() -> EvictionService:
    config = current_app.config["APP_CONFIG"]
    return EvictionService(
        PostRepository(get_connection()),
        current_app.config["APP_LOGGER"],
        max_posts=config.max_posts,
        interval_seconds=config.eviction_interval_seconds,
    )


def get_eviction_service() -> EvictionService:
    """Get or create the eviction service as application-level singleton.

    The EvictionService runs a background worker thread that must persist
    beyond individual HTTP requests, so it owns a dedicated connection.
    """
    return _app_singleton("EVICTION_SERVICE", _build_eviction_service)


def create_app(config: Config | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Optional Config instance. If None, uses get_config().

    Returns:
        Configured Flask application instance.

    Example:
        >>> app = create_app()
        >>> app.run(host="0.0.0.0", port=3030)
    """
    if config is None:
        config = get_config()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger = setup_logger(name="feed", log_dir=config.log_dir, level=log_level)

    app = Flask(__name__)

    app.config["APP_CONFIG"] = config
    app.config["APP_LOGGER"] = logger
    # RLock: building the ingestion service also builds the classifier
    app.config["SERVICES_LOCK"] = threading.RLock()

    @app.before_request
    def before_request():
        """Set up request context with logger."""
        g.logger = app.config["APP_LOGGER"]

    @app.teardown_appcontext
    def teardown_db(exception=None):
        """Close database connection at the end of request."""
        conn = g.pop("connection", None)
        if conn is not None:
            conn.close()
            if exception:
                app.config["APP_LOGGER"].warning("Request ended with exception: %s", exception)

    register_skeleton_routes(app, config=config, get_feed_service=get_feed_service)
    register_admin_routes(
        app,
        get_post_repository=get_post_repository,
        get_ingestion_service=get_ingestion_service,
        get_classifier=get_classifier,
    )
    register_eviction_routes(app, get_eviction_service=get_eviction_service)
    return app


def get_app() -> Flask:
    """
    Expose app for external runners (e.g., gunicorn).

    Returns:
        Flask application instance created via factory
    """
    return create_app()


__all__ = ["create_app", "get_app"]
