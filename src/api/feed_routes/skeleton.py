"""Feed generator protocol routes."""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError


def _xrpc_error(error: str, message: str, status: int):
    return jsonify({"error": error, "message": message}), status


def register_skeleton_routes(
    app: Flask,
    *,
    config,
    get_feed_service: Callable[[], object],
) -> None:
    """Register app.bsky.feed.* and did:web endpoints."""

    @app.route("/xrpc/app.bsky.feed.getFeedSkeleton", methods=["GET"])
    def get_feed_skeleton():
        """Return one page of post URIs and the next cursor."""
        feed = request.args.get("feed")
        if not feed:
            return _xrpc_error("InvalidRequest", "Missing required parameter: feed", 400)
        if feed != config.feed_uri:
            return _xrpc_error("UnsupportedAlgorithm", "Unsupported algorithm", 400)

        raw_limit = request.args.get("limit")
        if raw_limit is None or raw_limit.strip() == "":
            limit = config.default_page_size
        else:
            try:
                limit = int(raw_limit)
            except ValueError:
                return _xrpc_error("InvalidRequest", "limit must be an integer", 400)
            if limit < 0:
                return _xrpc_error("InvalidRequest", "limit must not be negative", 400)

        cursor = request.args.get("cursor")

        try:
            page = get_feed_service().serve(limit, cursor)
        except SQLAlchemyError as e:
            g.logger.error("Serving feed failed: %s", e, exc_info=True)
            return _xrpc_error("InternalServerError", "Feed is temporarily unavailable", 500)

        return jsonify(page.to_skeleton())

    @app.route("/xrpc/app.bsky.feed.describeFeedGenerator", methods=["GET"])
    def describe_feed_generator():
        """Describe the feeds this service hosts."""
        return jsonify(
            {
                "did": config.service_did,
                "feeds": [{"uri": config.feed_uri}],
            }
        )

    @app.route("/.well-known/did.json", methods=["GET"])
    def did_document():
        """Serve the did:web document pointing at this feed generator."""
        return jsonify(
            {
                "@context": ["https://www.w3.org/ns/did/v1"],
                "id": config.service_did,
                "service": [
                    {
                        "id": "#bsky_fg",
                        "type": "BskyFeedGenerator",
                        "serviceEndpoint": f"https://{config.feed_hostname}",
                    }
                ],
            }
        )

    @app.route("/health", methods=["GET"])
    def health():
        """Liveness probe."""
        return jsonify({"status": "ok"})
