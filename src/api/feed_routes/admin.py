"""Admin API routes: event intake and post moderation."""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask, g, jsonify, request


def _post_to_dict(post) -> dict:
    return {
        "uri": post.uri,
        "text": post.text,
        "timestamp": post.timestamp,
        "priority": post.priority,
        "pinned": post.pinned,
        "deleted": post.deleted,
        "likes": post.like_count,
    }


def _require_uri(data: dict) -> str | None:
    uri = data.get("uri")
    if not isinstance(uri, str) or not uri.strip():
        return None
    return uri.strip()


def register_admin_routes(
    app: Flask,
    *,
    get_post_repository: Callable[[], object],
    get_ingestion_service: Callable[[], object],
    get_classifier: Callable[[], object],
) -> None:
    """Register admin endpoints."""

    @app.route("/api/admin/events", methods=["POST"])
    def ingest_event():
        """Apply one upstream event (post, delete, like, unlike)."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"success": False, "error": "JSON object body required"}), 400

        try:
            stored = get_ingestion_service().handle_event(data)
        except ValueError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Event ingestion failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

        result = {"success": True}
        if stored is not None:
            result["stored"] = stored
        return jsonify(result)

    @app.route("/api/admin/posts", methods=["GET"])
    def list_posts():
        """List visible posts, newest first."""
        try:
            limit = int(request.args.get("limit", 50))
            offset = int(request.args.get("offset", 0))
        except ValueError:
            return jsonify({"success": False, "error": "limit and offset must be integers"}), 400

        if limit < 1 or limit > 500 or offset < 0:
            return (
                jsonify({"success": False, "error": "limit must be 1-500 and offset >= 0"}),
                400,
            )

        try:
            post_repo = get_post_repository()
            posts = post_repo.query_page(limit, offset)
            total = post_repo.count()
            return jsonify(
                {
                    "success": True,
                    "data": {
                        "posts": [_post_to_dict(post) for post in posts],
                        "total": total,
                        "offset": offset,
                    },
                }
            )
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"List posts failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

    @app.route("/api/admin/stats", methods=["GET"])
    def get_stats():
        """Get storage and classifier statistics."""
        try:
            return jsonify(
                {
                    "success": True,
                    "data": {
                        "storage": get_post_repository().get_stats(),
                        "classifier": get_classifier().get_stats(),
                    },
                }
            )
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Get stats failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

    @app.route("/api/admin/posts/pin", methods=["POST"])
    def pin_post():
        """Pin or unpin a post. Body: {"uri": "...", "pinned": true}"""
        data = request.get_json(silent=True) or {}
        uri = _require_uri(data)
        if uri is None:
            return jsonify({"success": False, "error": "uri is required"}), 400

        try:
            found = get_post_repository().set_pinned(uri, bool(data.get("pinned", True)))
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Pin post failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

        if not found:
            return jsonify({"success": False, "error": "Post not found"}), 404
        return jsonify({"success": True})

    @app.route("/api/admin/posts/hide", methods=["POST"])
    def hide_post():
        """Hide a post from the feed until it is evicted. Body: {"uri": "..."}"""
        data = request.get_json(silent=True) or {}
        uri = _require_uri(data)
        if uri is None:
            return jsonify({"success": False, "error": "uri is required"}), 400

        try:
            found = get_post_repository().mark_deleted(uri)
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Hide post failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

        if not found:
            return jsonify({"success": False, "error": "Post not found"}), 404
        g.logger.info("Hid post %s", uri)
        return jsonify({"success": True})

    @app.route("/api/admin/posts/delete", methods=["POST"])
    def delete_post():
        """Remove a post and its likes. Body: {"uri": "..."}"""
        data = request.get_json(silent=True) or {}
        uri = _require_uri(data)
        if uri is None:
            return jsonify({"success": False, "error": "uri is required"}), 400

        try:
            deleted = get_post_repository().delete(uri)
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Delete post failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

        return jsonify({"success": True, "deleted": deleted})
