"""Eviction worker API routes."""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask, g, jsonify


def register_eviction_routes(
    app: Flask,
    *,
    get_eviction_service: Callable[[], object],
) -> None:
    """Register eviction endpoints."""

    @app.route("/api/eviction/status", methods=["GET"])
    def get_eviction_status():
        """Get eviction worker status."""
        try:
            status = get_eviction_service().get_worker_status()
            return jsonify({"success": True, "data": status})
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Get eviction status failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500

    @app.route("/api/eviction/run", methods=["POST"])
    def run_eviction():
        """Run one eviction pass now."""
        try:
            evicted = get_eviction_service().run_once()
            return jsonify({"success": True, "data": {"evicted": evicted}})
        except Exception as e:  # noqa: BLE001
            g.logger.error(f"Eviction run failed: {e}", exc_info=True)
            return jsonify({"success": False, "error": str(e)}), 500
