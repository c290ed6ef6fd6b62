"""Tests for the feed generator Flask API.

These tests verify the behavior of:
- GET /xrpc/app.bsky.feed.getFeedSkeleton
- GET /xrpc/app.bsky.feed.describeFeedGenerator
- GET /.well-known/did.json
- /api/admin/* and /api/eviction/*
"""
import threading
import time
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from src.api import feed_api
from src.api.feed_api import create_app
from src.storage.post_repository import PostRepository

FEED_URI = "at://did:plc:publisher/app.bsky.feed.generator/TechThreadsAndMore"


class _DummyConfig:
    """Minimal configuration object for create_app()."""

    def __init__(self, log_dir):
        self.log_dir = log_dir
        self.log_level = "DEBUG"
        self.publisher_did = "did:plc:publisher"
        self.feed_uri = FEED_URI
        self.feed_hostname = "feed.example.test"
        self.service_did = "did:web:feed.example.test"
        self.default_page_size = 50
        self.max_page_size = 100
        self.max_posts = 3
        self.eviction_interval_seconds = 10
        self.bsky_api_url = "https://appview.example.test"


@pytest.fixture
def app(adapter, tmp_path, monkeypatch):
    """Create a Flask test app backed by the per-test SQLite store."""
    monkeypatch.setattr("src.api.feed_api.get_connection", adapter.get_connection)
    monkeypatch.setattr("src.api.feed_api.PostLookupService", Mock())

    flask_app = create_app(config=_DummyConfig(tmp_path / "logs"))
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(adapter):
    """Repository for seeding and inspecting the store directly."""
    conn = adapter.get_connection()
    try:
        yield PostRepository(conn)
    finally:
        conn.close()


def _skeleton(client, **params):
    params.setdefault("feed", FEED_URI)
    return client.get("/xrpc/app.bsky.feed.getFeedSkeleton", query_string=params)


class TestFeedSkeleton:
    """Test GET /xrpc/app.bsky.feed.getFeedSkeleton."""

    def test_pages_through_feed(self, client, store):
        """Pages are newest first and carry a cursor until the end."""
        store.insert_or_replace("at://A", "a", 10, 100)
        store.insert_or_replace("at://B", "b", 10, 200)
        store.insert_or_replace("at://C", "c", 10, 300)

        first = _skeleton(client, limit=2)
        assert first.status_code == 200
        assert first.get_json() == {
            "feed": [{"post": "at://C"}, {"post": "at://B"}],
            "cursor": "2",
        }

        second = _skeleton(client, limit=2, cursor="2")
        assert second.get_json() == {"feed": [{"post": "at://A"}]}

    def test_default_limit(self, client, store):
        """Without limit the configured default page size is used."""
        for i in range(60):
            store.insert_or_replace(f"at://{i:02d}", "p", 10, 1000 + i)

        body = _skeleton(client).get_json()

        assert len(body["feed"]) == 50
        assert body["cursor"] == "50"

    def test_garbage_cursor(self, client, store):
        """Unparsable cursors restart from the top."""
        store.insert_or_replace("at://A", "a", 10, 100)

        body = _skeleton(client, cursor="garbage-not-a-number").get_json()

        assert body == {"feed": [{"post": "at://A"}]}

    def test_missing_feed_param(self, client):
        """The feed parameter is required."""
        response = client.get("/xrpc/app.bsky.feed.getFeedSkeleton")

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidRequest"

    def test_unknown_feed(self, client):
        """Only the configured feed is served."""
        response = _skeleton(client, feed="at://did:plc:other/app.bsky.feed.generator/x")

        assert response.status_code == 400
        assert response.get_json()["error"] == "UnsupportedAlgorithm"

    @pytest.mark.parametrize("limit", ["abc", "-1"])
    def test_invalid_limit(self, client, limit):
        """Non-integer and negative limits are rejected."""
        response = _skeleton(client, limit=limit)

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidRequest"

    def test_storage_failure_returns_error(self, client, monkeypatch):
        """Store failures surface as an error response, never partial data."""
        service = Mock()
        service.serve.side_effect = OperationalError("SELECT", {}, Exception("locked"))
        monkeypatch.setattr("src.api.feed_api.get_feed_service", lambda: service)
        app = create_app(config=_DummyConfig(client.application.config["APP_CONFIG"].log_dir))

        response = _skeleton(app.test_client())

        assert response.status_code == 500
        assert response.get_json()["error"] == "InternalServerError"


class TestDescribeEndpoints:
    """Test describeFeedGenerator, did.json and health."""

    def test_describe_feed_generator(self, client):
        """The hosted feed is advertised under the service DID."""
        body = client.get("/xrpc/app.bsky.feed.describeFeedGenerator").get_json()

        assert body == {"did": "did:web:feed.example.test", "feeds": [{"uri": FEED_URI}]}

    def test_did_document(self, client):
        """did.json points at this host."""
        body = client.get("/.well-known/did.json").get_json()

        assert body["id"] == "did:web:feed.example.test"
        assert body["service"][0]["serviceEndpoint"] == "https://feed.example.test"
        assert body["service"][0]["type"] == "BskyFeedGenerator"

    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "ok"}


class TestAdminApi:
    """Test /api/admin endpoints."""

    def test_post_event_is_ingested(self, client, store):
        """Accepted post events are stored and served."""
        response = client.post(
            "/api/admin/events",
            json={"type": "post", "uri": "at://A", "text": "A Rust blog post", "timestamp": 100},
        )

        assert response.status_code == 200
        assert response.get_json() == {"success": True, "stored": True}
        assert store.get_post("at://A").priority == 40
        assert _skeleton(client).get_json() == {"feed": [{"post": "at://A"}]}

    def test_like_event(self, client, store):
        """Like events return success without a stored flag."""
        store.insert_or_replace("at://A", "a", 10, 100)

        response = client.post(
            "/api/admin/events",
            json={"type": "like", "uri": "at://like/1", "subject": "at://A", "author": "did:plc:x"},
        )

        assert response.get_json() == {"success": True}
        assert store.get_post("at://A").like_count == 1

    def test_invalid_event(self, client):
        """Malformed events are rejected with 400."""
        response = client.post("/api/admin/events", json={"type": "repost", "uri": "at://A"})

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_non_object_body(self, client):
        """The body must be a JSON object."""
        response = client.post("/api/admin/events", json=["post"])

        assert response.status_code == 400

    def test_list_posts(self, client, store):
        """Visible posts are listed with their metadata."""
        store.insert_or_replace("at://A", "Rust blog", 40, 100)
        store.add_like("at://A", "at://like/1")

        body = client.get("/api/admin/posts?limit=10").get_json()

        assert body["success"] is True
        assert body["data"]["total"] == 1
        assert body["data"]["posts"] == [
            {
                "uri": "at://A",
                "text": "Rust blog",
                "timestamp": 100,
                "priority": 40,
                "pinned": False,
                "deleted": False,
                "likes": 1,
            }
        ]

    @pytest.mark.parametrize("query", ["limit=0", "limit=501", "offset=-1", "limit=x"])
    def test_list_posts_invalid_paging(self, client, query):
        """Out-of-range paging is rejected."""
        assert client.get(f"/api/admin/posts?{query}").status_code == 400

    def test_pin_and_hide(self, client, store):
        """Pin and hide update the post; hidden posts leave the feed."""
        store.insert_or_replace("at://A", "a", 10, 100)
        store.insert_or_replace("at://B", "b", 10, 200)

        assert client.post("/api/admin/posts/pin", json={"uri": "at://A"}).status_code == 200
        assert client.post("/api/admin/posts/hide", json={"uri": "at://B"}).status_code == 200

        assert store.get_post("at://A").pinned is True
        assert _skeleton(client).get_json() == {"feed": [{"post": "at://A"}]}

        stats = client.get("/api/admin/stats").get_json()["data"]
        assert stats["storage"] == {"posts": 1, "hidden": 1, "pinned": 1, "likes": 0}
        assert "processed" in stats["classifier"]

    def test_pin_unknown_post(self, client):
        """Moderating an unknown post is a 404."""
        response = client.post("/api/admin/posts/pin", json={"uri": "at://missing"})

        assert response.status_code == 404

    def test_hide_requires_uri(self, client):
        """A uri is required."""
        assert client.post("/api/admin/posts/hide", json={}).status_code == 400

    def test_delete_post(self, client, store):
        """Delete removes the post and its likes."""
        store.insert_or_replace("at://A", "a", 10, 100)
        store.add_like("at://A", "at://like/1")

        response = client.post("/api/admin/posts/delete", json={"uri": "at://A"})

        assert response.get_json() == {"success": True, "deleted": 1}
        assert store.get_post("at://A") is None
        assert store.count_likes("at://A") == 0


class TestEvictionApi:
    """Test /api/eviction endpoints."""

    def test_run_and_status(self, client, store):
        """A manual run enforces the configured bound."""
        for i in range(5):
            store.insert_or_replace(f"at://{i}", "p", 10, 100 + i)

        response = client.post("/api/eviction/run")

        assert response.get_json() == {"success": True, "data": {"evicted": 2}}
        assert store.count() == 3

        status = client.get("/api/eviction/status").get_json()["data"]
        assert status["running"] is False
        assert status["max_posts"] == 3
        assert status["last_run_at"] is not None

    def test_run_failure(self, client, monkeypatch):
        """Eviction errors are reported as 500."""
        service = Mock()
        service.run_once.side_effect = OperationalError("DELETE", {}, Exception("locked"))
        monkeypatch.setattr("src.api.feed_api.get_eviction_service", lambda: service)
        app = create_app(config=_DummyConfig(client.application.config["APP_CONFIG"].log_dir))

        response = app.test_client().post("/api/eviction/run")

        assert response.status_code == 500
        assert response.get_json()["success"] is False


class TestAppServices:
    """Test the application-level service singletons."""

    @pytest.mark.parametrize("getter_name", ["get_ingestion_service", "get_eviction_service"])
    def test_concurrent_first_calls_share_one_service(
        self, app, adapter, monkeypatch, getter_name
    ):
        """Simultaneous first requests build the service and its connection once."""
        opened = []

        def slow_connection():
            time.sleep(0.05)
            conn = adapter.get_connection()
            opened.append(conn)
            return conn

        monkeypatch.setattr("src.api.feed_api.get_connection", slow_connection)
        getter = getattr(feed_api, getter_name)
        barrier = threading.Barrier(4)
        services = []

        def first_call():
            with app.app_context():
                barrier.wait()
                services.append(getter())

        threads = [threading.Thread(target=first_call) for _ in range(4)]
        try:
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

            assert len(services) == 4
            assert all(service is services[0] for service in services)
            assert len(opened) == 1
        finally:
            for conn in opened:
                conn.close()

    def test_ingestion_reuses_classifier(self, app):
        """The ingestion service classifies with the app-wide classifier."""
        with app.app_context():
            ingestion = feed_api.get_ingestion_service()

            assert ingestion.classifier is feed_api.get_classifier()
