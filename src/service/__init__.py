"""Service layer for application logic."""
from .classifier import PostClassifier
from .eviction_service import EvictionService
from .feed_service import FeedService
from .ingestion_service import IngestionService
from .post_lookup_service import PostLookupService

__all__ = [
    "PostClassifier",
    "EvictionService",
    "FeedService",
    "IngestionService",
    "PostLookupService",
]
