"""Background worker keeping the feed within its retention bound."""
from __future__ import annotations

import time
from logging import Logger

from sqlalchemy.exc import SQLAlchemyError

from ..storage.post_repository import PostRepository
from .base_worker_service import BaseWorkerService


class EvictionService(BaseWorkerService):
    """Deletes the oldest posts once more than ``max_posts`` are stored.

    Retention is by recency only. The worker ticks on a fixed wall-clock
    interval, independent of ingestion volume; a failed tick is logged and
    the next tick simply tries again.
    """

    def __init__(
        self,
        post_repo: PostRepository,
        logger: Logger,
        max_posts: int = 10_000,
        interval_seconds: float = 10,
    ) -> None:
        super().__init__(logger)
        if max_posts < 0:
            raise ValueError("max_posts must be >= 0")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.repo = post_repo
        self.max_posts = max_posts
        self.interval_seconds = interval_seconds
        self._last_run_at: float | None = None

    def run_once(self) -> int:
        """Run one eviction pass.

        Returns:
            Number of evicted posts

        Raises:
            SQLAlchemyError: If the delete fails
        """
        evicted = self.repo.evict_oldest(self.max_posts)
        self._last_run_at = time.time()
        if evicted:
            self.logger.info("Cleaned up %d posts", evicted)
        else:
            self.logger.debug("Cleaned up 0 posts")
        return evicted

    def _validate_worker_start(self) -> dict[str, object]:
        """Eviction has no pre-conditions."""
        return {"valid": True}

    def get_worker_status(self) -> dict:
        """Get worker status with retention settings.

        Returns:
            Dictionary with: {running, processed, errors, last_error,
            consecutive_failures, max_posts, interval_seconds, last_run_at}
        """
        status = super().get_worker_status()
        status["max_posts"] = self.max_posts
        status["interval_seconds"] = self.interval_seconds
        status["last_run_at"] = self._last_run_at
        return status

    def _worker_loop(self) -> None:
        """Background worker loop (runs in separate thread)."""
        self.logger.info(
            "Eviction loop started: max_posts=%d, interval=%ss",
            self.max_posts,
            self.interval_seconds,
        )
        next_tick = time.monotonic()
        try:
            while not self._stop_flag.is_set():
                try:
                    evicted = self.run_once()
                    self._record_success(evicted)
                except SQLAlchemyError as e:
                    failures = self._record_failure(f"Eviction failed: {e}")
                    self.logger.error(
                        "Failed to cleanup posts: %s (consecutive failures: %d)",
                        e,
                        failures,
                    )
                except Exception as e:  # noqa: BLE001
                    self._record_failure(f"Unexpected error: {e}")
                    self.logger.exception("Unexpected error during eviction")

                next_tick += self.interval_seconds
                delay = max(0.0, next_tick - time.monotonic())
                if delay == 0.0:
                    # Fell behind; restart the schedule from now
                    next_tick = time.monotonic()
                if self._interruptible_sleep(delay):
                    self.logger.info("Eviction stop requested during wait")
                    break
        finally:
            self._worker_running = False
            self.logger.info("Eviction loop stopped")
