"""Threading scaffold for background workers such as post eviction."""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from logging import Logger
from typing import Optional


@dataclass
class WorkerStats:
    """Counters kept by a worker while its thread runs."""
    processed: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    consecutive_failures: int = 0


class BaseWorkerService(ABC):
    """One daemon thread per service, started and stopped on demand.

    Subclasses implement ``_worker_loop`` (which must poll ``_stop_flag`` or
    wait through ``_interruptible_sleep``) and ``_validate_worker_start``.
    """

    def __init__(self, logger: Logger) -> None:
        self.logger = logger

        self._worker_thread: threading.Thread | None = None
        self._stop_flag = threading.Event()
        self._worker_running = False

        self._stats_lock = threading.Lock()
        self._worker_stats = WorkerStats()

    def _is_worker_alive(self) -> bool:
        return bool(self._worker_thread and self._worker_thread.is_alive())

    def _interruptible_sleep(self, delay: float) -> bool:
        """Wait up to ``delay`` seconds; True if a stop was requested meanwhile."""
        return self._stop_flag.wait(timeout=delay)

    def _record_success(self, processed: int = 1) -> None:
        with self._stats_lock:
            self._worker_stats.processed += processed
            self._worker_stats.consecutive_failures = 0

    def _record_failure(self, error_msg: str) -> int:
        """Count an error and return the current failure streak."""
        with self._stats_lock:
            self._worker_stats.errors += 1
            self._worker_stats.last_error = error_msg
            self._worker_stats.consecutive_failures += 1
            return self._worker_stats.consecutive_failures

    @abstractmethod
    def _validate_worker_start(self) -> dict[str, object]:
        """Return {"valid": True} or {"valid": False, "message": ...}."""

    @abstractmethod
    def _worker_loop(self, *args, **kwargs) -> None:
        """Body of the worker thread."""

    def get_worker_status(self) -> dict:
        """Get worker status.

        Returns:
            Dictionary with: {running, processed, errors, last_error,
            consecutive_failures}
        """
        running = self._is_worker_alive()
        if not running:
            self._worker_running = False

        with self._stats_lock:
            return {"running": running, **asdict(self._worker_stats)}

    def start_worker(self, *args, **kwargs) -> dict[str, object]:
        """Start the worker thread; arguments are forwarded to ``_worker_loop``.

        Returns:
            Status dictionary: {success: bool, message: str}
        """
        if self._is_worker_alive():
            return {"success": False, "message": "Worker already running"}
        self._worker_running = False

        validation = self._validate_worker_start()
        if not validation.get("valid", False):
            return {
                "success": False,
                "message": validation.get("message", "Validation failed"),
            }

        self._stop_flag.clear()
        with self._stats_lock:
            self._worker_stats = WorkerStats()

        self._worker_thread = threading.Thread(
            target=self._worker_loop,
            args=args,
            kwargs=kwargs,
            name=type(self).__name__,
            daemon=True,
        )
        self._worker_running = True
        self._worker_thread.start()

        self.logger.info("%s started", type(self).__name__)
        return {"success": True, "message": "Worker started"}

    def stop_worker(self, timeout: float = 10) -> dict[str, object]:
        """Ask the worker to stop and wait up to ``timeout`` seconds for it.

        Returns:
            Status dictionary: {success: bool, message: str}
        """
        if not self._is_worker_alive():
            self._worker_running = False
            return {"success": False, "message": "Worker not running"}

        self._stop_flag.set()
        self._worker_thread.join(timeout=timeout)

        self._worker_running = self._is_worker_alive()
        if self._worker_running:
            self.logger.warning("%s did not stop within %ss", type(self).__name__, timeout)
            return {"success": True, "message": "Stop requested"}

        self.logger.info("%s stopped", type(self).__name__)
        return {"success": True, "message": "Worker stopped"}
