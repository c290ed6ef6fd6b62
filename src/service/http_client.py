"""Requests-based client for public Bluesky XRPC endpoints."""

import time
from logging import Logger
from typing import Any, Optional

import requests


class BlueskyHttpClient:
    """GET-only XRPC client with retry on transient failures.

    Rate limits (429) and gateway errors (502, 503, 504) are retried,
    honouring ``Retry-After`` when the server sends one. Network errors are
    retried with exponential backoff. Any other HTTP error is raised at once.
    """

    MAX_RETRIES = 3
    BASE_RETRY_DELAY = 1  # seconds, doubled per attempt
    MAX_BACKOFF_DELAY = 30

    RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})

    def __init__(
        self,
        logger: Logger,
        base_url: str = "https://public.api.bsky.app",
        enable_retry: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.logger = logger
        self.base_url = base_url.rstrip("/")
        self.enable_retry = enable_retry
        self.session = session or requests.Session()

    def xrpc_url(self, method: str) -> str:
        """URL of an XRPC method such as ``app.bsky.feed.getPosts``."""
        return f"{self.base_url}/xrpc/{method}"

    def get(
        self,
        url: str,
        params: Optional[Any] = None,
        timeout: int = 10,
        **kwargs: Any,
    ) -> requests.Response:
        """Send a GET request, retrying transient failures.

        Args:
            url: Absolute request URL
            params: Query parameters; a list of pairs repeats a key
            timeout: Per-attempt timeout in seconds

        Raises:
            requests.HTTPError: For non-retryable statuses, or once retries run out
            requests.RequestException: For network errors once retries run out
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.request(
                    "GET", url, params=params, timeout=timeout, **kwargs
                )
            except requests.RequestException as e:
                if not self._may_retry(attempt):
                    self.logger.error("GET %s failed after %d attempts: %s", url, attempt, e)
                    raise
                delay = self.backoff_delay(attempt)
                self.logger.warning("GET %s network error: %s, retry in %ds", url, e, delay)
                self._sleep(delay)
                continue

            if response.status_code in self.RETRYABLE_STATUS_CODES and self._may_retry(attempt):
                delay = self.retry_delay(response, attempt)
                self.logger.warning(
                    "GET %s returned %d, retry %d/%d in %ds",
                    url,
                    response.status_code,
                    attempt,
                    self.MAX_RETRIES,
                    delay,
                )
                self._sleep(delay)
                continue

            if response.status_code >= 400:
                self.logger.error(
                    "GET %s returned %d: %s", url, response.status_code, response.text[:200]
                )
                response.raise_for_status()

            return response

    def _may_retry(self, attempt: int) -> bool:
        return self.enable_retry and attempt <= self.MAX_RETRIES

    def retry_delay(self, response: requests.Response, attempt: int) -> int:
        """Seconds to wait before retrying a retryable response."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(int(retry_after), self.MAX_BACKOFF_DELAY)
            except ValueError:
                self.logger.warning("Ignoring non-numeric Retry-After: %s", retry_after)
        return self.backoff_delay(attempt)

    def backoff_delay(self, attempt: int) -> int:
        """Exponential backoff for the given attempt, capped at MAX_BACKOFF_DELAY."""
        return min(self.BASE_RETRY_DELAY * 2 ** (attempt - 1), self.MAX_BACKOFF_DELAY)

    def _sleep(self, delay: int) -> None:
        time.sleep(delay)
