"""Shared HTTP client with retry logic and rate limiting."""

import time
from typing import Optional, Dict, Any

import requests

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class RetryableHTTPClient:
    """HTTP client with exponential backoff retry logic and rate limiting.

    Handles common failure scenarios (429, 500, 502, 503, 504) with exponential
    backoff, respects Retry-After headers, and enforces rate limiting.

    Args:
        rps: Maximum requests per second (default: 1.0)
        max_retries: Maximum number of attempts (default: 3)
        timeout: Request timeout in seconds (default: 60)
        session: Optional pre-built ``requests.Session`` (tests pass a fake)
    """

    def __init__(self, rps: float = 1.0, max_retries: int = 3, timeout: int = 60,
                 session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.rps = rps
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.min_interval = 1.0 / max(rps, 0.01)
        self.last_request_time = 0.0

    def _rate_limit(self):
        """Enforce rate limiting between requests."""
        now = time.time()
        elapsed = now - self.last_request_time
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)
        self.last_request_time = time.time()

    def post_json_with_retry(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded JSON response.

        Args:
            url: Endpoint URL
            payload: JSON-serialisable request body
            headers: Optional request headers
            params: Optional query parameters
            timeout: Optional timeout override (uses instance default if None)

        Returns:
            Decoded JSON body

        Raises:
            requests.HTTPError: On non-retryable HTTP errors, or when retries
                on throttling/server errors are exhausted
            requests.RequestException: On network errors after retries exhausted
        """
        timeout = timeout or self.timeout

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                self._rate_limit()
                r = self.session.post(url, json=payload, headers=headers, params=params, timeout=timeout)

                # Retry on throttling/server errors with exponential backoff
                if r.status_code in RETRYABLE_STATUS and not last_attempt:
                    time.sleep(self._calculate_backoff_time(r, attempt))
                    continue

                r.raise_for_status()
                return r.json()

            except requests.HTTPError:
                raise
            except requests.RequestException:
                # Network or decoding error -> backoff and retry
                if not last_attempt:
                    time.sleep(min(8.0, 2.0 ** attempt))
                    continue
                raise

        raise requests.RequestException(f"No response from {url}")

    def _calculate_backoff_time(self, response: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header if present."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                wait = float(retry_after)
                return max(wait, 1.0)  # At least 1 second
            except (ValueError, TypeError):
                pass
        # Exponential backoff: 1s, 2s, 4s, max 8s
        return min(8.0, 2.0 ** attempt)

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
