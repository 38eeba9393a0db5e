"""
GitHub REST API Client

Thin authenticated wrapper around GitHub REST API v3 used by the connector for
App installations, installation repositories and code scanning endpoints.

Performance:
- Installations / repositories: 1 call per 100 items
- Code scanning alerts: 1 call per 100 alerts, stops early once alerts fall
  behind the sync watermark

Reference: https://docs.github.com/en/rest/code-scanning
Reference: https://docs.github.com/en/rest/using-the-rest-api/rate-limits-for-the-rest-api
"""

import logging
import time
from typing import Any, Dict, Iterator, Optional

import requests

from .exceptions import GitHubRateLimitError

logger = logging.getLogger(__name__)


class GitHubRestClient:
    """
    GitHub REST API client.

    Provides methods for:
    - Single authenticated GET requests
    - Page-number pagination as a lazy iterator
    - Rate limit monitoring and short rate-limit waits
    """

    REST_API_BASE = "https://api.github.com"
    MAX_PER_PAGE = 100
    DEFAULT_TIMEOUT = 30
    DEFAULT_RATE_LIMIT_WAIT = 60.0

    def __init__(
        self,
        github_token: str,
        api_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_rate_limit_wait: float = DEFAULT_RATE_LIMIT_WAIT,
        max_retries: int = 3
    ):
        """
        Initialize REST API client.

        Args:
            github_token: App JWT or installation access token
            api_url: REST API base URL (defaults to api.github.com)
            timeout: Per-request timeout in seconds
            max_rate_limit_wait: Longest rate-limit wait (seconds) to sleep through before raising
            max_retries: Rate-limit retries per request
        """
        self.token = github_token
        self.api_url = (api_url or self.REST_API_BASE).rstrip('/')
        self.timeout = timeout
        self.max_rate_limit_wait = max_rate_limit_wait
        self.max_retries = max_retries

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28"
        })

        logger.debug(f"Initialized GitHub REST API client for {self.api_url}")

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make authenticated GET request.

        Args:
            endpoint: API endpoint path (e.g., "/repos/owner/repo/code-scanning/alerts")
            params: Query parameters

        Returns:
            Response JSON data

        Raises:
            requests.HTTPError: If API request fails
            GitHubRateLimitError: If rate limited for longer than max_rate_limit_wait
        """
        url = f"{self.api_url}{endpoint}"
        retries = 0

        while True:
            response = self.session.get(url, params=params, timeout=self.timeout)

            # Log rate limit info
            self._log_rate_limit(response.headers)

            if self._is_rate_limited(response):
                wait_seconds = self._rate_limit_wait(response.headers)
                if retries < self.max_retries and wait_seconds <= self.max_rate_limit_wait:
                    retries += 1
                    logger.warning(f"Rate limited on {endpoint}, retrying in {wait_seconds:.0f}s "
                                   f"(attempt {retries}/{self.max_retries})")
                    time.sleep(wait_seconds)
                    continue
                raise GitHubRateLimitError(
                    f"GitHub rate limit reached for {endpoint}",
                    retry_after=wait_seconds
                )

            response.raise_for_status()
            return response.json()

    def iter_paginated(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        items_key: Optional[str] = None,
        per_page: int = 100
    ) -> Iterator[Dict[str, Any]]:
        """
        Lazily iterate over every item of a paginated endpoint.

        Pages are fetched on demand, so a consumer that stops iterating stops
        further API calls.

        Args:
            endpoint: API endpoint path
            params: Query parameters
            items_key: Key holding the item list when the endpoint wraps it in an object
                (e.g. "repositories" for /installation/repositories)
            per_page: Results per page (max 100)

        Yields:
            Raw item dictionaries in API order
        """
        # GitHub caps pages at 100 items; a larger value would end the listing early
        per_page = max(1, min(per_page, self.MAX_PER_PAGE))

        params = dict(params or {})
        params["per_page"] = per_page
        params["page"] = 1

        page_count = 0
        item_count = 0

        while True:
            page_count += 1
            logger.debug(f"Fetching page {page_count} from {endpoint}")

            results = self.get(endpoint, params)
            if items_key is not None and isinstance(results, dict):
                results = results.get(items_key) or []

            if not isinstance(results, list) or not results:
                break

            for item in results:
                item_count += 1
                yield item

            if len(results) < per_page:
                break
            params["page"] += 1

        logger.debug(f"Fetched {item_count} total results from {endpoint} ({page_count} pages)")

    def close(self):
        self.session.close()

    def _is_rate_limited(self, response: requests.Response) -> bool:
        if response.status_code not in (403, 429):
            return False
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        if response.headers.get("Retry-After"):
            return True
        return "rate limit" in (response.text or "").lower()

    def _rate_limit_wait(self, headers) -> float:
        """Seconds to wait before the rate limit resets."""
        retry_after = headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        reset = headers.get("X-RateLimit-Reset")
        if reset:
            try:
                return max(float(reset) - time.time(), 1.0)
            except ValueError:
                pass

        return self.DEFAULT_RATE_LIMIT_WAIT

    def _log_rate_limit(self, headers):
        """Log REST API rate limit information from response headers."""
        limit = headers.get("X-RateLimit-Limit")
        remaining = headers.get("X-RateLimit-Remaining")
        reset = headers.get("X-RateLimit-Reset")

        if limit and remaining:
            logger.debug(f"REST API rate limit: {remaining}/{limit} remaining "
                         f"(resets at {reset})")

            # Warn if running low
            if int(remaining) < 100:
                logger.warning(f"REST API rate limit running low: {remaining}/{limit} remaining")
