"""
GitHub Connector

GitHub API collaborator used by finding definitions. Owns GitHub App
authentication and exposes the listing calls a sync driver needs:
installations, installation repositories, code scanning availability and
code scanning alerts.

Errors from GitHub (authentication, network, rate limits) propagate to the
caller; only "feature not available" answers are turned into a False result.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests
from django.conf import settings

from scanconnector.connector_model import OperationOptions

from .auth import GitHubAppAuth
from .exceptions import GitHubConfigurationError
from .models import CodeScanningAlert, Installation, Repository

logger = logging.getLogger(__name__)

AlertCallback = Callable[[CodeScanningAlert], bool]


class GitHubConnector:
    """
    Entry point to the GitHub API for a single GitHub App.

    Usage:
        connector = GitHubConnector.from_settings()
        for installation in connector.list_installations():
            repos = connector.list_repositories(installation)
    """

    # 404: no analyses yet. 403 only when the body says the feature is off;
    # other 403s (missing permissions, blocked apps) are real errors.
    NO_ANALYSIS_STATUS = 404
    DISABLED_STATUS = 403
    DISABLED_MESSAGES = (
        "advanced security must be enabled",
        "code scanning is not enabled",
        "code scanning is disabled",
        "code security must be enabled",
    )

    def __init__(self, auth: GitHubAppAuth):
        self.auth = auth

    @classmethod
    def from_settings(
        cls,
        app_id: Optional[str] = None,
        private_key: Optional[str] = None
    ) -> 'GitHubConnector':
        """
        Build a connector from Django settings.

        Args:
            app_id: GitHub App id (overrides SC_GITHUB_APP_ID setting)
            private_key: PEM text or key path (overrides SC_GITHUB_PRIVATE_KEY setting)
        """
        app_id = app_id or getattr(settings, 'SC_GITHUB_APP_ID', '')
        private_key = private_key or getattr(settings, 'SC_GITHUB_PRIVATE_KEY', '')

        if not app_id or not private_key:
            raise GitHubConfigurationError(
                "GitHub App not configured. Set SC_GITHUB_APP_ID and SC_GITHUB_PRIVATE_KEY."
            )

        auth = GitHubAppAuth(
            app_id,
            private_key,
            api_url=getattr(settings, 'SC_GITHUB_API_URL', None),
            timeout=getattr(settings, 'SC_GITHUB_REQUEST_TIMEOUT', 30),
            max_rate_limit_wait=getattr(settings, 'SC_GITHUB_MAX_RATE_LIMIT_WAIT', 60),
            max_retries=getattr(settings, 'SC_GITHUB_MAX_RETRIES', 3),
        )
        return cls(auth)

    def list_installations(self) -> List[Installation]:
        """List every installation of the GitHub App."""
        client = self.auth.app_client()
        try:
            installations = [
                Installation.from_api(item)
                for item in client.iter_paginated("/app/installations")
            ]
        finally:
            client.close()

        logger.info(f"Found {len(installations)} GitHub App installations")
        return installations

    def list_repositories(self, installation: Installation) -> List[Repository]:
        """List repositories the installation has access to."""
        client = self.auth.installation_client(installation.id)
        repositories = [
            Repository.from_api(item)
            for item in client.iter_paginated("/installation/repositories", items_key="repositories")
        ]

        logger.info(f"Installation {installation.id} ({installation.account_login}): "
                    f"{len(repositories)} repositories")
        return repositories

    def has_code_scanning_analysis(self, installation: Installation, repo: Repository) -> bool:
        """
        Check whether the repository has at least one code scanning analysis.

        Returns:
            False when code scanning is disabled or has never produced an analysis

        Raises:
            requests.HTTPError: For failures other than "code scanning unavailable"
        """
        client = self.auth.installation_client(installation.id)
        endpoint = f"/repos/{repo.owner}/{repo.name}/code-scanning/analyses"

        try:
            analyses = client.get(endpoint, {"per_page": 1})
        except requests.HTTPError as e:
            if self._is_code_scanning_unavailable(e.response):
                logger.debug(f"Code scanning not available for {repo.full_name} "
                             f"(HTTP {e.response.status_code})")
                return False
            raise

        return bool(analyses)

    def _is_code_scanning_unavailable(self, response: Optional[requests.Response]) -> bool:
        if response is None:
            return False
        if response.status_code == self.NO_ANALYSIS_STATUS:
            return True
        if response.status_code != self.DISABLED_STATUS:
            return False
        message = (response.text or "").lower()
        return any(disabled in message for disabled in self.DISABLED_MESSAGES)

    def list_code_scanning_alerts(
        self,
        installation: Installation,
        repo: Repository,
        since: Optional[datetime],
        options: Optional[OperationOptions],
        callback: AlertCallback
    ) -> bool:
        """
        Stream code scanning alerts updated since a watermark to a callback.

        Alerts are requested most recently updated first, so the listing ends
        at the first alert older than `since`.

        Args:
            installation: Installation that owns the repository
            repo: Repository to list alerts for
            since: Only alerts updated at or after this instant (None for all)
            options: Page size and optional alert state filter
            callback: Receives each alert; returning False stops the listing

        Returns:
            False if the callback stopped the listing, True once it was exhausted
        """
        options = options or OperationOptions()
        since = _as_utc(since)

        client = self.auth.installation_client(installation.id)
        endpoint = f"/repos/{repo.owner}/{repo.name}/code-scanning/alerts"
        params = {"sort": "updated", "direction": "desc"}
        if options.alert_state:
            params["state"] = options.alert_state

        count = 0
        for item in client.iter_paginated(endpoint, params, per_page=options.page_size):
            alert = CodeScanningAlert.from_api(item)

            if since and alert.updated_at and _as_utc(alert.updated_at) < since:
                logger.debug(f"Reached alerts older than {since.isoformat()} for {repo.full_name}")
                break

            count += 1
            if not callback(alert):
                logger.info(f"Alert listing for {repo.full_name} stopped after {count} alerts")
                return False

        logger.debug(f"Listed {count} code scanning alerts for {repo.full_name}")
        return True

    def close(self):
        """Release HTTP sessions held for installations."""
        self.auth.close()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
