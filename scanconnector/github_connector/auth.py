"""
GitHub App authentication.

Signs App JWTs and mints installation access tokens through PyGithub, caching
installation tokens until shortly before they expire.

Reference: https://docs.github.com/en/apps/creating-github-apps/authenticating-with-a-github-app
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

from github import Auth, GithubException, GithubIntegration

from .exceptions import GitHubConfigurationError, GitHubError
from .rest_client import GitHubRestClient

logger = logging.getLogger(__name__)


def load_private_key(raw: str) -> str:
    """Load private key from PEM string or file path."""
    if not raw:
        raise GitHubConfigurationError("GitHub App private key is not configured")
    if "PRIVATE KEY" in raw:
        return raw.replace("\\n", "\n")
    path = Path(raw.strip().strip('"'))
    if path.is_file():
        return path.read_text()
    raise GitHubConfigurationError(
        "GitHub App private key must be a PEM string or path to a private key file"
    )


class GitHubAppAuth:
    """
    Credentials for a GitHub App and its installations.

    Usage:
        auth = GitHubAppAuth(app_id, private_key)
        app_client = auth.app_client()
        repo_client = auth.installation_client(installation_id)
    """

    # Refresh installation tokens this long before GitHub expires them
    TOKEN_REFRESH_MARGIN = timedelta(seconds=60)

    def __init__(
        self,
        app_id: str,
        private_key: str,
        api_url: Optional[str] = None,
        **client_options
    ):
        """
        Initialize App credentials.

        Args:
            app_id: GitHub App identifier
            private_key: PEM private key text or path to a .pem file
            api_url: REST API base URL
            client_options: Extra GitHubRestClient options (timeout, max_retries, ...)
        """
        if not app_id:
            raise GitHubConfigurationError("GitHub App id is not configured")

        self.app_id = str(app_id)
        self.api_url = (api_url or GitHubRestClient.REST_API_BASE).rstrip('/')
        self.client_options = client_options

        self._app_auth = Auth.AppAuth(self.app_id, load_private_key(private_key))
        self._integration = GithubIntegration(auth=self._app_auth, base_url=self.api_url)
        self._tokens: Dict[int, Tuple[str, datetime]] = {}
        self._clients: Dict[int, GitHubRestClient] = {}

    def app_client(self) -> GitHubRestClient:
        """REST client authenticated as the App itself (JWT)."""
        return GitHubRestClient(self._app_auth.token, api_url=self.api_url, **self.client_options)

    def installation_client(self, installation_id: int) -> GitHubRestClient:
        """REST client authenticated as one installation, reused while its token is valid."""
        token = self.installation_token(installation_id)
        client = self._clients.get(installation_id)
        if client is None or client.token != token:
            if client is not None:
                client.close()
            client = GitHubRestClient(token, api_url=self.api_url, **self.client_options)
            self._clients[installation_id] = client
        return client

    def installation_token(self, installation_id: int) -> str:
        """Return a cached installation token, minting a new one when close to expiry."""
        cached = self._tokens.get(installation_id)
        now = datetime.now(timezone.utc)
        if cached:
            token, expires_at = cached
            if expires_at - self.TOKEN_REFRESH_MARGIN > now:
                return token

        try:
            authorization = self._integration.get_access_token(installation_id)
        except GithubException as e:
            raise GitHubError(
                f"Failed to create access token for installation {installation_id}: {e}"
            ) from e

        expires_at = authorization.expires_at or now + timedelta(hours=1)
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        self._tokens[installation_id] = (authorization.token, expires_at)
        logger.debug(f"Created access token for installation {installation_id} (expires {expires_at.isoformat()})")
        return authorization.token

    def close(self):
        """Close cached installation clients."""
        for client in self._clients.values():
            client.close()
        self._clients.clear()
