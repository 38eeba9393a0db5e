"""
GitHub API collaborator: App authentication, REST client, payload models and
the GitHubConnector listing calls used by finding definitions.
"""

from .auth import GitHubAppAuth
from .connector import GitHubConnector
from .exceptions import GitHubConfigurationError, GitHubError, GitHubRateLimitError
from .models import CodeScanningAlert, Installation, Repository, Rule
from .rest_client import GitHubRestClient

__all__ = [
    'CodeScanningAlert',
    'GitHubAppAuth',
    'GitHubConfigurationError',
    'GitHubConnector',
    'GitHubError',
    'GitHubRateLimitError',
    'GitHubRestClient',
    'Installation',
    'Repository',
    'Rule',
]
