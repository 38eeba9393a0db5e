"""
Unit tests for GitHubConnector

Tests the GitHub API collaborator including:
- Installation and repository listing
- Code scanning availability checks
- Alert streaming with watermark, state filter and early stop
- Construction from settings
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock, patch

import requests
from django.test import SimpleTestCase, override_settings

from scanconnector.connector_model import OperationOptions
from scanconnector.github_connector.connector import GitHubConnector
from scanconnector.github_connector.exceptions import GitHubConfigurationError
from scanconnector.github_connector.models import Installation, Repository


def alert_payload(number, updated_at, rule_id="py/sql-injection"):
    return {
        "number": number,
        "state": "open",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": updated_at,
        "rule": {"id": rule_id, "severity": "error", "tags": ["security"]},
    }


def http_error(status_code, message=""):
    response = Mock()
    response.status_code = status_code
    response.text = message
    return requests.HTTPError(f"{status_code} Error", response=response)


class TestGitHubConnector(SimpleTestCase):
    """Test cases for GitHubConnector"""

    def setUp(self):
        self.auth = MagicMock()
        self.app_client = MagicMock()
        self.installation_client = MagicMock()
        self.auth.app_client.return_value = self.app_client
        self.auth.installation_client.return_value = self.installation_client

        self.connector = GitHubConnector(self.auth)
        self.installation = Installation(id=11, account_login="test-org", account_type="Organization")
        self.repo = Repository(id=1, name="test-repo", full_name="test-org/test-repo", owner="test-org")

    def test_list_installations(self):
        self.app_client.iter_paginated.return_value = iter([
            {"id": 11, "account": {"login": "test-org", "type": "Organization"}},
            {"id": 12, "account": {"login": "octocat", "type": "User"}},
        ])

        installations = self.connector.list_installations()

        self.assertEqual([i.id for i in installations], [11, 12])
        self.assertTrue(installations[0].is_organization_account())
        self.assertFalse(installations[1].is_organization_account())
        self.app_client.iter_paginated.assert_called_once_with("/app/installations")
        self.app_client.close.assert_called_once()

    def test_list_repositories(self):
        self.installation_client.iter_paginated.return_value = iter([
            {"id": 1, "name": "test-repo", "full_name": "test-org/test-repo", "owner": {"login": "test-org"}},
        ])

        repositories = self.connector.list_repositories(self.installation)

        self.assertEqual(repositories, [self.repo])
        self.auth.installation_client.assert_called_with(11)
        self.installation_client.iter_paginated.assert_called_once_with(
            "/installation/repositories", items_key="repositories"
        )

    def test_has_code_scanning_analysis(self):
        self.installation_client.get.return_value = [{"id": 201, "tool": {"name": "CodeQL"}}]

        self.assertTrue(self.connector.has_code_scanning_analysis(self.installation, self.repo))
        self.installation_client.get.assert_called_once_with(
            "/repos/test-org/test-repo/code-scanning/analyses", {"per_page": 1}
        )

    def test_has_code_scanning_analysis_without_analyses(self):
        self.installation_client.get.return_value = []

        self.assertFalse(self.connector.has_code_scanning_analysis(self.installation, self.repo))

    def test_has_code_scanning_analysis_when_unavailable(self):
        """Test that 404 (no analysis) and a disabled-feature 403 mean code scanning is off"""
        responses = (
            http_error(404, '{"message": "no analysis found"}'),
            http_error(403, '{"message": "Advanced Security must be enabled for this repository to use code scanning."}'),
            http_error(403, '{"message": "Code scanning is not enabled for this repository."}'),
        )
        for error in responses:
            with self.subTest(status_code=error.response.status_code, message=error.response.text):
                self.installation_client.get.side_effect = error

                self.assertFalse(self.connector.has_code_scanning_analysis(self.installation, self.repo))

    def test_has_code_scanning_analysis_propagates_permission_errors(self):
        """Test that a 403 for missing App permissions is not mistaken for disabled code scanning"""
        self.installation_client.get.side_effect = http_error(
            403, '{"message": "Resource not accessible by integration"}'
        )

        with self.assertRaises(requests.HTTPError):
            self.connector.has_code_scanning_analysis(self.installation, self.repo)

    def test_has_code_scanning_analysis_propagates_other_errors(self):
        self.installation_client.get.side_effect = http_error(500)

        with self.assertRaises(requests.HTTPError):
            self.connector.has_code_scanning_analysis(self.installation, self.repo)

    def test_list_code_scanning_alerts_streams_to_callback(self):
        self.installation_client.iter_paginated.return_value = iter([
            alert_payload(3, "2024-03-01T00:00:00Z", "js/xss"),
            alert_payload(2, "2024-02-01T00:00:00Z"),
        ])
        received = []

        exhausted = self.connector.list_code_scanning_alerts(
            self.installation, self.repo, None, None, lambda alert: received.append(alert) or True
        )

        self.assertTrue(exhausted)
        self.assertEqual([alert.number for alert in received], [3, 2])
        self.assertEqual(received[0].rule.id, "js/xss")
        self.installation_client.iter_paginated.assert_called_once_with(
            "/repos/test-org/test-repo/code-scanning/alerts",
            {"sort": "updated", "direction": "desc"},
            per_page=100
        )

    def test_list_code_scanning_alerts_applies_options(self):
        self.installation_client.iter_paginated.return_value = iter([])

        self.connector.list_code_scanning_alerts(
            self.installation, self.repo, None, OperationOptions(page_size=50, alert_state="open"), Mock()
        )

        self.installation_client.iter_paginated.assert_called_once_with(
            "/repos/test-org/test-repo/code-scanning/alerts",
            {"sort": "updated", "direction": "desc", "state": "open"},
            per_page=50
        )

    def test_list_code_scanning_alerts_stops_at_watermark(self):
        """Test that alerts older than `since` end the listing"""
        self.installation_client.iter_paginated.return_value = iter([
            alert_payload(3, "2024-03-01T00:00:00Z"),
            alert_payload(2, "2024-02-01T00:00:00Z"),
            alert_payload(1, "2024-01-01T00:00:00Z"),
        ])
        callback = Mock(return_value=True)

        exhausted = self.connector.list_code_scanning_alerts(
            self.installation, self.repo, datetime(2024, 2, 1, tzinfo=timezone.utc), None, callback
        )

        self.assertTrue(exhausted)
        self.assertEqual([c.args[0].number for c in callback.call_args_list], [3, 2])

    def test_list_code_scanning_alerts_accepts_naive_since(self):
        self.installation_client.iter_paginated.return_value = iter([
            alert_payload(3, "2024-03-01T00:00:00Z"),
            alert_payload(1, "2024-01-01T00:00:00Z"),
        ])
        callback = Mock(return_value=True)

        self.connector.list_code_scanning_alerts(
            self.installation, self.repo, datetime(2024, 2, 1), None, callback
        )

        self.assertEqual(callback.call_count, 1)

    def test_list_code_scanning_alerts_accepts_naive_updated_at(self):
        """Test that alert timestamps without an offset compare as UTC against the watermark"""
        self.installation_client.iter_paginated.return_value = iter([
            alert_payload(3, "2024-03-01T00:00:00"),
            alert_payload(2, "2024-02-01T00:00:00"),
            alert_payload(1, "2024-01-01T00:00:00"),
        ])
        callback = Mock(return_value=True)

        exhausted = self.connector.list_code_scanning_alerts(
            self.installation, self.repo, datetime(2024, 2, 1, tzinfo=timezone.utc), None, callback
        )

        self.assertTrue(exhausted)
        self.assertEqual([c.args[0].number for c in callback.call_args_list], [3, 2])

    def test_list_code_scanning_alerts_stops_when_callback_declines(self):
        self.installation_client.iter_paginated.return_value = iter([
            alert_payload(n, "2024-03-01T00:00:00Z") for n in range(5, 0, -1)
        ])
        callback = Mock(side_effect=[True, False, True, True, True])

        exhausted = self.connector.list_code_scanning_alerts(self.installation, self.repo, None, None, callback)

        self.assertFalse(exhausted)
        self.assertEqual(callback.call_count, 2)

    def test_close_releases_auth_clients(self):
        self.connector.close()

        self.auth.close.assert_called_once()


class TestGitHubConnectorFromSettings(SimpleTestCase):

    @override_settings(SC_GITHUB_APP_ID='', SC_GITHUB_PRIVATE_KEY='')
    def test_missing_configuration(self):
        with self.assertRaises(GitHubConfigurationError):
            GitHubConnector.from_settings()

    @override_settings(
        SC_GITHUB_APP_ID='12345',
        SC_GITHUB_PRIVATE_KEY='pem',
        SC_GITHUB_API_URL='https://ghe.example.com/api/v3',
        SC_GITHUB_REQUEST_TIMEOUT=15,
        SC_GITHUB_MAX_RATE_LIMIT_WAIT=90,
        SC_GITHUB_MAX_RETRIES=5,
    )
    @patch('scanconnector.github_connector.connector.GitHubAppAuth')
    def test_builds_auth_from_settings(self, mock_auth):
        connector = GitHubConnector.from_settings()

        self.assertIs(connector.auth, mock_auth.return_value)
        mock_auth.assert_called_once_with(
            '12345',
            'pem',
            api_url='https://ghe.example.com/api/v3',
            timeout=15,
            max_rate_limit_wait=90,
            max_retries=5,
        )

    @override_settings(SC_GITHUB_APP_ID='12345', SC_GITHUB_PRIVATE_KEY='pem')
    @patch('scanconnector.github_connector.connector.GitHubAppAuth')
    def test_arguments_override_settings(self, mock_auth):
        GitHubConnector.from_settings(app_id='999', private_key='other-pem')

        self.assertEqual(mock_auth.call_args.args, ('999', 'other-pem'))
