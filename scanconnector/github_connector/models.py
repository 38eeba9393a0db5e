"""
GitHub API models.

Read-only views over GitHub REST v3 payloads for App installations,
repositories and code scanning alerts. Optional payload fields stay None
instead of being defaulted so callers can tell "absent" from "empty".

Reference: https://docs.github.com/en/rest/apps/apps#list-installations-for-the-authenticated-app
Reference: https://docs.github.com/en/rest/code-scanning/code-scanning#list-code-scanning-alerts-for-a-repository
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional

ORGANIZATION_ACCOUNT = 'Organization'


def parse_datetime(dt_string: Optional[str]) -> Optional[datetime]:
    """Parse ISO 8601 datetime string."""
    if not dt_string:
        return None

    try:
        # Handle both with and without 'Z' suffix
        if dt_string.endswith('Z'):
            dt_string = dt_string[:-1] + '+00:00'
        return datetime.fromisoformat(dt_string)
    except (ValueError, AttributeError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)


@dataclass(frozen=True)
class Installation:
    """GitHub App installation on an organization or user account."""
    id: int
    account_login: Optional[str] = None
    account_type: Optional[str] = None
    target_type: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Installation':
        account = data.get('account') or {}
        return cls(
            id=data['id'],
            account_login=account.get('login'),
            account_type=account.get('type'),
            target_type=data.get('target_type'),
        )

    def is_organization_account(self) -> bool:
        account_type = self.account_type or self.target_type
        return account_type == ORGANIZATION_ACCOUNT


@dataclass(frozen=True)
class Repository:
    id: int
    name: str
    full_name: str
    owner: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Repository':
        full_name = data.get('full_name') or ''
        owner = (data.get('owner') or {}).get('login')
        if not owner and '/' in full_name:
            owner = full_name.split('/', 1)[0]
        return cls(
            id=data['id'],
            name=data['name'],
            full_name=full_name or f"{owner}/{data['name']}",
            owner=owner or '',
        )


@dataclass(frozen=True)
class Rule:
    """Static analysis rule that triggered a code scanning alert."""
    id: str
    name: Optional[str] = None
    severity: Optional[str] = None
    security_severity_level: Optional[str] = None
    description: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional['Rule']:
        """Build a Rule, or None when the payload carries no rule id."""
        if not data or not data.get('id'):
            return None

        return cls(
            id=str(data['id']),
            name=_optional_str(data.get('name')),
            severity=_optional_str(data.get('severity')),
            security_severity_level=_optional_str(data.get('security_severity_level')),
            description=_optional_str(data.get('description')),
            tags=frozenset(data.get('tags') or ()),
        )


@dataclass(frozen=True)
class CodeScanningAlert:
    number: int
    state: Optional[str] = None
    rule: Optional[Rule] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    html_url: Optional[str] = None
    tool_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CodeScanningAlert':
        tool = data.get('tool') or {}
        return cls(
            number=data.get('number'),
            state=_optional_str(data.get('state')),
            rule=Rule.from_api(data.get('rule')),
            created_at=parse_datetime(data.get('created_at')),
            # Alerts never touched after creation may omit updated_at
            updated_at=parse_datetime(data.get('updated_at')) or parse_datetime(data.get('created_at')),
            html_url=_optional_str(data.get('html_url')),
            tool_name=_optional_str(tool.get('name')),
        )
