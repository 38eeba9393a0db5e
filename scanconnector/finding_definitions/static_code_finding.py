"""
Code Scanning Alert finding definition.

Maps GitHub code scanning alerts onto "Code Scanning Alert" connector objects
(one per alert rule) and drives the sync across installations, repositories
and alerts:

1. Capture one sync timestamp for the whole run
2. List App installations and keep organization accounts
3. List each installation's repositories and keep those with code scanning analyses
4. Stream alerts updated since the watermark through the object builder and the handler
5. Stop the whole run as soon as the handler returns False
"""

import logging
from datetime import datetime
from functools import partial
from typing import Optional

from django.utils import timezone

from scanconnector.connector_model import (
    ConnectorObject,
    HandlerWrapper,
    ModelNames,
    ObjectClass,
    ObjectClassInfo,
    ObjectClassInfoMetaData,
    OperationOptions,
    PredefinedTags,
    normalize_finding_severity,
)
from scanconnector.connector_model.attributes import (
    CATEGORIES,
    DESCRIPTION,
    NAME,
    SEVERITY,
    SOURCE_SEVERITY,
    TAGS,
    UID,
    AttributeInfo,
)
from scanconnector.github_connector import (
    CodeScanningAlert,
    GitHubConnector,
    Installation,
    Repository,
)

logger = logging.getLogger(__name__)

OBJECT_TYPE = 'Code Scanning Alert'
OBJECT_CLASS = ObjectClass(OBJECT_TYPE)

# Declared for the downstream model, not populated from GitHub data yet
RULE_SECURITY_SEVERITY = AttributeInfo('RULE_SECURITY_SEVERITY', 'Rule security severity', reserved=True)
SEVERITY_SCORE = AttributeInfo('SEVERITY_SCORE', 'Severity score', reserved=True)

SCHEMA_ATTRIBUTES = (
    UID,
    SEVERITY,
    SOURCE_SEVERITY,
    SEVERITY_SCORE,
    DESCRIPTION,
    NAME,
    RULE_SECURITY_SEVERITY,
    CATEGORIES,
    TAGS,
)


def build_connector_object(
    installation: Installation,
    repo: Repository,
    alert: CodeScanningAlert
) -> Optional[ConnectorObject]:
    """
    Convert one code scanning alert into a connector object.

    The object describes the alert's rule: uid and name are the rule id and
    only rule fields GitHub actually returned become attributes.

    Args:
        installation: Installation the alert was listed through
        repo: Repository the alert belongs to
        alert: Code scanning alert

    Returns:
        ConnectorObject, or None when the alert carries no rule
    """
    rule = alert.rule
    if rule is None:
        logger.debug(f"Skipping alert #{alert.number} in {repo.full_name}: no rule")
        return None

    obj = ConnectorObject(object_class=OBJECT_CLASS, uid=rule.id, name=rule.id)
    obj.set_attribute(UID, rule.id)

    if rule.severity is not None:
        obj.set_attribute(SEVERITY, normalize_finding_severity(rule.severity))
        obj.set_attribute(SOURCE_SEVERITY, rule.severity)
    if rule.description is not None:
        obj.set_attribute(DESCRIPTION, rule.description)
    if rule.name is not None:
        obj.set_attribute(NAME, rule.name)

    obj.set_attribute(TAGS, set(rule.tags))
    return obj


class StaticCodeFindingDefinition:
    """
    Finding definition for GitHub code scanning alerts.

    Usage:
        definition = StaticCodeFindingDefinition(GitHubConnector.from_settings())
        definition.sync(since, HandlerWrapper(callback), OperationOptions())
    """

    object_type = OBJECT_TYPE
    order = 2

    def __init__(self, connector: GitHubConnector):
        self.connector = connector

    def schema(self) -> ObjectClassInfo:
        return ObjectClassInfo(type=OBJECT_TYPE, order=self.order, attributes=SCHEMA_ATTRIBUTES)

    def schema_metadata(self) -> ObjectClassInfoMetaData:
        return ObjectClassInfoMetaData(
            target=ModelNames.STATIC_CODE_FINDING_DEFINITION,
            title=OBJECT_TYPE,  # for display only
            tags=(PredefinedTags.REQUIRED,),
            identifiers=(UID,),
        )

    def sync(
        self,
        since: Optional[datetime],
        handler: HandlerWrapper,
        options: Optional[OperationOptions] = None
    ) -> None:
        """
        Sync code scanning alerts updated since `since` to the handler.

        Every object of the run is handed over with the same timestamp, taken
        when the run starts. GitHub errors propagate and abort the run; callers
        resume with the same watermark on the next call.

        Args:
            since: Watermark; only alerts updated at or after it are synced (None for all)
            handler: Receives each object; returning False ends the run
            options: Page size and alert state filter for the alert listing
        """
        last_updated = int(timezone.now().timestamp() * 1000)
        options = options or OperationOptions()

        logger.info(f"Starting {OBJECT_TYPE} sync (since={since.isoformat() if since else 'beginning'})")

        repositories_synced = 0
        for installation in self.connector.list_installations():
            if not installation.is_organization_account():
                logger.debug(f"Skipping installation {installation.id} ({installation.account_login}): "
                             f"not an organization account")
                continue

            for repo in self.connector.list_repositories(installation):
                if not self.connector.has_code_scanning_analysis(installation, repo):
                    logger.debug(f"Skipping {repo.full_name} - code scanning not enabled")
                    continue

                repositories_synced += 1
                emit = partial(self._handle_alert, installation, repo, handler, last_updated)
                if not self.connector.list_code_scanning_alerts(installation, repo, since, options, emit):
                    logger.info(f"{OBJECT_TYPE} sync stopped by handler at {repo.full_name}: "
                                f"{handler.handled} objects delivered")
                    return

        logger.info(f"{OBJECT_TYPE} sync complete: {repositories_synced} repositories, "
                    f"{handler.handled} objects delivered")

    def _handle_alert(
        self,
        installation: Installation,
        repo: Repository,
        handler: HandlerWrapper,
        last_updated: int,
        alert: CodeScanningAlert
    ) -> bool:
        obj = build_connector_object(installation, repo, alert)
        if obj is None:
            return True
        return handler.handle(obj, last_updated)
