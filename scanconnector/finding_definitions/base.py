"""
Finding definition capability.

A finding definition describes one object type (schema + metadata) and knows
how to sync objects of that type through a GitHubConnector. Definitions are
composed with the connector rather than inheriting shared behaviour.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from scanconnector.connector_model import (
    HandlerWrapper,
    ObjectClassInfo,
    ObjectClassInfoMetaData,
    OperationOptions,
)


@runtime_checkable
class FindingDefinition(Protocol):
    object_type: str

    def schema(self) -> ObjectClassInfo:
        ...

    def schema_metadata(self) -> ObjectClassInfoMetaData:
        ...

    def sync(
        self,
        since: Optional[datetime],
        handler: HandlerWrapper,
        options: Optional[OperationOptions] = None
    ) -> None:
        ...
