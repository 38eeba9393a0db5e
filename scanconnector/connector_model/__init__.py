"""
Connector object model: attribute schema, object records, severity
normalization and the handler contract used by sync drivers.
"""

from .handler import HandlerWrapper
from .objects import (
    ConnectorObject,
    ModelNames,
    ObjectClass,
    ObjectClassInfo,
    ObjectClassInfoMetaData,
    OperationOptions,
    PredefinedTags,
)
from .severity import Severity, normalize_finding_severity

__all__ = [
    'ConnectorObject',
    'HandlerWrapper',
    'ModelNames',
    'ObjectClass',
    'ObjectClassInfo',
    'ObjectClassInfoMetaData',
    'OperationOptions',
    'PredefinedTags',
    'Severity',
    'normalize_finding_severity',
]
