"""
Finding definitions exposed by the connector, keyed by object type.
"""

from typing import Dict, Type

from .base import FindingDefinition
from .static_code_finding import OBJECT_TYPE as CODE_SCANNING_ALERT, StaticCodeFindingDefinition

FINDING_DEFINITIONS: Dict[str, Type[FindingDefinition]] = {
    CODE_SCANNING_ALERT: StaticCodeFindingDefinition,
}

__all__ = [
    'FINDING_DEFINITIONS',
    'FindingDefinition',
    'StaticCodeFindingDefinition',
]
