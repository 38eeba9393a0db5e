"""
Finding severity normalization.

Maps source-specific severity strings (CodeQL rule levels, advisory severities)
onto the canonical severity scale used by connector objects.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    CRITICAL = 'Critical'
    HIGH = 'High'
    MEDIUM = 'Medium'
    LOW = 'Low'
    INFO = 'Info'
    UNKNOWN = 'Unknown'


SEVERITY_MAP = {
    'critical': Severity.CRITICAL,
    'high': Severity.HIGH,
    'error': Severity.HIGH,
    'moderate': Severity.MEDIUM,
    'medium': Severity.MEDIUM,
    'warning': Severity.LOW,
    'low': Severity.LOW,
    'note': Severity.INFO,
    'info': Severity.INFO,
    'informational': Severity.INFO,
    'none': Severity.INFO,
}


def normalize_finding_severity(source_severity: str) -> Severity:
    """
    Map a source severity string to the canonical Severity.

    Args:
        source_severity: Severity as reported by the source (e.g. "error", "warning", "high")

    Returns:
        Canonical Severity, Severity.UNKNOWN for unrecognised values
    """
    if not source_severity:
        return Severity.UNKNOWN

    severity = SEVERITY_MAP.get(source_severity.strip().lower())
    if severity is None:
        logger.debug(f"Unrecognised source severity '{source_severity}', using {Severity.UNKNOWN.value}")
        return Severity.UNKNOWN
    return severity
