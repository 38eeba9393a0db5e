"""
Connector object model.

Plain, immutable descriptors for object classes and their schema, plus the
ConnectorObject record handed to sync handlers. Attributes on a ConnectorObject
are sparse: a missing source field means a missing key, never a None value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .attributes import AttributeInfo


class ModelNames:
    """Target models understood by the downstream platform."""
    STATIC_CODE_FINDING_DEFINITION = 'StaticCodeFindingDefinition'


class PredefinedTags:
    REQUIRED = 'REQUIRED'


@dataclass(frozen=True)
class ObjectClass:
    type: str

    def __str__(self) -> str:
        return self.type


@dataclass(frozen=True)
class ObjectClassInfo:
    """Schema descriptor for one object type."""
    type: str
    order: int
    attributes: Tuple[AttributeInfo, ...]

    @property
    def attribute_names(self) -> Tuple[str, ...]:
        return tuple(info.name for info in self.attributes)

    def get_attribute(self, name: str) -> Optional[AttributeInfo]:
        for info in self.attributes:
            if info.name == name:
                return info
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'order': self.order,
            'attributes': [info.to_dict() for info in self.attributes],
        }


@dataclass(frozen=True)
class ObjectClassInfoMetaData:
    """Identifying metadata for an object type (target model, identifiers, title)."""
    target: str
    title: str
    tags: Tuple[str, ...] = ()
    identifiers: Tuple[AttributeInfo, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'target': self.target,
            'title': self.title,
            'tags': list(self.tags),
            'identifiers': [info.name for info in self.identifiers],
        }


@dataclass(frozen=True)
class OperationOptions:
    """Options forwarded by the orchestrator to a sync call."""
    page_size: int = 100
    # open, dismissed or fixed; None lists every state
    alert_state: Optional[str] = None


@dataclass
class ConnectorObject:
    """Generic, schema-conformant record consumed by the downstream platform."""
    object_class: ObjectClass
    uid: str
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    def set_attribute(self, info: AttributeInfo, value: Any) -> None:
        self.attributes[info.name] = value

    def get_attribute(self, info: AttributeInfo, default: Any = None) -> Any:
        return self.attributes.get(info.name, default)

    def has_attribute(self, info: AttributeInfo) -> bool:
        return info.name in self.attributes

    def to_dict(self) -> Dict[str, Any]:
        """Render as a JSON-serialisable dict."""
        attributes = {}
        for name, value in self.attributes.items():
            if isinstance(value, (set, frozenset)):
                value = sorted(value)
            elif isinstance(value, Enum):
                value = value.value
            attributes[name] = value

        return {
            'object_class': self.object_class.type,
            'uid': self.uid,
            'name': self.name,
            'attributes': attributes,
        }
