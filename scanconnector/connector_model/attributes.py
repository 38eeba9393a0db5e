"""
Connector attribute schema.

Attribute descriptors shared by every finding definition. Descriptors are
immutable and built once at import time; definitions reference them by
identity when declaring their schema and by name when populating objects.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AttributeInfo:
    """Named attribute definition with type and display metadata."""
    name: str
    title: str
    type: type = str
    multi_valued: bool = False
    # Declared in a schema but not populated yet
    reserved: bool = False

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'title': self.title,
            'type': self.type.__name__,
            'multi_valued': self.multi_valued,
            'reserved': self.reserved,
        }


UID = AttributeInfo('UID', 'UID')
SEVERITY = AttributeInfo('SEVERITY', 'Severity')
SOURCE_SEVERITY = AttributeInfo('SOURCE_SEVERITY', 'Source severity')
DESCRIPTION = AttributeInfo('DESCRIPTION', 'Description')
NAME = AttributeInfo('NAME', 'Name')
CATEGORIES = AttributeInfo('CATEGORIES', 'Categories', multi_valued=True)
TAGS = AttributeInfo('TAGS', 'Tags', multi_valued=True)
