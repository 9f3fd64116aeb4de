"""Shared data models for the relationship graph."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from contact_relations.catalog.types import (
    CustomRelationshipType,
    EdgeType,
    Gender,
    RelationshipType,
)

__all__ = [
    "ContactNode",
    "CustomRelationshipType",
    "EdgeType",
    "Gender",
    "ReferenceKind",
    "RelatedReference",
    "RelationshipEdge",
    "RelationshipType",
    "is_uuid",
]


class ReferenceKind(str, Enum):
    """Namespace of a RELATED value."""
    UUID = "uuid"
    UID = "uid"
    NAME = "name"


UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_PREFIXES = (
    ("urn:uuid:", ReferenceKind.UUID),
    ("uid:", ReferenceKind.UID),
    ("name:", ReferenceKind.NAME),
)


def is_uuid(value: Optional[str]) -> bool:
    """Check whether a string has UUID syntax."""
    return bool(value) and bool(UUID_PATTERN.match(value))


@dataclass(frozen=True)
class RelatedReference:
    """Edge target as written in text, before or after uid resolution."""
    kind: ReferenceKind
    value: str

    @classmethod
    def uuid(cls, value: str) -> "RelatedReference":
        return cls(ReferenceKind.UUID, value)

    @classmethod
    def opaque_id(cls, value: str) -> "RelatedReference":
        return cls(ReferenceKind.UID, value)

    @classmethod
    def name(cls, value: str) -> "RelatedReference":
        return cls(ReferenceKind.NAME, value)

    @classmethod
    def parse(cls, raw: str) -> "RelatedReference":
        """Parse 'urn:uuid:...', 'uid:...' or 'name:...'; bare text is a name."""
        raw = raw.strip()
        for prefix, kind in _PREFIXES:
            if raw.lower().startswith(prefix):
                return cls(kind, raw[len(prefix):].strip())
        return cls(ReferenceKind.NAME, raw)

    @classmethod
    def for_contact(cls, uid: Optional[str], display_name: str) -> "RelatedReference":
        """Most specific reference for a known contact."""
        if is_uuid(uid):
            return cls.uuid(uid)
        if uid and uid != display_name:
            return cls.opaque_id(uid)
        return cls.name(display_name)

    @property
    def is_id(self) -> bool:
        return self.kind is not ReferenceKind.NAME

    def to_value(self) -> str:
        """Serialize for a RELATED frontmatter value."""
        if self.kind is ReferenceKind.NAME:
            return f"name:{self.value}"
        if is_uuid(self.value):
            return f"urn:uuid:{self.value}"
        return f"uid:{self.value}"


@dataclass
class ContactNode:
    """Contact node with mutable attributes."""
    uid: str
    display_name: str
    gender: Gender = Gender.UNSPECIFIED
    file_handle: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class RelationshipEdge:
    """Directed, typed relationship between two contacts."""
    source: str
    target: str
    type: EdgeType
