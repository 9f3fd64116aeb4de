"""Relationship vocabulary types."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class Gender(str, Enum):
    """Contact gender as recorded in the GENDER field."""
    MALE = "M"
    FEMALE = "F"
    NONBINARY = "NB"
    UNSPECIFIED = "U"

    @classmethod
    def parse(cls, value: Any) -> "Gender":
        """Parse a GENDER value; anything unrecognized is UNSPECIFIED."""
        if value is None:
            return cls.UNSPECIFIED
        return _GENDER_WORDS.get(str(value).strip().lower(), cls.UNSPECIFIED)

    @property
    def is_specified(self) -> bool:
        return self is not Gender.UNSPECIFIED


_GENDER_WORDS = {
    "m": Gender.MALE,
    "male": Gender.MALE,
    "f": Gender.FEMALE,
    "female": Gender.FEMALE,
    "nb": Gender.NONBINARY,
    "n": Gender.NONBINARY,
    "o": Gender.NONBINARY,
    "other": Gender.NONBINARY,
    "nonbinary": Gender.NONBINARY,
    "non-binary": Gender.NONBINARY,
}


class RelationshipType(str, Enum):
    """Canonical, genderless relationship types."""
    PARENT = "parent"
    CHILD = "child"
    SIBLING = "sibling"
    SPOUSE = "spouse"
    PARTNER = "partner"
    FRIEND = "friend"
    COLLEAGUE = "colleague"
    RELATIVE = "relative"
    AUNCLE = "auncle"
    NIBLING = "nibling"
    GRANDPARENT = "grandparent"
    GRANDCHILD = "grandchild"
    COUSIN = "cousin"


_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class CustomRelationshipType:
    """Uninterpreted relationship label such as 'mother-in-law'."""
    name: str

    def __post_init__(self):
        normalized = _WHITESPACE.sub("-", self.name.strip().lower())
        object.__setattr__(self, "name", normalized)

    @property
    def value(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


EdgeType = Union[RelationshipType, CustomRelationshipType]
