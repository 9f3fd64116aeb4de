"""Relationship catalog package."""
from contact_relations.catalog.types import (
    CustomRelationshipType,
    EdgeType,
    Gender,
    RelationshipType,
)
from contact_relations.catalog.relationship_map import (
    GenderedForms,
    RelationInfo,
    RelationshipCatalog,
)

__all__ = [
    "CustomRelationshipType",
    "EdgeType",
    "Gender",
    "GenderedForms",
    "RelationInfo",
    "RelationshipCatalog",
    "RelationshipType",
]
