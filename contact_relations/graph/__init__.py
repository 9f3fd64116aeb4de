"""Graph package - in-memory contact relationship graph."""

from contact_relations.graph.models import (
    ContactNode,
    CustomRelationshipType,
    EdgeType,
    Gender,
    ReferenceKind,
    RelatedReference,
    RelationshipEdge,
    RelationshipType,
)
from contact_relations.graph.queries import GraphStats
from contact_relations.graph.graph import RelationshipGraph

__all__ = [
    "ContactNode",
    "CustomRelationshipType",
    "EdgeType",
    "Gender",
    "GraphStats",
    "ReferenceKind",
    "RelatedReference",
    "RelationshipEdge",
    "RelationshipGraph",
    "RelationshipType",
]
