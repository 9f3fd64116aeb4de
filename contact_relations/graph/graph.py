"""Main RelationshipGraph facade combining all operations."""

from typing import Any, Optional, Union

from contact_relations.catalog import RelationshipCatalog
from contact_relations.graph.contacts import ContactOperations
from contact_relations.graph.edges import EdgeOperations
from contact_relations.graph.models import ContactNode, EdgeType, Gender, RelationshipEdge
from contact_relations.graph.queries import GraphQueries, GraphStats
from contact_relations.graph.store import GraphStore


class RelationshipGraph:
    """
    Main interface for relationship graph operations.

    Combines contact, edge, and query operations over one in-memory store.

    Usage:
        graph = RelationshipGraph()
        graph.add_contact("uid-john", "John Doe", Gender.MALE)
        graph.add_contact("uid-bob", "Bob Doe")
        graph.add_edge("uid-john", "uid-bob", RelationshipType.PARENT)
        edges = graph.outgoing_edges("uid-john")
    """

    def __init__(self, catalog: Optional[RelationshipCatalog] = None):
        self.catalog = catalog or RelationshipCatalog()
        self.store = GraphStore()

        # Compose operations
        self.contacts_ops = ContactOperations(self.store)
        self.edges_ops = EdgeOperations(self.store, self.catalog)
        self.queries = GraphQueries(self.store, self.catalog)

    # ─────────────────────────────────────────
    # Contact operations (delegated)
    # ─────────────────────────────────────────

    def add_contact(self, uid: str, display_name: str, gender: Gender = Gender.UNSPECIFIED,
                    file_handle: Any = None) -> ContactNode:
        return self.contacts_ops.add(uid, display_name, gender, file_handle)

    def infer_gender(self, uid: str, gender: Gender) -> bool:
        return self.contacts_ops.infer_gender(uid, gender)

    def remove_contact(self, uid: str) -> bool:
        return self.contacts_ops.delete(uid)

    def get_contact(self, uid: str) -> Optional[ContactNode]:
        return self.contacts_ops.get(uid)

    def has_contact(self, uid: str) -> bool:
        return self.contacts_ops.exists(uid)

    def contacts(self) -> list[ContactNode]:
        return self.contacts_ops.get_all()

    def find_contacts_by_name(self, name: str) -> list[ContactNode]:
        return self.contacts_ops.find_by_name(name)

    # ─────────────────────────────────────────
    # Edge operations (delegated)
    # ─────────────────────────────────────────

    def add_edge(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        return self.edges_ops.add(source, target, rel_type)

    def remove_edge(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        return self.edges_ops.remove(source, target, rel_type)

    def has_edge(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        return self.edges_ops.exists(source, target, rel_type)

    def edges(self) -> list[RelationshipEdge]:
        return self.edges_ops.get_all()

    # ─────────────────────────────────────────
    # Query operations (delegated)
    # ─────────────────────────────────────────

    def outgoing_edges(self, uid: str) -> list[RelationshipEdge]:
        return self.queries.outgoing_edges(uid)

    def incoming_edges_of_type(self, uid: str, rel_type: Union[EdgeType, str]) -> list[RelationshipEdge]:
        return self.queries.incoming_edges_of_type(uid, rel_type)

    def related_contacts(self, uid: str, rel_type: Union[EdgeType, str]) -> list[str]:
        return self.queries.related_contacts(uid, rel_type)

    def stats(self) -> GraphStats:
        return self.queries.stats()
