"""Relationship graph queries."""

from typing import NamedTuple, Union

from contact_relations.catalog import RelationshipCatalog
from contact_relations.graph.models import EdgeType, RelationshipEdge
from contact_relations.graph.store import GraphStore


class GraphStats(NamedTuple):
    """Node and edge counts."""
    node_count: int
    edge_count: int


class GraphQueries:
    """Read-only queries over the relationship graph."""

    def __init__(self, store: GraphStore, catalog: RelationshipCatalog):
        self.store = store
        self.catalog = catalog

    def _name(self, uid: str) -> str:
        node = self.store.nodes.get(uid)
        return node.display_name if node else uid

    def outgoing_edges(self, uid: str) -> list[RelationshipEdge]:
        """Edges from a contact, sorted by (type, target display name)."""
        with self.store.lock:
            edges = list(self.store.outgoing.get(uid, ()))
            return sorted(
                edges,
                key=lambda e: (e.type.value, self._name(e.target).lower(), e.target),
            )

    def incoming_edges_of_type(self, uid: str, rel_type: Union[EdgeType, str]) -> list[RelationshipEdge]:
        """Edges of one type pointing at a contact, sorted by source display name."""
        rel_type = self.catalog.coerce(rel_type)
        with self.store.lock:
            edges = [e for e in self.store.incoming.get(uid, ()) if e.type == rel_type]
            return sorted(edges, key=lambda e: (self._name(e.source).lower(), e.source))

    def related_contacts(self, uid: str, rel_type: Union[EdgeType, str]) -> list[str]:
        """Targets of a contact's outgoing edges of one type."""
        rel_type = self.catalog.coerce(rel_type)
        return [e.target for e in self.outgoing_edges(uid) if e.type == rel_type]

    def stats(self) -> GraphStats:
        with self.store.lock:
            return GraphStats(len(self.store.nodes), self.store.edge_count())
