"""Relationship edge operations between contacts."""

from typing import Union

from contact_relations.catalog import RelationshipCatalog
from contact_relations.errors import SelfLoopRejected, UnknownContact
from contact_relations.graph.models import EdgeType, RelationshipEdge
from contact_relations.graph.store import GraphStore


class EdgeOperations:
    """Operations for typed relationship edges."""

    def __init__(self, store: GraphStore, catalog: RelationshipCatalog):
        self.store = store
        self.catalog = catalog

    def _edge(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> RelationshipEdge:
        return RelationshipEdge(source, target, self.catalog.coerce(rel_type))

    def add(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        """
        Add a directed edge.

        Returns True if the edge was created, False if the exact triple
        already existed. Edges of other types between the same pair are kept.
        """
        edge = self._edge(source, target, rel_type)
        with self.store.lock:
            for uid in (source, target):
                if uid not in self.store.nodes:
                    raise UnknownContact(uid)
            if source == target:
                raise SelfLoopRejected(source)

            if edge in self.store.outgoing[source]:
                return False
            self.store.outgoing[source].add(edge)
            self.store.incoming[target].add(edge)
            return True

    def remove(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        """Remove an edge; no-op if it does not exist."""
        edge = self._edge(source, target, rel_type)
        with self.store.lock:
            if edge not in self.store.outgoing.get(source, ()):
                return False
            self.store.outgoing[source].discard(edge)
            self.store.incoming[target].discard(edge)
            return True

    def exists(self, source: str, target: str, rel_type: Union[EdgeType, str]) -> bool:
        edge = self._edge(source, target, rel_type)
        with self.store.lock:
            return edge in self.store.outgoing.get(source, ())

    def get_all(self) -> list[RelationshipEdge]:
        """Every edge in the graph."""
        with self.store.lock:
            return [edge for edges in self.store.outgoing.values() for edge in edges]
