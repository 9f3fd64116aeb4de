"""In-memory node arena and adjacency sets."""

import threading
from collections import defaultdict

from contact_relations.graph.models import ContactNode, RelationshipEdge


class GraphStore:
    """Nodes keyed by uid plus outgoing and incoming edge sets."""

    def __init__(self):
        self.nodes: dict[str, ContactNode] = {}
        self.outgoing: dict[str, set[RelationshipEdge]] = defaultdict(set)
        self.incoming: dict[str, set[RelationshipEdge]] = defaultdict(set)
        self.lock = threading.RLock()

    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.outgoing.values())
