"""Contact node operations."""

from typing import Any, Optional

from contact_relations.graph.models import ContactNode, Gender
from contact_relations.graph.store import GraphStore


class ContactOperations:
    """CRUD operations for contact nodes."""

    def __init__(self, store: GraphStore):
        self.store = store

    def add(self, uid: str, display_name: str, gender: Gender = Gender.UNSPECIFIED,
            file_handle: Any = None) -> ContactNode:
        """Insert a contact, or overwrite every attribute of an existing one."""
        node = ContactNode(
            uid=uid,
            display_name=display_name,
            gender=gender or Gender.UNSPECIFIED,
            file_handle=file_handle,
        )
        with self.store.lock:
            self.store.nodes[uid] = node
        return node

    def infer_gender(self, uid: str, gender: Gender) -> bool:
        """Set a gender on a contact that has none; True if it changed."""
        if not gender.is_specified:
            return False
        with self.store.lock:
            node = self.store.nodes.get(uid)
            if node is None or node.gender.is_specified:
                return False
            node.gender = gender
            return True

    def get(self, uid: str) -> Optional[ContactNode]:
        with self.store.lock:
            return self.store.nodes.get(uid)

    def exists(self, uid: str) -> bool:
        with self.store.lock:
            return uid in self.store.nodes

    def get_all(self) -> list[ContactNode]:
        """All contacts ordered by display name."""
        with self.store.lock:
            nodes = list(self.store.nodes.values())
        return sorted(nodes, key=lambda n: (n.display_name.lower(), n.uid))

    def find_by_name(self, name: str) -> list[ContactNode]:
        """Contacts whose display name matches, case-insensitively."""
        wanted = name.strip().lower()
        return [n for n in self.get_all() if n.display_name.lower() == wanted]

    def delete(self, uid: str) -> bool:
        """Delete a contact and every edge touching it."""
        with self.store.lock:
            if uid not in self.store.nodes:
                return False

            for edge in self.store.outgoing.pop(uid, set()):
                self.store.incoming[edge.target].discard(edge)
            for edge in self.store.incoming.pop(uid, set()):
                self.store.outgoing[edge.source].discard(edge)

            del self.store.nodes[uid]
            return True
