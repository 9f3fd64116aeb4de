"""Collaborator protocol and an in-memory contact document store."""

import threading
from typing import Any, Optional, Protocol

from contact_relations.codec.document import ContactDocument
from contact_relations.errors import MalformedDocument, UnknownContact
from contact_relations.graph.models import ReferenceKind, RelatedReference


class ContactRepository(Protocol):
    """Document store the reconciler reads from and writes to."""

    def list_contacts(self) -> list[str]: ...

    def read_contact_text(self, uid: str) -> str: ...

    def write_contact_text(self, uid: str, text: str) -> None: ...

    def resolve_contact(self, reference: RelatedReference) -> Optional[str]: ...

    def current_revision_token(self, uid: str) -> Any: ...

    def advance_revision_token(self, uid: str) -> Any: ...

    def file_handle(self, uid: str) -> Any: ...


class InMemoryContactStore:
    """
    Contact documents held in memory, keyed by uid.

    Revision tokens are integers bumped on every write or external edit.
    Name references resolve against each document's FN field.
    """

    def __init__(self, documents: Optional[dict[str, str]] = None):
        self._documents: dict[str, str] = {}
        self._revisions: dict[str, int] = {}
        self._writes: dict[str, int] = {}
        self._lock = threading.RLock()
        for uid, text in (documents or {}).items():
            self.add(uid, text)

    def add(self, uid: str, text: str) -> None:
        """Add or replace a contact document."""
        with self._lock:
            self._documents[uid] = text
            self._revisions.setdefault(uid, 0)
            self._writes.setdefault(uid, 0)

    def edit(self, uid: str, text: str) -> None:
        """Simulate an external modification of a contact."""
        with self._lock:
            self._require(uid)
            self._documents[uid] = text
            self._revisions[uid] += 1

    def _require(self, uid: str) -> None:
        if uid not in self._documents:
            raise UnknownContact(uid)

    # ─────────────────────────────────────────
    # ContactRepository protocol
    # ─────────────────────────────────────────

    def list_contacts(self) -> list[str]:
        with self._lock:
            return sorted(self._documents)

    def read_contact_text(self, uid: str) -> str:
        with self._lock:
            self._require(uid)
            return self._documents[uid]

    def write_contact_text(self, uid: str, text: str) -> None:
        with self._lock:
            self._require(uid)
            self._documents[uid] = text
            self._writes[uid] += 1

    def current_revision_token(self, uid: str) -> int:
        with self._lock:
            self._require(uid)
            return self._revisions[uid]

    def advance_revision_token(self, uid: str) -> int:
        with self._lock:
            self._require(uid)
            self._revisions[uid] += 1
            return self._revisions[uid]

    def file_handle(self, uid: str) -> str:
        self._require(uid)
        return f"{uid}.md"

    def resolve_contact(self, reference: RelatedReference) -> Optional[str]:
        """Resolve ids by uid and names by FN (case-insensitive)."""
        with self._lock:
            if reference.kind is not ReferenceKind.NAME:
                return reference.value if reference.value in self._documents else None

            wanted = reference.value.strip().lower()
            for uid, text in sorted(self._documents.items()):
                if self._name_of(uid, text).lower() == wanted:
                    return uid
            return None

    @staticmethod
    def _name_of(uid: str, text: str) -> str:
        try:
            return ContactDocument.parse(text).display_name or uid
        except MalformedDocument:
            return uid

    # ─────────────────────────────────────────
    # Observation helpers
    # ─────────────────────────────────────────

    def write_count(self, uid: str) -> int:
        with self._lock:
            return self._writes.get(uid, 0)

    def total_writes(self) -> int:
        with self._lock:
            return sum(self._writes.values())

    def document(self, uid: str) -> ContactDocument:
        return ContactDocument.parse(self.read_contact_text(uid))
