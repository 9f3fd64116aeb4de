"""Per-contact reconciliation of graph state with both text representations."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from contact_relations.catalog import RelationshipCatalog
from contact_relations.catalog.types import EdgeType, Gender
from contact_relations.codec.document import ContactDocument
from contact_relations.codec.frontmatter import FrontmatterCodec
from contact_relations.codec.related_list import ListCodec, ListItem
from contact_relations.config import SyncSettings, settings
from contact_relations.errors import (
    MalformedDocument,
    RevisionConflict,
    UnknownContact,
    UnresolvedTarget,
)
from contact_relations.graph import RelationshipGraph
from contact_relations.graph.models import ReferenceKind, RelatedReference
from contact_relations.models import ReconcileResult, ReconcileStatus
from contact_relations.observability import get_logger
from contact_relations.sync.locks import ContactLocks
from contact_relations.sync.store import ContactRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class CandidateRecord:
    """Relationship read from one of the two text representations."""
    type: EdgeType
    implied_gender: Gender
    reference: RelatedReference
    origin: str
    target_uid: Optional[str] = None

    @property
    def dedup_key(self) -> tuple[str, str]:
        if self.target_uid:
            return self.type.value, self.target_uid
        return self.type.value, "?" + self.reference.value.strip().lower()

    @property
    def label(self) -> str:
        return self.reference.value


def merge_records(first: CandidateRecord, second: CandidateRecord) -> CandidateRecord:
    """Keep the gendered term and the most specific reference of two duplicates."""
    if first.implied_gender.is_specified or not second.implied_gender.is_specified:
        kept = first
    else:
        kept = second
    reference = first.reference
    if not first.reference.is_id and second.reference.is_id:
        reference = second.reference
    return replace(kept, reference=reference)


def deduplicate(records: Iterable[CandidateRecord]) -> list[CandidateRecord]:
    """Collapse records with the same type and target, keeping first-seen order."""
    merged: dict[tuple[str, str], CandidateRecord] = {}
    for record in records:
        key = record.dedup_key
        merged[key] = merge_records(merged[key], record) if key in merged else record
    return list(merged.values())


class SyncReconciler:
    """
    Merge a contact's frontmatter, Related list and graph edges.

    Each call reads the contact once, adds every relationship its text
    mentions to the graph, re-encodes the full relationship set into both
    representations and writes back only when the result differs materially.
    Edges are never removed here.

    Usage:
        reconciler = SyncReconciler(graph, store)
        result = reconciler.reconcile_contact("uid-john")
        results = reconciler.reconcile_all()
    """

    def __init__(
        self,
        graph: RelationshipGraph,
        repository: ContactRepository,
        catalog: Optional[RelationshipCatalog] = None,
        sync_settings: Optional[SyncSettings] = None,
    ):
        self.graph = graph
        self.repository = repository
        self.catalog = catalog or graph.catalog
        self.settings = sync_settings or settings.sync
        self.frontmatter_codec = FrontmatterCodec(self.catalog)
        self.list_codec = ListCodec(self.catalog, self.settings)
        self._locks = ContactLocks()

    # ─────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────

    def reconcile_contact(self, uid: str) -> ReconcileResult:
        """Reconcile one contact, retrying once on a revision conflict."""
        attempts = 1 + max(0, self.settings.conflict_retries)
        tally = {"edges_added": 0}

        with self._locks.hold(uid):
            conflict = None
            for attempt in range(1, attempts + 1):
                try:
                    result = self._reconcile_once(uid, tally)
                except RevisionConflict as e:
                    conflict = e
                    logger.warning(
                        "revision_conflict",
                        uid=uid,
                        attempt=attempt,
                        expected=e.expected,
                        actual=e.actual,
                    )
                    continue
                result.attempts = attempt
                return result

        return ReconcileResult(
            uid=uid,
            status=ReconcileStatus.CONFLICT,
            edges_added=tally["edges_added"],
            attempts=attempts,
            error=str(conflict),
        )

    def reconcile_all(self, uids: Optional[Iterable[str]] = None) -> dict[str, ReconcileResult]:
        """
        Reconcile many contacts with bounded concurrency.

        A failure in one contact is recorded as a FAILED result and never
        stops the others.
        """
        uids = list(dict.fromkeys(uids if uids is not None else self.repository.list_contacts()))
        results: dict[str, ReconcileResult] = {}

        with ThreadPoolExecutor(max_workers=max(1, self.settings.max_workers)) as executor:
            futures = {executor.submit(self.reconcile_contact, uid): uid for uid in uids}
            for future in as_completed(futures):
                uid = futures[future]
                try:
                    results[uid] = future.result()
                except Exception as e:
                    logger.error("contact_reconcile_failed", uid=uid, error=str(e), exc_info=True)
                    results[uid] = ReconcileResult(
                        uid=uid, status=ReconcileStatus.FAILED, error=str(e)
                    )

        return {uid: results[uid] for uid in uids}

    # ─────────────────────────────────────────
    # Reconciliation steps
    # ─────────────────────────────────────────

    def _reconcile_once(self, uid: str, tally: dict) -> ReconcileResult:
        revision = self.repository.current_revision_token(uid)
        document = ContactDocument.parse(self.repository.read_contact_text(uid))
        self._register(uid, document)

        malformed = self.frontmatter_codec.malformed_keys(document.frontmatter)
        resolved, unresolved = self._resolve_all(uid, self._collect(document))
        resolved = deduplicate(resolved)
        unresolved = deduplicate(unresolved)

        added = 0
        for record in resolved:
            if self.graph.add_edge(uid, record.target_uid, record.type):
                added += 1
            self._infer_gender(uid, record)
        tally["edges_added"] += added

        updated = self._rebuild(uid, document, unresolved, malformed)
        updated.fill_gender(self.graph.get_contact(uid).gender)
        result = ReconcileResult(
            uid=uid,
            status=ReconcileStatus.UNCHANGED,
            edges_added=tally["edges_added"],
            unresolved=[f"{r.type.value}:{r.label}" for r in unresolved],
            malformed_keys=malformed,
        )

        if updated.materially_equals(document):
            logger.debug("contact_unchanged", uid=uid, edges_added=added)
            return result

        if self.settings.stamp_revision:
            updated.stamp_revision()

        current = self.repository.current_revision_token(uid)
        if current != revision:
            raise RevisionConflict(uid, revision, current)

        self.repository.write_contact_text(uid, updated.render())
        self.repository.advance_revision_token(uid)
        result.status = ReconcileStatus.WRITTEN

        logger.info(
            "contact_reconciled",
            uid=uid,
            edges_added=added,
            unresolved=len(unresolved),
        )
        return result

    def _register(self, uid: str, document: ContactDocument) -> None:
        """Create or refresh the contact node from its own frontmatter."""
        with self.graph.store.lock:
            gender = document.gender
            existing = self.graph.get_contact(uid)
            # An inferred gender stays until the contact states its own
            if not gender.is_specified and existing is not None:
                gender = existing.gender
            self.graph.add_contact(
                uid,
                document.display_name or uid,
                gender,
                self.repository.file_handle(uid),
            )

    def _infer_gender(self, uid: str, record: CandidateRecord) -> None:
        """Give an ungendered target the gender implied by a gendered term."""
        if self.graph.infer_gender(record.target_uid, record.implied_gender):
            logger.info(
                "gender_inferred",
                uid=record.target_uid,
                gender=record.implied_gender.value,
                source=uid,
            )

    def _ensure_contact(self, uid: str) -> bool:
        """Register a relationship target from its document if the graph lacks it."""
        if self.graph.has_contact(uid):
            return True
        try:
            document = ContactDocument.parse(self.repository.read_contact_text(uid))
        except (UnknownContact, MalformedDocument) as e:
            logger.warning("target_unreadable", uid=uid, error=str(e))
            return False
        self._register(uid, document)
        return True

    def _collect(self, document: ContactDocument) -> list[CandidateRecord]:
        """Candidate records from frontmatter first, then from the Related list."""
        records = [
            CandidateRecord(entry.type, entry.implied_gender, entry.reference, "frontmatter")
            for entry in self.frontmatter_codec.decode(document.frontmatter)
        ]
        for entry in self.list_codec.decode(document.body):
            records.append(CandidateRecord(
                entry.type,
                entry.implied_gender,
                RelatedReference.name(entry.contact_name),
                "list",
            ))
        return records

    def _resolve(self, uid: str, record: CandidateRecord) -> str:
        """
        Resolve a record's reference to a uid.

        Raises:
            UnresolvedTarget: if nothing matches, or the target is the contact itself
        """
        target = self.repository.resolve_contact(record.reference)
        if target is None:
            target = self._resolve_in_graph(record.reference)

        if target is None or not self._ensure_contact(target):
            raise UnresolvedTarget(record.reference.to_value())
        if target == uid:
            logger.warning("self_reference_skipped", uid=uid, type=record.type.value)
            raise UnresolvedTarget(record.reference.to_value())
        return target

    def _resolve_in_graph(self, reference: RelatedReference) -> Optional[str]:
        """Fallback for contacts the graph knows but the repository does not."""
        if reference.kind is not ReferenceKind.NAME:
            return reference.value if self.graph.has_contact(reference.value) else None
        matches = self.graph.find_contacts_by_name(reference.value)
        return matches[0].uid if len(matches) == 1 else None

    def _resolve_all(self, uid: str, records: list[CandidateRecord]):
        resolved, unresolved = [], []
        for record in records:
            try:
                target = self._resolve(uid, record)
            except UnresolvedTarget as e:
                logger.info("target_unresolved", uid=uid, reference=e.reference)
                unresolved.append(record)
                continue
            resolved.append(replace(record, target_uid=target))
        return resolved, unresolved

    def _rebuild(self, uid: str, document: ContactDocument,
                 unresolved: list[CandidateRecord], malformed: list[str]) -> ContactDocument:
        """Re-encode the merged relationship set into a new document."""
        fields, items = [], []
        for edge in self.graph.outgoing_edges(uid):
            node = self.graph.get_contact(edge.target)
            reference = RelatedReference.for_contact(node.uid, node.display_name)
            fields.append((edge.type, reference, node.display_name))
            items.append(ListItem(edge.type, node.display_name, node.gender))

        for record in unresolved:
            fields.append((record.type, record.reference, record.label))
            items.append(ListItem(record.type, record.label, record.implied_gender))

        fields.sort(key=lambda f: (f[0].value, f[2].lower(), f[2]))
        return document.with_relationships(
            self.frontmatter_codec.encode((rel_type, ref) for rel_type, ref, _ in fields),
            self.list_codec.encode_lines(items),
            heading_line=self.settings.heading_line,
            malformed_keys=malformed,
            section_title=self.settings.related_heading,
        )
