"""Test per-contact reconciliation."""

import pytest

from contact_relations.config import SyncSettings
from contact_relations.graph import Gender, RelationshipType
from contact_relations.models import ReconcileStatus
from contact_relations.sync import InMemoryContactStore, SyncReconciler


@pytest.fixture
def john_and_bob(store, make_contact):
    """John lists Bob as a parent; Bob lists nobody."""
    store.add("john", make_contact(
        "John Doe", uid="john", body="# John\n\n## Related\n- parent [[Bob Doe]]\n"
    ))
    store.add("bob", make_contact("Bob Doe", uid="bob", body="# Bob\n"))
    return store


class RacingStore(InMemoryContactStore):
    """Store that is edited externally right after each of the first reads."""

    def __init__(self, races):
        super().__init__()
        self.races = races

    def read_contact_text(self, uid):
        text = super().read_contact_text(uid)
        if uid == "john" and self.races > 0:
            self.races -= 1
            self.edit(uid, text)
        return text


class TestReconcileContact:
    """Tests for reconcile_contact."""

    def test_list_edge_written_to_frontmatter(self, reconciler, john_and_bob, graph):
        """A list bullet creates an edge and a RELATED key."""
        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.WRITTEN
        assert result.edges_added == 1
        assert graph.has_edge("john", "bob", RelationshipType.PARENT)

        doc = john_and_bob.document("john")
        assert doc.frontmatter["RELATED[parent]"] == "uid:bob"
        assert "REV" in doc.frontmatter
        assert doc.body == "# John\n\n## Related\n- parent [[Bob Doe]]\n"

    def test_idempotent(self, reconciler, john_and_bob):
        """A second run on unchanged input writes nothing."""
        reconciler.reconcile_contact("john")
        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.UNCHANGED
        assert result.edges_added == 0
        assert john_and_bob.write_count("john") == 1

    def test_frontmatter_edge_written_to_list(self, reconciler, store, make_contact):
        """A RELATED key creates a bullet using the target's gender."""
        store.add("john", make_contact(
            "John Doe", uid="john", related={"RELATED[spouse]": "name:Ann Doe"}, body="# John\n"
        ))
        store.add("ann", make_contact("Ann Doe", uid="ann", gender="F"))

        reconciler.reconcile_contact("john")

        doc = store.document("john")
        assert doc.frontmatter["RELATED[spouse]"] == "uid:ann"
        assert doc.body == "# John\n\n## Related\n- wife [[Ann Doe]]\n"

    def test_gendered_duplicate_collapses(self, reconciler, store, make_contact, graph):
        """'parent' and 'father' for the same contact become one edge shown as father."""
        store.add("john", make_contact(
            "John Doe", uid="john",
            body="## Related\n- parent [[Bob Doe]]\n- father [[Bob Doe]]\n",
        ))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        reconciler.reconcile_contact("john")

        assert graph.stats().edge_count == 1
        doc = store.document("john")
        assert doc.body == "## Related\n- father [[Bob Doe]]\n"
        assert doc.frontmatter["RELATED[parent]"] == "uid:bob"
        assert "RELATED[0:parent]" not in doc.frontmatter

    def test_gender_hint_survives_rerun(self, reconciler, store, make_contact):
        """The gendered term stays once frontmatter holds the genderless key."""
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- father [[Bob Doe]]\n"))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        reconciler.reconcile_contact("john")
        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.UNCHANGED
        assert "- father [[Bob Doe]]" in store.read_contact_text("john")

    def test_merge_keeps_graph_edges(self, reconciler, john_and_bob, make_contact, graph):
        """Edges missing from text are added to text, not removed from the graph."""
        john_and_bob.add("ann", make_contact("Ann Doe", uid="ann", gender="F"))
        graph.add_contact("john", "John Doe")
        graph.add_contact("ann", "Ann Doe", Gender.FEMALE)
        graph.add_edge("john", "ann", RelationshipType.FRIEND)

        reconciler.reconcile_contact("john")

        assert graph.has_edge("john", "ann", RelationshipType.FRIEND)
        assert graph.has_edge("john", "bob", RelationshipType.PARENT)
        doc = john_and_bob.document("john")
        assert doc.frontmatter["RELATED[friend]"] == "uid:ann"
        assert doc.body.endswith("## Related\n- friend [[Ann Doe]]\n- parent [[Bob Doe]]\n")

    def test_unresolved_retained(self, reconciler, store, make_contact, graph):
        """Unknown targets produce no edge but stay in the text."""
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- friend [[Ghost]]\n"))

        result = reconciler.reconcile_contact("john")

        assert result.unresolved == ["friend:Ghost"]
        assert graph.edges() == []
        doc = store.document("john")
        assert doc.frontmatter["RELATED[friend]"] == "name:Ghost"
        assert "- friend [[Ghost]]" in doc.body

        again = reconciler.reconcile_contact("john")
        assert again.status is ReconcileStatus.UNCHANGED

    def test_self_reference_retained(self, reconciler, store, make_contact, graph):
        """A contact listing itself gets no self loop."""
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- friend [[John Doe]]\n"))

        result = reconciler.reconcile_contact("john")

        assert graph.edges() == []
        assert result.unresolved == ["friend:John Doe"]
        assert "- friend [[John Doe]]" in store.read_contact_text("john")

    def test_malformed_key_preserved(self, reconciler, store, make_contact):
        """Bare RELATED keys are reported and left in place."""
        store.add("john", make_contact(
            "John Doe", uid="john", related={"RELATED": "name:Bob Doe"},
            body="## Related\n- parent [[Bob Doe]]\n",
        ))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        result = reconciler.reconcile_contact("john")

        assert result.malformed_keys == ["RELATED"]
        doc = store.document("john")
        assert doc.frontmatter["RELATED"] == "name:Bob Doe"
        assert doc.frontmatter["RELATED[parent]"] == "uid:bob"

    def test_node_registered_from_frontmatter(self, reconciler, store, make_contact, graph):
        store.add("john", make_contact("John Doe", uid="john", gender="male"))

        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.UNCHANGED
        node = graph.get_contact("john")
        assert node.display_name == "John Doe"
        assert node.gender is Gender.MALE
        assert node.file_handle == "john.md"

    def test_no_revision_stamp(self, graph, john_and_bob):
        reconciler = SyncReconciler(graph, john_and_bob, sync_settings=SyncSettings(stamp_revision=False))
        reconciler.reconcile_contact("john")
        assert "REV" not in john_and_bob.document("john").frontmatter


class TestRevisionConflict:
    """Tests for concurrent external edits."""

    def _seed(self, store, make_contact):
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- parent [[Bob Doe]]\n"))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

    def test_retry_succeeds(self, graph, make_contact):
        """One conflicting edit is retried from a fresh read."""
        store = RacingStore(races=1)
        self._seed(store, make_contact)
        reconciler = SyncReconciler(graph, store)

        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.WRITTEN
        assert result.attempts == 2
        assert result.edges_added == 1
        assert store.write_count("john") == 1

    def test_persistent_conflict(self, graph, make_contact):
        """Conflicts past the retry budget yield a CONFLICT result."""
        store = RacingStore(races=5)
        self._seed(store, make_contact)
        reconciler = SyncReconciler(graph, store, sync_settings=SyncSettings(conflict_retries=1))

        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.CONFLICT
        assert result.attempts == 2
        assert result.error
        assert store.write_count("john") == 0


class TestReconcileAll:
    """Tests for batch reconciliation."""

    def test_all_contacts(self, reconciler, john_and_bob):
        results = reconciler.reconcile_all()

        assert list(results) == ["bob", "john"]
        assert results["john"].status is ReconcileStatus.WRITTEN
        assert results["bob"].status is ReconcileStatus.UNCHANGED

    def test_failure_isolated(self, reconciler, john_and_bob):
        """A malformed document fails alone."""
        john_and_bob.add("bad", "---\nFN: [oops\n---\n")

        results = reconciler.reconcile_all()

        assert results["bad"].status is ReconcileStatus.FAILED
        assert results["bad"].error
        assert results["john"].ok

    def test_subset(self, reconciler, john_and_bob):
        results = reconciler.reconcile_all(["john"])
        assert list(results) == ["john"]


class TestTermsAndNotes:
    """Tests for gendered terms and user-written lines across both representations."""

    def test_gendered_key_beats_neutral_bullet(self, reconciler, store, make_contact):
        """RELATED[father] with '- parent' renders as father."""
        store.add("john", make_contact(
            "John Doe", uid="john", related={"RELATED[father]": "name:Bob Doe"},
            body="## Related\n- parent [[Bob Doe]]\n",
        ))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        reconciler.reconcile_contact("john")

        doc = store.document("john")
        assert doc.body == "## Related\n- father [[Bob Doe]]\n"
        assert doc.frontmatter["RELATED[parent]"] == "uid:bob"
        assert "RELATED[father]" not in doc.frontmatter

    def test_other_lines_survive_write(self, reconciler, store, make_contact):
        """Link-only bullets and notes in the section are kept as written."""
        body = (
            "## Related\n"
            "- parent [[Bob Doe]]\n"
            "- [[Meeting notes]]\n"
            "\n"
            "Met at the reunion.\n"
        )
        store.add("john", make_contact("John Doe", uid="john", body=body))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        result = reconciler.reconcile_contact("john")

        assert result.status is ReconcileStatus.WRITTEN
        assert store.document("john").body == body


class TestGenderInference:
    """Tests for genders implied by relationship terms."""

    def test_target_gender_inferred(self, reconciler, store, make_contact, graph):
        """'father' gives an ungendered target MALE, persisted on its own write."""
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- father [[Bob Doe]]\n"))
        store.add("bob", make_contact("Bob Doe", uid="bob"))

        reconciler.reconcile_contact("john")
        assert graph.get_contact("bob").gender is Gender.MALE

        result = reconciler.reconcile_contact("bob")
        assert result.status is ReconcileStatus.WRITTEN
        assert store.document("bob").frontmatter["GENDER"] == "M"

    def test_stated_gender_kept(self, reconciler, store, make_contact, graph):
        """A contact's own GENDER is never overridden."""
        store.add("john", make_contact("John Doe", uid="john", body="## Related\n- father [[Bob Doe]]\n"))
        store.add("bob", make_contact("Bob Doe", uid="bob", gender="NB"))

        reconciler.reconcile_contact("john")

        assert graph.get_contact("bob").gender is Gender.NONBINARY
        assert "- parent [[Bob Doe]]" in store.read_contact_text("john")
