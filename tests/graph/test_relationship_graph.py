"""Test relationship graph operations."""

import pytest

from contact_relations.errors import SelfLoopRejected, UnknownContact
from contact_relations.graph import CustomRelationshipType, Gender, RelationshipType


@pytest.fixture
def family(graph):
    """Graph with three contacts and no edges."""
    graph.add_contact("john", "John Doe", Gender.MALE)
    graph.add_contact("bob", "Bob Doe")
    graph.add_contact("ann", "Ann Doe", Gender.FEMALE)
    return graph


class TestContactOperations:
    """Tests for contact operations."""

    def test_add_and_get(self, graph):
        """Test adding a contact."""
        graph.add_contact("john", "John Doe", Gender.MALE, "john.md")
        node = graph.get_contact("john")
        assert node.display_name == "John Doe"
        assert node.gender is Gender.MALE
        assert node.file_handle == "john.md"

    def test_merge_overwrites(self, graph):
        """Re-adding a uid overwrites its attributes."""
        graph.add_contact("john", "John Doe", Gender.MALE)
        graph.add_contact("john", "Johnny Doe")
        node = graph.get_contact("john")
        assert node.display_name == "Johnny Doe"
        assert node.gender is Gender.UNSPECIFIED
        assert graph.stats().node_count == 1

    def test_contacts_sorted(self, family):
        assert [n.uid for n in family.contacts()] == ["ann", "bob", "john"]

    def test_find_by_name(self, family):
        assert [n.uid for n in family.find_contacts_by_name("bob doe")] == ["bob"]

    def test_remove_cascades(self, family):
        """Removing a contact removes every incident edge."""
        family.add_edge("john", "bob", RelationshipType.PARENT)
        family.add_edge("bob", "john", RelationshipType.CHILD)
        family.add_edge("ann", "bob", RelationshipType.SIBLING)

        assert family.remove_contact("bob")
        assert not family.has_contact("bob")
        assert family.edges() == []
        assert family.incoming_edges_of_type("john", RelationshipType.CHILD) == []

    def test_remove_missing(self, graph):
        assert not graph.remove_contact("nobody")


class TestEdgeOperations:
    """Tests for edge operations."""

    def test_add_edge(self, family):
        """Adding a new edge returns True, repeating it is a no-op."""
        assert family.add_edge("john", "bob", RelationshipType.PARENT)
        assert not family.add_edge("john", "bob", RelationshipType.PARENT)
        assert family.stats().edge_count == 1

    def test_string_type_canonicalized(self, family):
        """A display term is canonicalized and its gender dropped."""
        family.add_edge("john", "ann", "Mother")
        assert family.has_edge("john", "ann", RelationshipType.PARENT)

    def test_multi_edge(self, family):
        """Different types between the same pair coexist."""
        family.add_edge("john", "bob", RelationshipType.FRIEND)
        family.add_edge("john", "bob", RelationshipType.COLLEAGUE)
        assert family.related_contacts("john", RelationshipType.FRIEND) == ["bob"]
        assert family.related_contacts("john", RelationshipType.COLLEAGUE) == ["bob"]
        assert family.stats().edge_count == 2

    def test_self_loop_rejected(self, family):
        with pytest.raises(SelfLoopRejected):
            family.add_edge("john", "john", RelationshipType.FRIEND)

    def test_unknown_endpoint(self, family):
        """Both endpoints must exist."""
        with pytest.raises(UnknownContact):
            family.add_edge("john", "nobody", RelationshipType.FRIEND)
        with pytest.raises(UnknownContact):
            family.add_edge("nobody", "john", RelationshipType.FRIEND)

    def test_remove_edge(self, family):
        family.add_edge("john", "bob", RelationshipType.PARENT)
        assert family.remove_edge("john", "bob", RelationshipType.PARENT)
        assert not family.remove_edge("john", "bob", RelationshipType.PARENT)
        assert not family.has_edge("john", "bob", RelationshipType.PARENT)

    def test_custom_type(self, family):
        family.add_edge("john", "bob", "mother in law")
        assert family.has_edge("john", "bob", CustomRelationshipType("mother-in-law"))


class TestQueries:
    """Tests for graph queries."""

    def test_outgoing_sorted(self, family):
        """Outgoing edges sort by type, then target display name."""
        family.add_edge("john", "bob", RelationshipType.SIBLING)
        family.add_edge("john", "bob", RelationshipType.FRIEND)
        family.add_edge("john", "ann", RelationshipType.SIBLING)

        edges = [(e.type.value, e.target) for e in family.outgoing_edges("john")]
        assert edges == [("friend", "bob"), ("sibling", "ann"), ("sibling", "bob")]

    def test_incoming_of_type(self, family):
        family.add_edge("john", "bob", RelationshipType.PARENT)
        family.add_edge("ann", "bob", RelationshipType.PARENT)
        family.add_edge("ann", "bob", RelationshipType.FRIEND)

        sources = [e.source for e in family.incoming_edges_of_type("bob", "parent")]
        assert sources == ["ann", "john"]

    def test_stats(self, family):
        family.add_edge("john", "bob", RelationshipType.PARENT)
        stats = family.stats()
        assert stats.node_count == 3
        assert stats.edge_count == 1
