"""Shared pytest fixtures."""

import pytest

from contact_relations.catalog import RelationshipCatalog
from contact_relations.config import SyncSettings
from contact_relations.graph import RelationshipGraph
from contact_relations.observability import setup_logging
from contact_relations.sync import ConsistencyChecker, InMemoryContactStore, SyncReconciler


@pytest.fixture(scope="session", autouse=True)
def logging_config():
    """Console logging for test runs."""
    setup_logging(level="WARNING", json_output=False)


def contact_text(name, uid=None, gender=None, related=None, body=""):
    """Build a contact markdown document."""
    lines = ["---"]
    if uid:
        lines.append(f"UID: {uid}")
    lines.append(f"FN: {name}")
    if gender:
        lines.append(f"GENDER: {gender}")
    for key, value in (related or {}).items():
        lines.append(f"'{key}': '{value}'")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def make_contact():
    """Contact document builder."""
    return contact_text


@pytest.fixture
def catalog():
    """Relationship catalog."""
    return RelationshipCatalog()


@pytest.fixture
def graph(catalog):
    """Empty RelationshipGraph."""
    return RelationshipGraph(catalog)


@pytest.fixture
def sync_settings():
    """Sync settings with default values."""
    return SyncSettings()


@pytest.fixture
def store():
    """Empty in-memory contact store."""
    return InMemoryContactStore()


@pytest.fixture
def reconciler(graph, store, catalog, sync_settings):
    """SyncReconciler over the graph and store fixtures."""
    return SyncReconciler(graph, store, catalog, sync_settings)


@pytest.fixture
def checker(catalog, sync_settings):
    """ConsistencyChecker."""
    return ConsistencyChecker(catalog, sync_settings)
