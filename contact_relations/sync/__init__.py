"""Reconciliation of contact documents with the relationship graph."""
from contact_relations.sync.store import ContactRepository, InMemoryContactStore
from contact_relations.sync.reconciler import SyncReconciler
from contact_relations.sync.consistency import ConsistencyChecker, MissingReciprocal

__all__ = [
    "ConsistencyChecker",
    "ContactRepository",
    "InMemoryContactStore",
    "MissingReciprocal",
    "SyncReconciler",
]
