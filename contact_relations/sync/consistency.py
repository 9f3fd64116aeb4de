"""Whole-graph reciprocal checks, repair and the fixed-point pass."""

import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from contact_relations.catalog import RelationshipCatalog, RelationshipType
from contact_relations.config import SyncSettings, settings
from contact_relations.graph import RelationshipGraph
from contact_relations.models import PassSummary, ReconcileStatus, RepairReport
from contact_relations.observability import get_logger
from contact_relations.sync.reconciler import SyncReconciler

logger = get_logger(__name__)


@dataclass(frozen=True)
class MissingReciprocal:
    """Edge that `source` should hold toward `target` but does not."""
    source: str
    target: str
    expected_type: RelationshipType


class ConsistencyChecker:
    """
    Detect and repair missing reciprocal relationships.

    Usage:
        checker = ConsistencyChecker()
        missing = checker.scan(graph)
        report = checker.repair(missing, graph, reconciler)
        summary = checker.run_fixed_point(graph, reconciler)
    """

    def __init__(self, catalog: Optional[RelationshipCatalog] = None,
                 sync_settings: Optional[SyncSettings] = None):
        self.catalog = catalog or RelationshipCatalog()
        self.settings = sync_settings or settings.sync

    def scan(self, graph: RelationshipGraph) -> list[MissingReciprocal]:
        """Every modeled edge whose reciprocal is absent; custom types are skipped."""
        missing = []
        seen = set()
        edges = sorted(graph.edges(), key=lambda e: (e.source, e.type.value, e.target))
        for edge in edges:
            expected = self.catalog.reciprocal_of(edge.type)
            if expected is None:
                continue
            if graph.has_edge(edge.target, edge.source, expected):
                continue

            record = MissingReciprocal(edge.target, edge.source, expected)
            if record in seen:
                continue
            seen.add(record)
            missing.append(record)
            logger.info(
                "reciprocal_missing",
                source=record.source,
                target=record.target,
                expected_type=expected.value,
            )
        return missing

    def repair(self, missing: Iterable[MissingReciprocal], graph: RelationshipGraph,
               reconciler: SyncReconciler) -> RepairReport:
        """
        Add the missing edges and reconcile each contact that owns one.

        A failure for one contact is recorded in the report and does not
        stop the others.
        """
        report = RepairReport()
        by_source: dict[str, list[MissingReciprocal]] = {}
        for record in missing:
            by_source.setdefault(record.source, []).append(record)

        for source, records in by_source.items():
            try:
                for record in records:
                    if graph.add_edge(record.source, record.target, record.expected_type):
                        report.edges_added += 1
                report.outcomes[source] = reconciler.reconcile_contact(source)
            except Exception as e:
                logger.error("reciprocal_repair_failed", uid=source, error=str(e), exc_info=True)
                report.failures[source] = str(e)

        return report

    def run_fixed_point(self, graph: RelationshipGraph, reconciler: SyncReconciler,
                        uids: Optional[Iterable[str]] = None,
                        max_iterations: Optional[int] = None) -> PassSummary:
        """
        Reconcile, scan and repair until nothing changes.

        Stops at the first iteration with no writes, no added edges and no
        missing reciprocals, or when the iteration bound is reached.
        """
        limit = max_iterations if max_iterations is not None else self.settings.max_iterations
        uids = list(uids) if uids is not None else None
        summary = PassSummary()
        repair_failures: dict[str, str] = {}

        structlog.contextvars.bind_contextvars(pass_id=uuid.uuid4().hex[:12])
        try:
            for iteration in range(1, limit + 1):
                summary.iterations = iteration
                results = reconciler.reconcile_all(uids)
                summary.outcomes.update(results)

                writes = sum(1 for r in results.values() if r.wrote)
                added = sum(r.edges_added for r in results.values())
                summary.writes += writes
                summary.edges_added += added

                missing = self.scan(graph)
                if missing:
                    report = self.repair(missing, graph, reconciler)
                    summary.outcomes.update(report.outcomes)
                    summary.reciprocals_repaired += report.edges_added
                    summary.writes += report.writes
                    writes += report.writes
                    added += report.edges_added
                    repair_failures = report.failures

                logger.info(
                    "fixed_point_iteration",
                    iteration=iteration,
                    writes=writes,
                    edges_added=added,
                    missing=len(missing),
                )
                if writes == 0 and added == 0 and not missing:
                    summary.converged = True
                    break

            summary.outstanding_missing = len(self.scan(graph))
            summary.failures = {
                uid: r.error or r.status.value
                for uid, r in summary.outcomes.items()
                if r.status is ReconcileStatus.FAILED
            }
            summary.failures.update(repair_failures)

            if not summary.converged:
                logger.warning(
                    "fixed_point_not_converged",
                    iterations=summary.iterations,
                    outstanding_missing=summary.outstanding_missing,
                )
            else:
                logger.info("fixed_point_converged", iterations=summary.iterations,
                            writes=summary.writes)
            return summary
        finally:
            structlog.contextvars.unbind_contextvars("pass_id")
