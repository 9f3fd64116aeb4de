"""Result models for reconciliation and consistency passes."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReconcileStatus(str, Enum):
    """Outcome of reconciling one contact."""
    UNCHANGED = "unchanged"
    WRITTEN = "written"
    CONFLICT = "conflict"
    FAILED = "failed"


class ReconcileResult(BaseModel):
    """Result of one reconcile_contact call."""

    uid: str
    status: ReconcileStatus
    edges_added: int = 0
    unresolved: list[str] = Field(default_factory=list)
    malformed_keys: list[str] = Field(default_factory=list)
    attempts: int = 1
    error: Optional[str] = None

    @property
    def wrote(self) -> bool:
        return self.status is ReconcileStatus.WRITTEN

    @property
    def changed(self) -> bool:
        """Text was written or the graph gained edges."""
        return self.wrote or self.edges_added > 0

    @property
    def ok(self) -> bool:
        return self.status in (ReconcileStatus.UNCHANGED, ReconcileStatus.WRITTEN)


class RepairReport(BaseModel):
    """Result of repairing missing reciprocal relationships."""

    edges_added: int = 0
    outcomes: dict[str, ReconcileResult] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def writes(self) -> int:
        return sum(1 for r in self.outcomes.values() if r.wrote)


class PassSummary(BaseModel):
    """Summary of a whole-set fixed-point pass."""

    iterations: int = 0
    converged: bool = False
    writes: int = 0
    edges_added: int = 0
    reciprocals_repaired: int = 0
    outstanding_missing: int = 0
    outcomes: dict[str, ReconcileResult] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def conflicts(self) -> list[str]:
        return sorted(
            uid for uid, r in self.outcomes.items()
            if r.status is ReconcileStatus.CONFLICT
        )
