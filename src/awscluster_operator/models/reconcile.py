"""
Value types exchanged between the watch layer and the reconciler.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ReconcileRequest:
    """Identity of the AWSCluster to reconcile."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ReconcileResult:
    """
    Outcome of a successful reconciliation.

    ``requeue_after`` is None when the resource has converged; otherwise the
    number of seconds after which reconciliation should run again. Failures
    are raised, never returned.
    """

    requeue_after: float | None = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None

    @classmethod
    def after(cls, seconds: float) -> "ReconcileResult":
        return cls(requeue_after=seconds)


class ReconcileState(str, Enum):
    """Mode of an AWSCluster, derived once per reconciliation."""

    UNOWNED = "Unowned"
    PAUSED = "Paused"
    DELETING = "Deleting"
    ACTIVE = "Active"
