"""Outcome of a single reconcile pass."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ReconcileResult:
    """What a reconcile pass did and whether it wants to run again.

    Attributes:
        requeue: True when the pass stopped early and a fresh pass is needed
        reason: Why the pass requeued
        actions: ``(action, target)`` pairs for every write performed
        ready_replicas: Readiness observed for the workload step, if reached
    """

    requeue: bool = False
    reason: str | None = None
    actions: list[tuple[str, str]] = field(default_factory=list)
    ready_replicas: int | None = None

    def record(self, action: str, target: str) -> None:
        self.actions.append((action, target))
