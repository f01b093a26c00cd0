"""Reconciliation result models — per-artifact outcomes and the run report."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from refsync.models.artifacts import ArtifactDescriptor
from refsync.models.refs import RefUpdateOutcome


class ReconcileState(str, Enum):
    """Terminal state of one artifact's reconciliation."""

    UPDATED = "updated"
    ALREADY_CORRECT = "already_correct"
    DIVERGED = "diverged"
    FAILED = "failed"


class TaskStatus(str, Enum):
    """Task-level result, as reported to the pipeline agent."""

    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class ReconcileResult(BaseModel):
    """Outcome of reconciling one artifact against the derived ref."""

    model_config = ConfigDict(frozen=True)

    artifact: ArtifactDescriptor
    ref_name: str
    state: ReconcileState
    outcome: RefUpdateOutcome | None = None
    message: str = ""

    @property
    def is_failure(self) -> bool:
        # Divergence is reported as a warning, never as a failure.
        return self.state == ReconcileState.FAILED


class SyncReport(BaseModel):
    """Aggregate result of one invocation."""

    model_config = ConfigDict(frozen=True)

    ref_name: str = ""
    results: list[ReconcileResult] = []
    resolution_failures: list[str] = []
    status: TaskStatus = TaskStatus.SUCCEEDED
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == TaskStatus.SUCCEEDED

    def count(self, state: ReconcileState) -> int:
        """Number of artifacts that ended in *state*."""
        return sum(1 for r in self.results if r.state == state)
