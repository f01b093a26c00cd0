"""refsync data models — all Pydantic v2, all frozen (immutable)."""

from refsync.models.artifacts import ArtifactDescriptor, Build, BuildRepository
from refsync.models.config import BRANCH_PREFIX, TAG_PREFIX, RefNameRule
from refsync.models.refs import (
    ZERO_OBJECT_ID,
    GitRef,
    RefUpdateOutcome,
    RefUpdateRequest,
    RefUpdateStatus,
)
from refsync.models.reports import (
    ReconcileResult,
    ReconcileState,
    SyncReport,
    TaskStatus,
)

__all__ = [
    # artifacts
    "ArtifactDescriptor",
    "Build",
    "BuildRepository",
    # naming
    "RefNameRule",
    "TAG_PREFIX",
    "BRANCH_PREFIX",
    # refs
    "ZERO_OBJECT_ID",
    "GitRef",
    "RefUpdateOutcome",
    "RefUpdateRequest",
    "RefUpdateStatus",
    # reports
    "ReconcileResult",
    "ReconcileState",
    "SyncReport",
    "TaskStatus",
]
