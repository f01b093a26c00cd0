"""Ref reconciler — create the derived ref and classify what happened.

For each artifact the reconciler walks a small state machine:

1. Attempt-create the ref with the all-zero expected prior value.
   Success -> UPDATED.  No result at all -> FAILED.
2. On failure, list the repository's refs and look for the same name.
   Same commit -> ALREADY_CORRECT.  Different commit -> DIVERGED.
3. Otherwise classify the update status, log remediation guidance and
   mark the task failed -> FAILED.

Refs are listed only after a failed create so the common path costs a
single request.  An existing ref is never moved.
"""

from __future__ import annotations

import logging

from refsync.bridge.devops_client import GitClient
from refsync.core.discovery import artifact_variable
from refsync.core.task_result import TaskResultSink
from refsync.models.artifacts import ArtifactDescriptor
from refsync.models.refs import (
    ZERO_OBJECT_ID,
    RefUpdateOutcome,
    RefUpdateRequest,
    RefUpdateStatus,
)
from refsync.models.reports import ReconcileResult, ReconcileState, TaskStatus

logger = logging.getLogger(__name__)

PERMISSION_TEMPLATE = "You must grant the build account access to permission: "

_PERMISSION_NAMES: dict[RefUpdateStatus, str] = {
    RefUpdateStatus.CREATE_BRANCH_PERMISSION_REQUIRED: "Create Branch",
    RefUpdateStatus.CREATE_TAG_PERMISSION_REQUIRED: "Create Tag",
}


def permissions_location(repository_id: str) -> str:
    """Relative collection path where repository permissions are granted."""
    return f"_admin/_versioncontrol?_a=security&repositoryId={repository_id}"


class RefReconciler:
    """Reconciles one artifact at a time against a derived ref name.

    Parameters
    ----------
    git_client:
        Ref listing and update backend.
    sink:
        Receives diagnostics and failure results.
    """

    def __init__(self, git_client: GitClient, sink: TaskResultSink) -> None:
        self._git = git_client
        self._sink = sink

    def reconcile(self, artifact: ArtifactDescriptor, ref_name: str) -> ReconcileResult:
        """Drive *artifact* to have *ref_name* pointing at its commit."""
        self._sink.debug(
            f"Processing artifact: '{artifact.name}' for ref: {ref_name} "
            f"new commit: {artifact.commit_id}"
        )

        if not artifact.commit_id:
            message = (
                f"Unable to create ref: {ref_name} for artifact '{artifact.name}': "
                f"no commit in variable "
                f"{artifact_variable(artifact.name, 'SOURCEVERSION')}"
            )
            self._sink.set_result(TaskStatus.FAILED, message)
            return self._result(artifact, ref_name, ReconcileState.FAILED, message=message)

        outcome = self._create_ref(artifact, ref_name)
        if outcome is None:
            message = "No update result returned from updateRefs"
            self._sink.warning(message)
            self._sink.set_result(
                TaskStatus.FAILED,
                f"Unable to create ref: {ref_name} RepositoryId: "
                f"{artifact.repository_id} Commit: {artifact.commit_id} ({message})",
            )
            return self._result(artifact, ref_name, ReconcileState.FAILED, message=message)

        if outcome.success:
            self._sink.debug("Ref updated!")
            return self._result(artifact, ref_name, ReconcileState.UPDATED, outcome)

        existing = self._existing_commit(artifact.repository_id, ref_name)
        if existing is not None:
            if existing == artifact.commit_id:
                self._sink.debug("Found matching ref for commit.")
                return self._result(
                    artifact, ref_name, ReconcileState.ALREADY_CORRECT, outcome
                )
            message = (
                f"Ref exists, but on different commit. New commit: "
                f"{artifact.commit_id} Old Commit: {existing}"
            )
            self._sink.warning(message)
            return self._result(
                artifact, ref_name, ReconcileState.DIVERGED, outcome, message
            )

        message = self._report_failure(artifact, ref_name, outcome)
        return self._result(artifact, ref_name, ReconcileState.FAILED, outcome, message)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _create_ref(
        self, artifact: ArtifactDescriptor, ref_name: str
    ) -> RefUpdateOutcome | None:
        request = RefUpdateRequest(
            repository_id=artifact.repository_id,
            name=ref_name,
            new_object_id=artifact.commit_id,
            old_object_id=ZERO_OBJECT_ID,
        )
        outcomes = self._git.update_refs([request], artifact.repository_id)
        if not outcomes:
            return None
        return outcomes[0]

    def _existing_commit(self, repository_id: str, ref_name: str) -> str | None:
        refs = self._git.get_refs(repository_id)
        if not refs:
            return None
        for ref in refs:
            if ref.name == ref_name:
                return ref.object_id
        return None

    def _report_failure(
        self,
        artifact: ArtifactDescriptor,
        ref_name: str,
        outcome: RefUpdateOutcome,
    ) -> str:
        permission = _PERMISSION_NAMES.get(outcome.update_status)
        if permission is not None:
            self._sink.error(f"{PERMISSION_TEMPLATE}{permission}")

        self._sink.error(
            "If you need to change permissions see: "
            f"{permissions_location(artifact.repository_id)}"
        )

        message = (
            f"Unable to create ref: {ref_name} "
            f"UpdateStatus: {outcome.update_status.value} "
            f"RepositoryId: {outcome.repository_id or artifact.repository_id} "
            f"Commit: {outcome.new_object_id or artifact.commit_id}"
        )
        self._sink.set_result(TaskStatus.FAILED, message)
        return message

    @staticmethod
    def _result(
        artifact: ArtifactDescriptor,
        ref_name: str,
        state: ReconcileState,
        outcome: RefUpdateOutcome | None = None,
        message: str = "",
    ) -> ReconcileResult:
        logger.info("Artifact %s -> %s: %s", artifact.name, ref_name, state.value)
        return ReconcileResult(
            artifact=artifact,
            ref_name=ref_name,
            state=state,
            outcome=outcome,
            message=message,
        )
