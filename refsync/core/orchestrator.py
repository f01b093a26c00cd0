"""Orchestrator — the single entry point of a ref sync invocation.

Sequences discovery -> derivation -> reconciliation:

- the ref name is derived once and applied to every artifact
- artifacts are reconciled one after the other; a failing artifact marks
  the task failed but never stops its siblings
- any unexpected exception aborts the run and becomes the task's failure
  message

The tag and branch commands differ only in the ``RefNameRule`` they pass.
"""

from __future__ import annotations

import logging

from refsync.bridge.devops_client import BuildClient, DevOpsClient, GitClient
from refsync.bridge.variables import VariableSource
from refsync.config import InvalidConfigurationError, RefSyncSettings
from refsync.core.discovery import discover_git_artifacts
from refsync.core.reconciler import RefReconciler
from refsync.core.task_result import TaskResultSink
from refsync.models.config import RefNameRule
from refsync.models.reports import ReconcileResult, SyncReport, TaskStatus

logger = logging.getLogger(__name__)

RELEASE_NAME_VARIABLE = "RELEASE.RELEASENAME"

# Task input name -> RefNameRule field
_RULE_INPUTS: dict[str, str] = {
    "searchRegex": "search_regex",
    "regexFlags": "regex_flags",
    "replacePattern": "replace_pattern",
}


def resolve_rule(rule: RefNameRule, variables: VariableSource) -> RefNameRule:
    """Overlay the task inputs that are set onto *rule*.

    Inputs that are absent keep the rule's value; an input set to an empty
    string is used as given.
    """
    overrides: dict[str, str] = {}
    for input_name, field_name in _RULE_INPUTS.items():
        value = variables.get_input(input_name, required=False)
        if value is not None:
            overrides[field_name] = value
    if not overrides:
        return rule
    return rule.model_copy(update=overrides)


def resolve_release_name(variables: VariableSource) -> str:
    """Return the release name the ref is derived from."""
    release_name = variables.get_variable(RELEASE_NAME_VARIABLE)
    if not release_name:
        raise InvalidConfigurationError(f"Variable not set: {RELEASE_NAME_VARIABLE}")
    return release_name


def sync_release_ref(
    rule: RefNameRule,
    release_name: str,
    variables: VariableSource,
    git_client: GitClient,
    build_client: BuildClient,
    sink: TaskResultSink,
) -> SyncReport:
    """Point the derived ref at each Git artifact's commit.

    Returns a ``SyncReport``; the same status is reported to *sink*.
    """
    ref_name = ""
    results: list[ReconcileResult] = []
    failures: list[str] = []

    try:
        ref_name = rule.derive(release_name)

        discovery = discover_git_artifacts(variables, build_client)
        for failure in discovery.failures:
            failures.append(failure)
            sink.set_result(TaskStatus.FAILED, failure)

        if not discovery.artifacts:
            sink.warning("No TfsGit artifacts found.")

        reconciler = RefReconciler(git_client, sink)
        for artifact in discovery.artifacts:
            results.append(reconciler.reconcile(artifact, ref_name))
    except Exception as exc:
        logger.exception("Ref sync aborted")
        sink.set_result(TaskStatus.FAILED, str(exc))
        return SyncReport(
            ref_name=ref_name,
            results=results,
            resolution_failures=failures,
            status=TaskStatus.FAILED,
            message=str(exc),
        )

    failed = [r for r in results if r.is_failure]
    if failures or failed:
        status = TaskStatus.FAILED
        message = "; ".join(failures + [r.message for r in failed])
    else:
        status = TaskStatus.SUCCEEDED
        message = f"{len(results)} artifact(s) reconciled for {ref_name}"
        sink.set_result(status, message)

    return SyncReport(
        ref_name=ref_name,
        results=results,
        resolution_failures=failures,
        status=status,
        message=message,
    )


def run_task(
    rule: RefNameRule,
    variables: VariableSource,
    sink: TaskResultSink,
    *,
    settings: RefSyncSettings | None = None,
    client: DevOpsClient | None = None,
    release_name: str | None = None,
) -> SyncReport:
    """Resolve inputs and collaborators, then run ``sync_release_ref``.

    Parameters
    ----------
    rule:
        Base naming rule (prefix and defaults) for the command.
    variables:
        Pipeline variables and task inputs.
    sink:
        Diagnostics and result sink.
    settings:
        Connection settings; loaded from the environment when omitted.
    client:
        Pre-built REST client.  Built from *settings* when omitted.
    release_name:
        Overrides ``RELEASE.RELEASENAME``.
    """
    owns_client = client is None
    try:
        effective_rule = resolve_rule(rule, variables)
        name = release_name or resolve_release_name(variables)
        if client is None:
            client = DevOpsClient.from_settings(settings or RefSyncSettings())
    except InvalidConfigurationError as exc:
        sink.set_result(TaskStatus.FAILED, str(exc))
        return SyncReport(status=TaskStatus.FAILED, message=str(exc))

    try:
        return sync_release_ref(effective_rule, name, variables, client, client, sink)
    finally:
        if owns_client:
            client.close()
