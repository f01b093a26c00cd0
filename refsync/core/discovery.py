"""Artifact discovery — find the Git-backed artifacts of a release.

Release artifacts are described by pipeline variables following the
``RELEASE.ARTIFACTS.<NAME>.*`` naming convention.  An artifact qualifies
when its ``REPOSITORY.PROVIDER`` is one of the Git providers.

Repository id resolution is two-tiered:

1. ``RELEASE.ARTIFACTS.<NAME>.REPOSITORY_ID`` (current producers).
2. ``RELEASE.ARTIFACTS.<NAME>.BUILDID`` looked up through the build service
   (older producers that never populated the direct id).

An artifact whose repository id cannot be resolved is dropped and recorded
as a failure; its siblings are still discovered.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel

from refsync.bridge.devops_client import BuildClient
from refsync.bridge.variables import VariableSource
from refsync.models.artifacts import ArtifactDescriptor

logger = logging.getLogger(__name__)

GIT_PROVIDERS: frozenset[str] = frozenset({"TfsGit", "Git"})

_PROVIDER_VARIABLE = re.compile(
    r"^RELEASE\.ARTIFACTS\.([^.]+)\.REPOSITORY\.PROVIDER$", re.IGNORECASE
)


class DiscoveryResult(BaseModel):
    """Artifacts ready for reconciliation plus per-artifact resolution failures."""

    artifacts: list[ArtifactDescriptor] = []
    failures: list[str] = []


def artifact_variable(name: str, suffix: str) -> str:
    """Return the variable name ``RELEASE.ARTIFACTS.<name>.<suffix>``."""
    return f"RELEASE.ARTIFACTS.{name}.{suffix}"


def discover_git_artifacts(
    variables: VariableSource, build_client: BuildClient
) -> DiscoveryResult:
    """Scan *variables* for Git-backed release artifacts.

    Returns a ``DiscoveryResult``.  An empty artifact list is not an
    error; callers decide how to report it.
    """
    result = DiscoveryResult()

    for name, value in variables.get_variables():
        match = _PROVIDER_VARIABLE.match(name)
        if match is None:
            continue

        if value not in GIT_PROVIDERS:
            logger.debug("Matching variable: %s, but artifact type: %s", name, value)
            continue

        artifact_name = match.group(1)
        logger.debug("Getting repository id for artifact: %s", artifact_name)
        repository_id, failure = resolve_repository_id(
            variables, build_client, artifact_name
        )
        if repository_id is None:
            result.failures.append(failure)
            continue

        commit = variables.get_variable(
            artifact_variable(artifact_name, "SOURCEVERSION")
        )
        result.artifacts.append(
            ArtifactDescriptor(
                name=artifact_name,
                commit_id=commit or "",
                repository_id=repository_id,
            )
        )

    return result


def resolve_repository_id(
    variables: VariableSource, build_client: BuildClient, artifact_name: str
) -> tuple[str | None, str]:
    """Resolve the repository id of *artifact_name*.

    Returns ``(repository_id, "")`` on success and ``(None, reason)`` when
    neither the direct id nor the build lookup yields one.
    """
    repository_id = variables.get_variable(
        artifact_variable(artifact_name, "REPOSITORY_ID")
    )
    if repository_id:
        return repository_id, ""

    build_variable = artifact_variable(artifact_name, "BUILDID")
    build_id = variables.get_variable(build_variable)
    if not build_id:
        return None, f"Unable to get build id from variable: {build_variable}"

    try:
        numeric_id = int(build_id)
    except ValueError:
        return None, f"Build id '{build_id}' from variable {build_variable} is not a number"

    build = build_client.get_build(numeric_id)
    if build is None or build.repository is None or not build.repository.id:
        return None, f"Build {numeric_id} has no repository for artifact: {artifact_name}"

    logger.debug("Got repositoryid: %s", build.repository.id)
    return build.repository.id, ""
