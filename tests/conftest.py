"""Shared test fixtures for refsync."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from refsync.bridge.variables import MappingVariableSource
from refsync.core.task_result import PipelineResultSink
from refsync.models.artifacts import Build, BuildRepository
from refsync.models.refs import (
    GitRef,
    RefUpdateOutcome,
    RefUpdateRequest,
    RefUpdateStatus,
)


class FakeGitClient:
    """In-memory ref store that behaves like the ref update service.

    Creating a ref that already exists fails with ``staleOldObjectId``.
    ``deny_status`` makes every create fail with that status instead.
    """

    def __init__(self, refs: dict[str, dict[str, str]] | None = None) -> None:
        self.refs: dict[str, dict[str, str]] = {
            repo: dict(names) for repo, names in (refs or {}).items()
        }
        self.deny_status: RefUpdateStatus | None = None
        self.return_nothing = False
        self.update_calls: list[tuple[list[RefUpdateRequest], str]] = []
        self.get_refs_calls: list[str] = []

    def get_refs(self, repository_id: str) -> list[GitRef]:
        self.get_refs_calls.append(repository_id)
        return [
            GitRef(name=name, object_id=commit)
            for name, commit in self.refs.get(repository_id, {}).items()
        ]

    def update_refs(
        self, requests: Sequence[RefUpdateRequest], repository_id: str
    ) -> list[RefUpdateOutcome] | None:
        self.update_calls.append((list(requests), repository_id))
        if self.return_nothing:
            return []
        outcomes = []
        for req in requests:
            repo_refs = self.refs.setdefault(repository_id, {})
            if self.deny_status is not None:
                status, success = self.deny_status, False
            elif req.name in repo_refs:
                status, success = RefUpdateStatus.STALE_OLD_OBJECT_ID, False
            else:
                repo_refs[req.name] = req.new_object_id
                status, success = RefUpdateStatus.VALID, True
            outcomes.append(
                RefUpdateOutcome(
                    name=req.name,
                    repository_id=repository_id,
                    new_object_id=req.new_object_id,
                    old_object_id=req.old_object_id,
                    success=success,
                    update_status=status,
                )
            )
        return outcomes


class FakeBuildClient:
    """Build lookup backed by a ``{build_id: repository_id}`` dict."""

    def __init__(self, builds: dict[int, str] | None = None) -> None:
        self.builds = builds or {}
        self.calls: list[int] = []

    def get_build(self, build_id: int) -> Build | None:
        self.calls.append(build_id)
        repo = self.builds.get(build_id)
        if repo is None:
            return None
        return Build(id=build_id, repository=BuildRepository(id=repo))


@pytest.fixture
def git_client() -> FakeGitClient:
    """Provide an empty in-memory git client."""
    return FakeGitClient()


@pytest.fixture
def build_client() -> FakeBuildClient:
    """Provide a build client that knows build 42 -> repo-from-build."""
    return FakeBuildClient({42: "repo-from-build"})


@pytest.fixture
def sink() -> PipelineResultSink:
    """Provide a result sink that keeps messages in memory only."""
    return PipelineResultSink(echo=False)


@pytest.fixture
def make_variables() -> Callable[..., MappingVariableSource]:
    """Factory fixture: build a variable source from artifact specs.

    Each artifact is ``name -> {"provider": ..., "commit": ..., "repo": ...,
    "build": ...}``; keys left out are not set.
    """

    def _factory(
        artifacts: dict[str, dict[str, Any]] | None = None,
        release_name: str | None = "Release 1",
        inputs: dict[str, str] | None = None,
        **extra: str,
    ) -> MappingVariableSource:
        variables: dict[str, str] = dict(extra)
        if release_name is not None:
            variables["RELEASE.RELEASENAME"] = release_name
        for name, attrs in (artifacts or {}).items():
            prefix = f"RELEASE.ARTIFACTS.{name}"
            variables[f"{prefix}.REPOSITORY.PROVIDER"] = attrs.get("provider", "TfsGit")
            if "commit" in attrs:
                variables[f"{prefix}.SOURCEVERSION"] = attrs["commit"]
            if "repo" in attrs:
                variables[f"{prefix}.REPOSITORY_ID"] = attrs["repo"]
            if "build" in attrs:
                variables[f"{prefix}.BUILDID"] = attrs["build"]
        return MappingVariableSource(variables, inputs)

    return _factory
