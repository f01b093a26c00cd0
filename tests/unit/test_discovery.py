"""Unit tests for artifact discovery."""

from __future__ import annotations

import pytest

from refsync.bridge.variables import EnvironmentVariableSource, MappingVariableSource
from refsync.core.discovery import discover_git_artifacts, resolve_repository_id

COMMIT_A = "a" * 40
COMMIT_B = "b" * 40


class TestProviderFilter:
    """Only Git and TfsGit artifacts are discovered."""

    @pytest.mark.parametrize("provider", ["Git", "TfsGit"])
    def test_git_providers_discovered(self, make_variables, build_client, provider):
        variables = make_variables(
            {"app": {"provider": provider, "commit": COMMIT_A, "repo": "repo-1"}}
        )
        result = discover_git_artifacts(variables, build_client)

        assert len(result.artifacts) == 1
        artifact = result.artifacts[0]
        assert artifact.name == "app"
        assert artifact.commit_id == COMMIT_A
        assert artifact.repository_id == "repo-1"
        assert result.failures == []

    @pytest.mark.parametrize("provider", ["GitHub", "Build", "git", ""])
    def test_other_providers_skipped(self, make_variables, build_client, provider):
        variables = make_variables(
            {"app": {"provider": provider, "commit": COMMIT_A, "repo": "repo-1"}}
        )
        result = discover_git_artifacts(variables, build_client)

        assert result.artifacts == []
        assert result.failures == []

    def test_key_match_is_case_insensitive(self, build_client):
        variables = MappingVariableSource({
            "release.artifacts.app.repository.provider": "Git",
            "RELEASE.ARTIFACTS.app.SOURCEVERSION": COMMIT_A,
            "Release.Artifacts.app.Repository_Id": "repo-1",
        })
        result = discover_git_artifacts(variables, build_client)

        assert [a.repository_id for a in result.artifacts] == ["repo-1"]

    def test_unrelated_variables_ignored(self, make_variables, build_client):
        variables = make_variables(
            {}, **{"RELEASE.ARTIFACTS.app.REPOSITORY.NAME": "Git", "SYSTEM.DEBUG": "true"}
        )
        result = discover_git_artifacts(variables, build_client)
        assert result.artifacts == []

    def test_no_artifacts_is_not_a_failure(self, make_variables, build_client):
        result = discover_git_artifacts(make_variables(), build_client)
        assert result.artifacts == []
        assert result.failures == []


class TestRepositoryResolution:
    """Direct repository id first, legacy build lookup second."""

    def test_direct_id_skips_build_lookup(self, make_variables, build_client):
        variables = make_variables(
            {"app": {"commit": COMMIT_A, "repo": "repo-1", "build": "42"}}
        )
        result = discover_git_artifacts(variables, build_client)

        assert result.artifacts[0].repository_id == "repo-1"
        assert build_client.calls == []

    def test_empty_direct_id_falls_back_to_build(self, make_variables, build_client):
        variables = make_variables({"app": {"commit": COMMIT_A, "repo": "", "build": "42"}})
        result = discover_git_artifacts(variables, build_client)

        assert result.artifacts[0].repository_id == "repo-from-build"
        assert build_client.calls == [42]

    def test_missing_build_id_is_resolution_failure(self, make_variables, build_client):
        variables = make_variables({"app": {"commit": COMMIT_A}})
        result = discover_git_artifacts(variables, build_client)

        assert result.artifacts == []
        assert result.failures == [
            "Unable to get build id from variable: RELEASE.ARTIFACTS.app.BUILDID"
        ]

    def test_non_numeric_build_id(self, make_variables, build_client):
        repo, failure = resolve_repository_id(
            make_variables({"app": {"build": "abc"}}), build_client, "app"
        )
        assert repo is None
        assert "not a number" in failure

    def test_unknown_build(self, make_variables, build_client):
        repo, failure = resolve_repository_id(
            make_variables({"app": {"build": "7"}}), build_client, "app"
        )
        assert repo is None
        assert "Build 7" in failure

    def test_failing_artifact_does_not_drop_sibling(self, make_variables, build_client):
        variables = make_variables({
            "broken": {"commit": COMMIT_A},
            "good": {"commit": COMMIT_B, "repo": "repo-2"},
        })
        result = discover_git_artifacts(variables, build_client)

        assert [a.name for a in result.artifacts] == ["good"]
        assert len(result.failures) == 1


class TestCommit:
    def test_missing_commit_still_emitted(self, make_variables, build_client):
        variables = make_variables({"app": {"repo": "repo-1"}})
        result = discover_git_artifacts(variables, build_client)

        assert len(result.artifacts) == 1
        assert result.artifacts[0].commit_id == ""


class TestEnvironmentAliases:
    """Aliases exported by the agent may contain underscores."""

    def test_underscore_aliases_discovered(self, build_client):
        variables = EnvironmentVariableSource({
            "RELEASE_ARTIFACTS__MYREPO_REPOSITORY_PROVIDER": "TfsGit",
            "RELEASE_ARTIFACTS__MYREPO_REPOSITORY_ID": "repo-1",
            "RELEASE_ARTIFACTS__MYREPO_SOURCEVERSION": COMMIT_A,
            "RELEASE_ARTIFACTS_MY_APP_REPOSITORY_PROVIDER": "Git",
            "RELEASE_ARTIFACTS_MY_APP_REPOSITORY_ID": "repo-2",
            "RELEASE_ARTIFACTS_MY_APP_SOURCEVERSION": COMMIT_B,
        })
        result = discover_git_artifacts(variables, build_client)

        found = {a.name: (a.repository_id, a.commit_id) for a in result.artifacts}
        assert found == {
            "_MYREPO": ("repo-1", COMMIT_A),
            "MY_APP": ("repo-2", COMMIT_B),
        }
        assert result.failures == []

    def test_underscore_alias_build_fallback(self, build_client):
        variables = EnvironmentVariableSource({
            "RELEASE_ARTIFACTS__MYREPO_REPOSITORY_PROVIDER": "TfsGit",
            "RELEASE_ARTIFACTS__MYREPO_BUILDID": "42",
            "RELEASE_ARTIFACTS__MYREPO_SOURCEVERSION": COMMIT_A,
        })
        result = discover_git_artifacts(variables, build_client)

        assert [a.repository_id for a in result.artifacts] == ["repo-from-build"]
