"""Unit tests for pipeline variable sources."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from refsync.bridge.variables import (
    EnvironmentVariableSource,
    MappingVariableSource,
    VariableSource,
)
from refsync.config import InvalidConfigurationError


class TestEnvironmentVariableSource:
    """Agent-exported environment variables map back to dotted names."""

    def test_get_variable_maps_dots_to_underscores(self):
        source = EnvironmentVariableSource({"RELEASE_RELEASENAME": "Release 3"})
        assert source.get_variable("Release.ReleaseName") == "Release 3"

    def test_get_variable_missing(self):
        assert EnvironmentVariableSource({}).get_variable("RELEASE.RELEASENAME") is None

    def test_get_variables_yields_dotted_names(self):
        source = EnvironmentVariableSource(
            {"RELEASE_ARTIFACTS_APP_REPOSITORY_PROVIDER": "TfsGit"}
        )
        assert list(source.get_variables()) == [
            ("RELEASE.ARTIFACTS.APP.REPOSITORY.PROVIDER", "TfsGit")
        ]

    def test_provider_names_keep_alias_underscores(self):
        source = EnvironmentVariableSource({
            "RELEASE_ARTIFACTS__MYREPO_REPOSITORY_PROVIDER": "TfsGit",
            "RELEASE_ARTIFACTS_MY_APP_REPOSITORY_PROVIDER": "Git",
        })
        assert dict(source.get_variables()) == {
            "RELEASE.ARTIFACTS._MYREPO.REPOSITORY.PROVIDER": "TfsGit",
            "RELEASE.ARTIFACTS.MY_APP.REPOSITORY.PROVIDER": "Git",
        }

    def test_get_input_reads_input_prefix(self):
        source = EnvironmentVariableSource({"INPUT_SEARCHREGEX": " \\d+ "})
        assert source.get_input("searchRegex") == "\\d+"

    def test_required_input_missing(self):
        with pytest.raises(InvalidConfigurationError, match="Input required: regexFlags"):
            EnvironmentVariableSource({}).get_input("regexFlags", required=True)

    def test_satisfies_protocol(self):
        assert isinstance(EnvironmentVariableSource({}), VariableSource)


class TestMappingVariableSource:
    def test_lookup_is_case_insensitive(self):
        source = MappingVariableSource({"Release.ReleaseName": "R1"})
        assert source.get_variable("RELEASE.RELEASENAME") == "R1"

    def test_get_variables_keeps_original_names(self):
        source = MappingVariableSource({"Release.ReleaseName": "R1"})
        assert list(source.get_variables()) == [("Release.ReleaseName", "R1")]

    def test_inputs(self):
        source = MappingVariableSource(inputs={"replacePattern": "_"})
        assert source.get_input("REPLACEPATTERN") == "_"
        assert source.get_input("searchRegex") is None

    def test_from_json_file(self, tmp_path: Path):
        path = tmp_path / "vars.json"
        path.write_text(json.dumps({"RELEASE.RELEASENAME": "R2", "BUILDID": 12}))

        source = MappingVariableSource.from_json_file(path)

        assert source.get_variable("release.releasename") == "R2"
        assert source.get_variable("BUILDID") == "12"

    def test_from_json_file_rejects_non_object(self, tmp_path: Path):
        path = tmp_path / "vars.json"
        path.write_text("[1, 2]")
        with pytest.raises(InvalidConfigurationError):
            MappingVariableSource.from_json_file(path)
