"""Pipeline variable sources — the configuration reader the core depends on.

Pipeline variables are case-insensitive and dotted (``RELEASE.RELEASENAME``).
The agent exports them to the job environment upper-cased with dots
replaced by underscores (``RELEASE_RELEASENAME``), and exports task inputs
as ``INPUT_<NAME>``.

Two sources are provided:

1. ``EnvironmentVariableSource`` — reads the job environment.
2. ``MappingVariableSource`` — an explicit dict (tests, variables files).
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from refsync.config import InvalidConfigurationError

logger = logging.getLogger(__name__)

_ARTIFACT_PROVIDER_ENV = re.compile(
    r"^RELEASE_ARTIFACTS_(.+)_REPOSITORY_PROVIDER$", re.IGNORECASE
)


@runtime_checkable
class VariableSource(Protocol):
    """Read access to pipeline variables and task inputs."""

    def get_variables(self) -> Iterator[tuple[str, str]]:
        """Yield every visible ``(name, value)`` pair."""
        ...

    def get_variable(self, name: str) -> str | None:
        """Return the value of *name*, or ``None`` when it is not set."""
        ...

    def get_input(self, name: str, required: bool = False) -> str | None:
        """Return task input *name*; raise if *required* and absent."""
        ...


def _require(name: str, value: str | None, required: bool) -> str | None:
    if required and not value:
        raise InvalidConfigurationError(f"Input required: {name}")
    return value


def _env_name(name: str) -> str:
    return name.replace(".", "_").replace(" ", "_").upper()


def _dotted_name(key: str) -> str:
    # Artifact aliases may contain underscores (the default alias is
    # "_<repository>"), so only the fixed parts of the name are dotted.
    match = _ARTIFACT_PROVIDER_ENV.match(key)
    if match is not None:
        return f"RELEASE.ARTIFACTS.{match.group(1)}.REPOSITORY.PROVIDER"
    return key.replace("_", ".")


class EnvironmentVariableSource:
    """Variables as exported by the pipeline agent into the environment.

    Parameters
    ----------
    environ:
        Environment mapping to read.  Defaults to ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def get_variables(self) -> Iterator[tuple[str, str]]:
        for key, value in self._environ.items():
            yield _dotted_name(key), value

    def get_variable(self, name: str) -> str | None:
        value = self._environ.get(_env_name(name))
        logger.debug("%s=%s", name, value)
        return value

    def get_input(self, name: str, required: bool = False) -> str | None:
        value = self._environ.get(f"INPUT_{_env_name(name)}")
        if value is not None:
            value = value.strip()
        logger.debug("input %s=%s", name, value)
        return _require(name, value, required)


class MappingVariableSource:
    """Variables and inputs held in plain dicts.

    Variable names are matched case-insensitively, as the agent does.
    """

    def __init__(
        self,
        variables: Mapping[str, str] | None = None,
        inputs: Mapping[str, str] | None = None,
    ) -> None:
        self._variables: dict[str, tuple[str, str]] = {
            k.upper(): (k, v) for k, v in (variables or {}).items()
        }
        self._inputs: dict[str, str] = {
            k.lower(): v for k, v in (inputs or {}).items()
        }

    @classmethod
    def from_json_file(
        cls, path: Path, inputs: Mapping[str, str] | None = None
    ) -> MappingVariableSource:
        """Load variables from a JSON object of ``name: value`` pairs."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise InvalidConfigurationError(
                f"Variables file {path} must contain a JSON object"
            )
        return cls({str(k): "" if v is None else str(v) for k, v in data.items()}, inputs)

    def get_variables(self) -> Iterator[tuple[str, str]]:
        yield from self._variables.values()

    def get_variable(self, name: str) -> str | None:
        entry = self._variables.get(name.upper())
        return entry[1] if entry else None

    def get_input(self, name: str, required: bool = False) -> str | None:
        return _require(name, self._inputs.get(name.lower()), required)
