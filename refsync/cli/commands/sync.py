"""``refsync tag`` / ``refsync branch`` — create the release ref.

Both commands read the release name and artifact variables from the job
environment (or ``--variables-file``), derive the ref name, and create the
ref in every Git artifact's repository.  The exit code is 1 when any
artifact failed or the run was aborted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from refsync.bridge.variables import (
    EnvironmentVariableSource,
    MappingVariableSource,
    VariableSource,
)
from refsync.config import InvalidConfigurationError, RefSyncSettings
from refsync.core.orchestrator import run_task
from refsync.core.task_result import PipelineResultSink
from refsync.models.config import BRANCH_PREFIX, TAG_PREFIX, RefNameRule
from refsync.models.reports import ReconcileState, SyncReport, TaskStatus

console = Console(stderr=True)

_STATE_STYLES: dict[ReconcileState, str] = {
    ReconcileState.UPDATED: "[green]UPDATED[/green]",
    ReconcileState.ALREADY_CORRECT: "[cyan]ALREADY CORRECT[/cyan]",
    ReconcileState.DIVERGED: "[yellow]DIVERGED[/yellow]",
    ReconcileState.FAILED: "[bold red]FAILED[/bold red]",
}


def _load_variables(
    variables_file: Path | None, inputs: dict[str, str]
) -> VariableSource:
    if variables_file is None:
        return _InputOverlay(EnvironmentVariableSource(), inputs)
    return MappingVariableSource.from_json_file(variables_file, inputs)


class _InputOverlay:
    """Environment variables with command-line options taking precedence over inputs."""

    def __init__(self, base: EnvironmentVariableSource, inputs: dict[str, str]) -> None:
        self._base = base
        self._inputs = {k.lower(): v for k, v in inputs.items()}

    def get_variables(self) -> Iterator[tuple[str, str]]:
        return self._base.get_variables()

    def get_variable(self, name: str) -> str | None:
        return self._base.get_variable(name)

    def get_input(self, name: str, required: bool = False) -> str | None:
        if name.lower() in self._inputs:
            return self._inputs[name.lower()]
        return self._base.get_input(name, required)


def print_report(report: SyncReport) -> None:
    """Render a ``SyncReport`` as a Rich table."""
    table = Table(title=f"Ref sync: {report.ref_name or '(not derived)'}")
    table.add_column("Artifact", style="cyan")
    table.add_column("Repository")
    table.add_column("Commit")
    table.add_column("Result", justify="center")
    for result in report.results:
        table.add_row(
            result.artifact.name,
            result.artifact.repository_id,
            result.artifact.commit_id[:12] or "-",
            _STATE_STYLES[result.state],
        )
    for failure in report.resolution_failures:
        table.add_row("-", "-", "-", f"[bold red]{failure}[/bold red]")
    console.print(table)

    if report.succeeded:
        console.print(f"[bold green]Succeeded:[/bold green] {report.message}")
    else:
        console.print(f"[bold red]Failed:[/bold red] {report.message}")


def _sync(
    prefix: str,
    search_regex: str | None,
    regex_flags: str | None,
    replace_pattern: str | None,
    release_name: str | None,
    variables_file: Path | None,
) -> None:
    sink = PipelineResultSink()
    try:
        settings = RefSyncSettings()
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(levelname)s %(name)s: %(message)s",
        )
    except (ValidationError, ValueError) as exc:
        sink.set_result(TaskStatus.FAILED, str(exc))
        console.print(f"[bold red]Invalid settings:[/bold red] {exc}")
        raise typer.Exit(code=1)

    inputs = {
        name: value
        for name, value in (
            ("searchRegex", search_regex),
            ("regexFlags", regex_flags),
            ("replacePattern", replace_pattern),
        )
        if value is not None
    }
    try:
        variables = _load_variables(variables_file, inputs)
    except (OSError, ValueError, InvalidConfigurationError) as exc:
        sink.set_result(TaskStatus.FAILED, f"Cannot read variables: {exc}")
        console.print(f"[bold red]Cannot read variables:[/bold red] {exc}")
        raise typer.Exit(code=1)

    report = run_task(
        RefNameRule(prefix=prefix),
        variables,
        sink,
        settings=settings,
        release_name=release_name,
    )
    print_report(report)
    if not report.succeeded:
        raise typer.Exit(code=1)


_SEARCH_HELP = "Regex matched against the release name (default: whitespace runs)."
_FLAGS_HELP = "Regex flag letters: g, i, m, s, u (default: g)."
_REPLACE_HELP = "Replacement for each match; supports $1, $& and $$ (default: empty)."
_RELEASE_HELP = "Release name to derive from (default: RELEASE.RELEASENAME)."
_FILE_HELP = "JSON object of pipeline variables to use instead of the environment."


def tag_cmd(
    search_regex: str = typer.Option(None, "--search-regex", help=_SEARCH_HELP),
    regex_flags: str = typer.Option(None, "--regex-flags", help=_FLAGS_HELP),
    replace_pattern: str = typer.Option(None, "--replace-pattern", help=_REPLACE_HELP),
    release_name: str = typer.Option(None, "--release-name", help=_RELEASE_HELP),
    variables_file: Path = typer.Option(None, "--variables-file", help=_FILE_HELP),
) -> None:
    """Create ``refs/tags/<release>`` at each Git artifact's commit."""
    _sync(TAG_PREFIX, search_regex, regex_flags, replace_pattern, release_name, variables_file)


def branch_cmd(
    search_regex: str = typer.Option(None, "--search-regex", help=_SEARCH_HELP),
    regex_flags: str = typer.Option(None, "--regex-flags", help=_FLAGS_HELP),
    replace_pattern: str = typer.Option(None, "--replace-pattern", help=_REPLACE_HELP),
    release_name: str = typer.Option(None, "--release-name", help=_RELEASE_HELP),
    variables_file: Path = typer.Option(None, "--variables-file", help=_FILE_HELP),
) -> None:
    """Create ``refs/heads/<release>`` at each Git artifact's commit."""
    _sync(BRANCH_PREFIX, search_regex, regex_flags, replace_pattern, release_name, variables_file)
