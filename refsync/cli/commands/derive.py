"""``refsync derive NAME`` — preview the ref name for a release name."""

from __future__ import annotations

import typer
from rich.console import Console

from refsync.config import InvalidConfigurationError
from refsync.core.ref_name import (
    DEFAULT_REGEX_FLAGS,
    DEFAULT_REPLACE_PATTERN,
    DEFAULT_SEARCH_PATTERN,
    derive_ref_name,
)
from refsync.models.config import TAG_PREFIX

console = Console()


def derive_cmd(
    release_name: str = typer.Argument(..., help="Release name to transform."),
    prefix: str = typer.Option(TAG_PREFIX, "--prefix", "-p", help="Ref prefix."),
    search_regex: str = typer.Option(DEFAULT_SEARCH_PATTERN, "--search-regex"),
    regex_flags: str = typer.Option(DEFAULT_REGEX_FLAGS, "--regex-flags"),
    replace_pattern: str = typer.Option(DEFAULT_REPLACE_PATTERN, "--replace-pattern"),
) -> None:
    """Print the ref name a release would get, without touching any repository."""
    try:
        ref_name = derive_ref_name(
            release_name, prefix, search_regex, replace_pattern, regex_flags
        )
    except InvalidConfigurationError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(ref_name, highlight=False, markup=False, soft_wrap=True)
