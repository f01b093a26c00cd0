"""Main Typer application — imports and registers all CLI commands.

Entry point: ``refsync`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from refsync.cli.commands.derive import derive_cmd
from refsync.cli.commands.sync import branch_cmd, tag_cmd

app = typer.Typer(
    name="refsync",
    help="refsync: point a release-derived Git ref at each artifact's commit.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="tag", help="Create the release tag in every Git artifact repository.")(tag_cmd)
app.command(name="branch", help="Create the release branch in every Git artifact repository.")(branch_cmd)
app.command(name="derive", help="Preview the ref name for a release name.")(derive_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
