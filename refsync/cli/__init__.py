"""refsync CLI — Typer-based command-line interface.

Provides the ``refsync`` command with ``tag`` and ``branch`` subcommands
that point a release-derived ref at each Git artifact's commit, and
``derive`` to preview the ref name for a release.

All human-readable output uses Rich; agent logging commands go to stdout.
"""
