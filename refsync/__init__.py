"""refsync: keep a release-derived Git ref on the released commit.

Runs once per deployment:
  - discovers the release's Git artifacts from pipeline variables
  - derives the ref name from the release name (regex search/replace + prefix)
  - creates the ref in each artifact's repository, never moving an existing one
  - re-running for an unchanged release is a no-op
"""

__version__ = "1.0.0"
__description__ = "Create release tags and branches in Git artifact repositories"

from refsync.core.orchestrator import run_task, sync_release_ref
from refsync.core.ref_name import derive_ref_name
from refsync.cli.app import app as cli

__all__ = ["run_task", "sync_release_ref", "derive_ref_name", "cli", "__version__"]
