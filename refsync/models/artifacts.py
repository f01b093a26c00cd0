"""Release artifact models — one per version-controlled release input."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ArtifactDescriptor(BaseModel):
    """A Git-backed release artifact resolved from pipeline variables.

    Built once during discovery and consumed by the reconciler.  The
    ``commit_id`` may be empty when the upstream producer never populated
    ``SOURCEVERSION``; the reconciler refuses to create a ref for it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    commit_id: str
    repository_id: str


class BuildRepository(BaseModel):
    """The repository section of a build record."""

    model_config = ConfigDict(frozen=True)

    id: str


class Build(BaseModel):
    """Subset of a build record used for the legacy repository lookup."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    repository: BuildRepository | None = None
