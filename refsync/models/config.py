"""Ref naming rule — the single axis of variation between tag and branch runs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from refsync.core.ref_name import (
    DEFAULT_REGEX_FLAGS,
    DEFAULT_REPLACE_PATTERN,
    DEFAULT_SEARCH_PATTERN,
    derive_ref_name,
)

TAG_PREFIX = "refs/tags/"
BRANCH_PREFIX = "refs/heads/"


class RefNameRule(BaseModel):
    """How a release name becomes a fully qualified ref name.

    Defaults strip every run of whitespace from the release name.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = TAG_PREFIX
    search_regex: str = DEFAULT_SEARCH_PATTERN
    regex_flags: str = DEFAULT_REGEX_FLAGS
    replace_pattern: str = DEFAULT_REPLACE_PATTERN

    def derive(self, release_name: str) -> str:
        """Apply this rule to *release_name*."""
        return derive_ref_name(
            release_name,
            self.prefix,
            self.search_regex,
            self.replace_pattern,
            self.regex_flags,
        )
