"""Git ref models — wire-compatible with the version-control REST API.

Field names are snake_case in Python and camelCase on the wire
(``repositoryId``, ``newObjectId`` ...).  Use ``model_dump(by_alias=True)``
to build request bodies and ``model_validate`` on response items.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Expected prior value meaning "the ref must not exist yet".
ZERO_OBJECT_ID = "0" * 40


class RefUpdateStatus(str, Enum):
    """Per-ref update status reported by the service."""

    VALID = "valid"
    FORCE_PUSH_REQUIRED = "forcePushRequired"
    STALE_OLD_OBJECT_ID = "staleOldObjectId"
    INVALID_REF_NAME = "invalidRefName"
    UNPROCESSED = "unprocessed"
    UNRESOLVABLE_TO_COMMIT = "unresolvableToCommit"
    WRITE_PERMISSION_REQUIRED = "writePermissionRequired"
    MANAGE_NOTE_PERMISSION_REQUIRED = "manageNotePermissionRequired"
    CREATE_BRANCH_PERMISSION_REQUIRED = "createBranchPermissionRequired"
    CREATE_TAG_PERMISSION_REQUIRED = "createTagPermissionRequired"
    REJECTED_BY_PLUGIN = "rejectedByPlugin"
    LOCKED = "locked"
    REF_NAME_CONFLICT = "refNameConflict"
    REJECTED_BY_POLICY = "rejectedByPolicy"
    SUCCEEDED_NON_EXISTENT_REF = "succeededNonExistentRef"
    SUCCEEDED_CORRUPT_REF = "succeededCorruptRef"
    OTHER = "other"


_STATUS_BY_LOWER: dict[str, RefUpdateStatus] = {
    s.value.lower(): s for s in RefUpdateStatus
}


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GitRef(_WireModel):
    """One ref as returned by the ref listing."""

    name: str
    object_id: str = ""


class RefUpdateRequest(_WireModel):
    """Desired transition of a single ref.

    ``old_object_id`` defaults to the all-zero sentinel: this project only
    ever creates refs, it never moves an existing one.
    """

    repository_id: str
    name: str
    new_object_id: str
    old_object_id: str = ZERO_OBJECT_ID
    is_locked: bool = False


class RefUpdateOutcome(_WireModel):
    """Result of one ``RefUpdateRequest`` as reported by the service."""

    name: str = ""
    repository_id: str = ""
    new_object_id: str = ""
    old_object_id: str = ""
    success: bool = False
    update_status: RefUpdateStatus = RefUpdateStatus.OTHER
    custom_message: str | None = None

    @field_validator("update_status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> RefUpdateStatus:
        if isinstance(value, RefUpdateStatus):
            return value
        if value is None:
            return RefUpdateStatus.OTHER
        return _STATUS_BY_LOWER.get(str(value).lower(), RefUpdateStatus.OTHER)
