"""Core value types for ref reconciliation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

ZERO_COMMIT_ID: Final[str] = "0" * 40

_COMMIT_ID_PATTERN = re.compile(r"[0-9a-f]{40}")


class InvalidCommitIdError(ValueError):
    """Raised when a value is not a 40-character hexadecimal commit id."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid commit id: {value!r}")
        self.value = value


def is_commit_id(value: str | None) -> bool:
    return value is not None and _COMMIT_ID_PATTERN.fullmatch(value.lower()) is not None


def normalize_commit_id(value: str) -> str:
    if not is_commit_id(value):
        raise InvalidCommitIdError(value)
    return value.lower()


def normalize_repository_id(value: str) -> str:
    return value.strip().lower()


class RefUpdateStatus(StrEnum):
    """Update statuses reported by the hosting service, in wire ordinal order."""

    SUCCEEDED = "succeeded"
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

    @classmethod
    def from_wire(cls, value: object) -> RefUpdateStatus:
        """Accept either the string form or the numeric ordinal of older API versions."""

        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f"Unknown ref update status ordinal: {value}")
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        raise ValueError(f"Unknown ref update status: {value!r}")


@dataclass(slots=True)
class ArtifactDescriptor:
    """A build output naming the commit a repository's ref should point at.

    ``old_commit_id`` starts at the zero sentinel and is filled in with the
    ref's observed tip during synchronization.
    """

    name: str
    commit_id: str
    repository_id: str
    old_commit_id: str = ZERO_COMMIT_ID

    def __post_init__(self) -> None:
        self.commit_id = normalize_commit_id(self.commit_id)
        self.old_commit_id = normalize_commit_id(self.old_commit_id)
        self.repository_id = normalize_repository_id(self.repository_id)


@dataclass(frozen=True, slots=True)
class CommitInfo:
    commit_id: str
    committer_timestamp: datetime


@dataclass(frozen=True, slots=True)
class RefInfo:
    name: str
    object_id: str


@dataclass(frozen=True, slots=True)
class RefUpdateRequest:
    name: str
    old_object_id: str
    new_object_id: str
    repository_id: str
    is_locked: bool = False


@dataclass(frozen=True, slots=True)
class RefUpdateResult:
    success: bool
    update_status: RefUpdateStatus
    repository_id: str
    old_object_id: str
    new_object_id: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class BuildInfo:
    build_id: int
    repository_id: str
    repository_type: str | None = None
