"""Map Azure DevOps payloads onto domain types and back."""

from __future__ import annotations

from typing import TYPE_CHECKING

from refsync.domain.types import BuildInfo, CommitInfo, RefInfo, RefUpdateResult

from .schema import GitRefUpdatePayload

if TYPE_CHECKING:
    from refsync.domain.types import RefUpdateRequest

    from .schema import BuildPayload, GitCommitRefPayload, GitRefPayload, GitRefUpdateResultPayload


def parse_ref(payload: GitRefPayload) -> RefInfo:
    return RefInfo(name=payload.name, object_id=payload.object_id.lower())


def parse_commit(payload: GitCommitRefPayload) -> CommitInfo:
    return CommitInfo(
        commit_id=payload.commit_id.lower(),
        committer_timestamp=payload.committer.date,
    )


def parse_update_result(payload: GitRefUpdateResultPayload) -> RefUpdateResult:
    return RefUpdateResult(
        success=payload.success,
        update_status=payload.update_status,
        repository_id=payload.repository_id,
        old_object_id=payload.old_object_id,
        new_object_id=payload.new_object_id,
        name=payload.name,
    )


def parse_build(payload: BuildPayload) -> BuildInfo:
    return BuildInfo(
        build_id=payload.id,
        repository_id=payload.repository.id,
        repository_type=payload.repository.type,
    )


def dump_update_request(request: RefUpdateRequest) -> dict[str, object]:
    payload = GitRefUpdatePayload(
        name=request.name,
        old_object_id=request.old_object_id,
        new_object_id=request.new_object_id,
        is_locked=request.is_locked,
        repository_id=request.repository_id,
    )
    return payload.model_dump(by_alias=True)
