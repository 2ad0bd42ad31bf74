from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from refsync.domain.report import RunReport
from refsync.domain.types import (
    ZERO_COMMIT_ID,
    BuildInfo,
    CommitInfo,
    RefInfo,
    RefUpdateRequest,
    RefUpdateResult,
    RefUpdateStatus,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime


class FakeGitService:
    """In-memory hosting service applying compare-and-swap semantics to refs."""

    def __init__(self) -> None:
        self.refs: dict[str, dict[str, str]] = {}
        self.commit_times: dict[str, datetime] = {}
        self.forced_statuses: dict[str, RefUpdateStatus] = {}
        self.commit_response: list[CommitInfo] | None = None
        self.empty_update_response = False
        self.calls: list[tuple[object, ...]] = []
        self.update_requests: list[RefUpdateRequest] = []

    def set_ref(self, repository_id: str, name: str, object_id: str) -> None:
        self.refs.setdefault(repository_id, {})[name] = object_id

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == name]

    def list_refs(self, repository_id: str, filter_prefix: str | None = None) -> list[RefInfo]:
        self.calls.append(("list_refs", repository_id, filter_prefix))
        refs = self.refs.get(repository_id, {})
        return [
            RefInfo(name=name, object_id=object_id)
            for name, object_id in refs.items()
            if filter_prefix is None or name.removeprefix("refs/").startswith(filter_prefix)
        ]

    def update_refs(
        self,
        updates: Sequence[RefUpdateRequest],
        repository_id: str,
    ) -> list[RefUpdateResult]:
        self.calls.append(("update_refs", repository_id))
        self.update_requests.extend(updates)
        if self.empty_update_response:
            return []

        results: list[RefUpdateResult] = []
        for update in updates:
            refs = self.refs.setdefault(repository_id, {})
            current = refs.get(update.name, ZERO_COMMIT_ID)
            status = self.forced_statuses.get(update.name)
            if status is None:
                if current == update.old_object_id:
                    refs[update.name] = update.new_object_id
                    status = RefUpdateStatus.SUCCEEDED
                else:
                    status = RefUpdateStatus.STALE_OLD_OBJECT_ID
            results.append(
                RefUpdateResult(
                    success=status is RefUpdateStatus.SUCCEEDED,
                    update_status=status,
                    repository_id=repository_id,
                    old_object_id=update.old_object_id,
                    new_object_id=update.new_object_id,
                    name=update.name,
                )
            )
        return results

    def get_commits(self, commit_ids: Sequence[str], repository_id: str) -> list[CommitInfo]:
        self.calls.append(("get_commits", repository_id, tuple(commit_ids)))
        if self.commit_response is not None:
            return list(self.commit_response)
        return [
            CommitInfo(commit_id=commit_id, committer_timestamp=self.commit_times[commit_id])
            for commit_id in commit_ids
            if commit_id in self.commit_times
        ]


class FakeBuildService:
    def __init__(self, repositories: dict[int, str] | None = None) -> None:
        self.repositories = dict(repositories or {})
        self.requested: list[int] = []

    def get_build(self, build_id: int) -> BuildInfo:
        self.requested.append(build_id)
        return BuildInfo(build_id=build_id, repository_id=self.repositories[build_id])


@pytest.fixture
def git_service() -> FakeGitService:
    return FakeGitService()


@pytest.fixture
def build_service() -> FakeBuildService:
    return FakeBuildService()


@pytest.fixture
def report() -> RunReport:
    return RunReport()
