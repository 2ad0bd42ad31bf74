from __future__ import annotations

from datetime import UTC, datetime
from itertools import permutations
from typing import TYPE_CHECKING

import pytest

from refsync.domain.duplicates import DuplicateResolver
from refsync.domain.report import DiagnosticKind, RunStatus
from refsync.domain.types import ArtifactDescriptor, CommitInfo

if TYPE_CHECKING:
    from refsync.domain.report import RunReport
    from tests.conftest import FakeGitService

C1 = "1" * 40
C2 = "2" * 40
C3 = "3" * 40


def _at(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def _artifact(name: str, commit: str, repository: str = "repo") -> ArtifactDescriptor:
    return ArtifactDescriptor(name=name, commit_id=commit, repository_id=repository)


@pytest.mark.parametrize("reverse", [False, True])
def test_later_commit_wins_regardless_of_input_order(
    git_service: FakeGitService,
    report: RunReport,
    reverse: bool,
) -> None:
    git_service.commit_times = {C1: _at(100), C2: _at(200)}
    artifacts = [_artifact("one", C1), _artifact("two", C2)]
    if reverse:
        artifacts.reverse()

    resolved = DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in resolved] == [C2, C2]
    assert len(resolved) == 2
    assert report.status is RunStatus.SUCCEEDED


def test_earlier_queried_commit_wins_when_it_is_newer(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    git_service.commit_times = {C1: _at(100), C2: _at(50)}
    artifacts = [_artifact("one", C1), _artifact("two", C2)]

    DuplicateResolver(git_service, report).resolve(artifacts)

    assert git_service.calls_named("get_commits") == [("get_commits", "repo", (C1, C2))]
    assert [a.commit_id for a in artifacts] == [C1, C1]


def test_repository_ids_compare_case_insensitively(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    git_service.commit_times = {C1: _at(300), C2: _at(200)}
    artifacts = [_artifact("one", C1, "Repo"), _artifact("two", C2, "REPO")]

    DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in artifacts] == [C1, C1]


def test_tie_goes_to_first_record_in_response_order(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    # Equal timestamps are broken by response order, which the service is
    # trusted to keep in request order.
    git_service.commit_response = [
        CommitInfo(commit_id=C2, committer_timestamp=_at(100)),
        CommitInfo(commit_id=C1, committer_timestamp=_at(100)),
    ]
    artifacts = [_artifact("one", C1), _artifact("two", C2)]

    DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in artifacts] == [C2, C2]


def test_unexpected_commit_count_fails_run_and_leaves_list_unresolved(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    git_service.commit_times = {C1: _at(100)}
    artifacts = [_artifact("one", C1), _artifact("two", C2)]

    resolved = DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in resolved] == [C1, C2]
    assert report.status is RunStatus.FAILED
    assert report.of_kind(DiagnosticKind.AMBIGUOUS_CONFLICT)


def test_distinct_repositories_and_equal_commits_need_no_query(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    artifacts = [
        _artifact("one", C1, "repo-a"),
        _artifact("two", C2, "repo-b"),
        _artifact("three", C1, "repo-a"),
    ]

    resolved = DuplicateResolver(git_service, report).resolve(artifacts)

    assert resolved is artifacts
    assert [a.name for a in resolved] == ["one", "two", "three"]
    assert git_service.calls_named("get_commits") == []


@pytest.mark.parametrize("times", list(permutations((100, 200, 300))))
def test_three_way_conflict_collapses_to_latest(
    git_service: FakeGitService,
    report: RunReport,
    times: tuple[int, int, int],
) -> None:
    commits = (C1, C2, C3)
    git_service.commit_times = {
        commit: _at(seconds) for commit, seconds in zip(commits, times, strict=True)
    }
    newest = commits[times.index(300)]
    artifacts = [_artifact("one", C1), _artifact("two", C2), _artifact("three", C3)]

    resolved = DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in resolved] == [newest, newest, newest]
    assert [a.name for a in resolved] == ["one", "two", "three"]
    assert report.status is RunStatus.SUCCEEDED


def test_group_converges_when_another_repository_sorts_between(
    git_service: FakeGitService,
    report: RunReport,
) -> None:
    git_service.commit_times = {C1: _at(100), C2: _at(200), C3: _at(300)}
    artifacts = [
        _artifact("one", C1, "repo-b"),
        _artifact("other", C1, "repo-a"),
        _artifact("two", C2, "repo-b"),
        _artifact("three", C3, "repo-b"),
    ]

    DuplicateResolver(git_service, report).resolve(artifacts)

    assert [a.commit_id for a in artifacts] == [C3, C1, C3, C3]
