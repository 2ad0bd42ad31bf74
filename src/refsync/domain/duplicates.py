"""Collapse artifacts that name the same repository with different commits.

Two artifacts can point the same ref at different commits when a release
consumes one repository through several build artifacts. The most recently
committed candidate wins and both descriptors are rewritten to it; the
descriptors themselves stay in the list.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .report import DiagnosticKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .ports import GitRefService
    from .report import RunReport
    from .types import ArtifactDescriptor, CommitInfo

log = getLogger(__name__)


class DuplicateResolver:
    def __init__(self, git_service: GitRefService, report: RunReport) -> None:
        self._git_service = git_service
        self._report = report

    def resolve(self, artifacts: list[ArtifactDescriptor]) -> list[ArtifactDescriptor]:
        """Rewrite conflicting descriptors in place and return ``artifacts``.

        The returned list keeps collection order; sorting is only used to find
        neighbours sharing a repository. Each win is applied to every
        descriptor of the repository seen so far, so a whole group ends on one
        commit. An unresolvable conflict marks the run failed and stops
        resolution, leaving later conflicts untouched.
        """

        if len(artifacts) <= 1:
            return artifacts

        by_repository = sorted(artifacts, key=lambda artifact: artifact.repository_id)
        group: list[ArtifactDescriptor] = []
        for current in by_repository:
            if group and group[-1].repository_id != current.repository_id:
                group = []
            if group and group[-1].commit_id != current.commit_id:
                winner = self._resolve_pair(group[-1], current)
                if winner is None:
                    break
                for artifact in (*group, current):
                    artifact.commit_id = winner
            group.append(current)

        return artifacts

    def _resolve_pair(self, prev: ArtifactDescriptor, current: ArtifactDescriptor) -> str | None:
        candidates = (prev.commit_id, current.commit_id)
        log.debug(
            "Attempting to determine which commit was last. Prev: %s Current: %s "
            "for repository: %s",
            prev.commit_id,
            current.commit_id,
            prev.repository_id,
        )

        commits = self._git_service.get_commits(list(candidates), prev.repository_id)
        winner = _latest_commit_id(commits) if len(commits) == 2 else None
        if winner is None or winner not in candidates:
            self._report.record(
                DiagnosticKind.AMBIGUOUS_CONFLICT,
                "Cannot resolve the most recent of two commits: "
                f"{prev.commit_id} {current.commit_id} (repository {prev.repository_id}, "
                f"{len(commits)} commit records returned)",
                artifact=current.name,
            )
            return None

        log.debug("Winning commit: %s", winner)
        return winner


def _latest_commit_id(commits: Sequence[CommitInfo]) -> str:
    # Ties go to the first record, so the outcome depends on the service
    # returning commits in the order they were requested.
    first, second = commits
    log.debug(
        "Commit info: {Id: %s Date: %s} {Id: %s Date: %s}",
        first.commit_id,
        first.committer_timestamp,
        second.commit_id,
        second.committer_timestamp,
    )
    if first.committer_timestamp < second.committer_timestamp:
        return second.commit_id.lower()
    return first.commit_id.lower()
