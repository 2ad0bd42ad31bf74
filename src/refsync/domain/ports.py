"""Ports for the remote services the reconciliation engine talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .types import BuildInfo, CommitInfo, RefInfo, RefUpdateRequest, RefUpdateResult


@runtime_checkable
class GitRefService(Protocol):
    """Version-control hosting operations used to inspect and move refs."""

    def list_refs(self, repository_id: str, filter_prefix: str | None = None) -> list[RefInfo]:
        """Return refs whose name (without ``refs/``) starts with ``filter_prefix``."""
        ...

    def update_refs(
        self,
        updates: Sequence[RefUpdateRequest],
        repository_id: str,
    ) -> list[RefUpdateResult]:
        """Apply compare-and-swap updates; each only lands if ``old_object_id`` still matches."""
        ...

    def get_commits(self, commit_ids: Sequence[str], repository_id: str) -> list[CommitInfo]:
        ...


@runtime_checkable
class BuildService(Protocol):
    """Build-orchestration lookups."""

    def get_build(self, build_id: int) -> BuildInfo:
        ...


__all__ = ["BuildService", "GitRefService"]
