"""Move one ref to an artifact's commit with a compare-and-swap update."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .report import DiagnosticKind
from .types import ZERO_COMMIT_ID, RefUpdateRequest, RefUpdateStatus

if TYPE_CHECKING:
    from .ports import GitRefService
    from .report import RunReport
    from .types import ArtifactDescriptor, RefUpdateResult

log = getLogger(__name__)

PERMISSION_TEMPLATE: Final[str] = "You must grant the build account access to permission: "
SECURITY_ADMIN_PATH: Final[str] = "_admin/_versioncontrol?_a=security&repositoryId="

_PERMISSIONS: Final[dict[RefUpdateStatus, str]] = {
    RefUpdateStatus.CREATE_BRANCH_PERMISSION_REQUIRED: "Create Branch",
    RefUpdateStatus.CREATE_TAG_PERMISSION_REQUIRED: "Create Tag",
}

_REFS_PREFIX = "refs/"


class SyncOutcome(StrEnum):
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


def lookup_filter(ref_name: str) -> str:
    """The ref listing filter is the name without its ``refs/`` prefix."""

    return ref_name.removeprefix(_REFS_PREFIX)


class RefSynchronizer:
    """Per-artifact state machine: lookup, idempotence check, CAS update, interpretation."""

    def __init__(
        self,
        git_service: GitRefService,
        report: RunReport,
        *,
        collection_url: str = "",
    ) -> None:
        self._git_service = git_service
        self._report = report
        self._collection_url = collection_url

    def synchronize(self, artifact: ArtifactDescriptor, ref_name: str) -> SyncOutcome:
        log.debug(
            "Processing artifact: %r for ref: %s new commit: %s",
            artifact.name,
            ref_name,
            artifact.commit_id,
        )

        artifact.old_commit_id = self.current_tip(artifact.repository_id, ref_name)
        log.debug("Old commit: %s", artifact.old_commit_id)

        if artifact.old_commit_id == artifact.commit_id:
            log.info("Ref %s already points at %s", ref_name, artifact.commit_id)
            return SyncOutcome.UP_TO_DATE

        request = RefUpdateRequest(
            name=ref_name,
            old_object_id=artifact.old_commit_id,
            new_object_id=artifact.commit_id,
            repository_id=artifact.repository_id,
        )
        log.debug("Updating ref: %s", ref_name)
        results = self._git_service.update_refs([request], artifact.repository_id)
        if not results:
            self._report.record(
                DiagnosticKind.EMPTY_UPDATE_RESPONSE,
                f"No update result returned when updating {ref_name}",
                artifact=artifact.name,
            )
            return SyncOutcome.SKIPPED

        result = results[0]
        if result.success:
            log.info("Ref %s updated to %s", ref_name, artifact.commit_id)
            return SyncOutcome.UPDATED

        if self.current_tip(artifact.repository_id, ref_name) == artifact.commit_id:
            log.info("Ref %s was moved to %s concurrently", ref_name, artifact.commit_id)
            return SyncOutcome.UP_TO_DATE

        self._report_failure(artifact, ref_name, result)
        return SyncOutcome.FAILED

    def current_tip(self, repository_id: str, ref_name: str) -> str:
        """Return the ref's object id, or the zero sentinel when it does not exist."""

        log.debug("Getting refs for: %r with repository id: %r", ref_name, repository_id)
        refs = self._git_service.list_refs(repository_id, lookup_filter(ref_name))
        log.debug("Got refs. Length = %s", len(refs))
        for ref in refs:
            if ref.name == ref_name:
                return ref.object_id.lower()
        return ZERO_COMMIT_ID

    def _report_failure(
        self,
        artifact: ArtifactDescriptor,
        ref_name: str,
        result: RefUpdateResult,
    ) -> None:
        permission = _PERMISSIONS.get(result.update_status)
        if permission is not None:
            self._report.record(
                DiagnosticKind.PERMISSION_DENIED,
                f"{PERMISSION_TEMPLATE}{permission}",
                artifact=artifact.name,
            )
        kind = (
            DiagnosticKind.PERMISSION_DENIED
            if permission is not None
            else DiagnosticKind.UPDATE_REJECTED
        )
        log.error(
            "If you need to change permissions see: %s%s%s",
            self._collection_url,
            SECURITY_ADMIN_PATH,
            artifact.repository_id,
        )
        self._report.record(
            kind,
            f"Unable to create ref: {ref_name} UpdateStatus: {result.update_status} "
            f"RepositoryId: {result.repository_id} Old Commit: {result.old_object_id} "
            f"New Commit: {result.new_object_id}",
            artifact=artifact.name,
        )
