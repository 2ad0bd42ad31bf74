"""Run-level outcome tracking.

Per-artifact problems are recorded here instead of being raised, so one bad
artifact never stops the rest of the run. The status only ever gets worse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from logging import getLogger

log = getLogger(__name__)


class RunStatus(IntEnum):
    """Aggregate run outcome, ordered from best to worst."""

    SUCCEEDED = 0
    SUCCEEDED_WITH_ISSUES = 1
    FAILED = 2


class DiagnosticKind(StrEnum):
    CONFIGURATION_MISSING = "configuration_missing"
    AMBIGUOUS_CONFLICT = "ambiguous_conflict"
    PERMISSION_DENIED = "permission_denied"
    UPDATE_REJECTED = "update_rejected"
    NO_ARTIFACTS_FOUND = "no_artifacts_found"
    EMPTY_UPDATE_RESPONSE = "empty_update_response"

    @property
    def is_fatal(self) -> bool:
        return self not in _NON_FATAL_KINDS


_NON_FATAL_KINDS = frozenset(
    {DiagnosticKind.NO_ARTIFACTS_FOUND, DiagnosticKind.EMPTY_UPDATE_RESPONSE}
)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    artifact: str | None = None


@dataclass(slots=True)
class RunReport:
    status: RunStatus = RunStatus.SUCCEEDED
    diagnostics: list[Diagnostic] = field(default_factory=list[Diagnostic])

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED

    def record(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        artifact: str | None = None,
    ) -> Diagnostic:
        """Log and keep a diagnostic, worsening the run status to match its kind."""

        diagnostic = Diagnostic(kind=kind, message=message, artifact=artifact)
        self.diagnostics.append(diagnostic)
        if kind.is_fatal:
            log.error(message)
            self._worsen(RunStatus.FAILED)
        else:
            log.warning(message)
            self._worsen(RunStatus.SUCCEEDED_WITH_ISSUES)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.kind is kind]

    def _worsen(self, status: RunStatus) -> None:
        self.status = max(self.status, status)
