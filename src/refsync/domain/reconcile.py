"""Run-level orchestration of ref reconciliation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .collector import ArtifactCollector
from .duplicates import DuplicateResolver
from .ref_names import RefNameTemplate, resolve_ref_name
from .report import DiagnosticKind, RunReport
from .synchronizer import RefSynchronizer, SyncOutcome

if TYPE_CHECKING:
    from collections.abc import Collection

    from .ports import BuildService, GitRefService
    from .ref_names import RefNameStrategy
    from .types import ArtifactDescriptor
    from .variables import PipelineVariables

log = getLogger(__name__)


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation run."""

    report: RunReport
    ref_name: str | None = None
    artifacts: list[ArtifactDescriptor] = field(default_factory=list["ArtifactDescriptor"])
    outcomes: dict[str, SyncOutcome] = field(default_factory=dict[str, SyncOutcome])

    @property
    def failed(self) -> bool:
        return self.report.failed

    def summary(self) -> Counter[SyncOutcome]:
        return Counter(self.outcomes.values())


def reconcile_refs(
    *,
    strategy: RefNameStrategy,
    variables: PipelineVariables,
    git_service: GitRefService,
    build_service: BuildService,
    template: RefNameTemplate | None = None,
    include: Collection[str] = (),
    collection_url: str = "",
) -> ReconcileResult:
    """Point the strategy's ref at every collected artifact's commit.

    Artifacts are processed in collection order, one at a time; each remote
    call completes before the next starts. Per-artifact problems land in the
    report. Exceptions raised by the services (transport faults) propagate and
    abort the run.
    """

    report = RunReport()
    result = ReconcileResult(report=report)

    result.ref_name = resolve_ref_name(strategy, variables, template or RefNameTemplate())
    if result.ref_name is None:
        report.record(
            DiagnosticKind.CONFIGURATION_MISSING,
            f"Unable to name the {strategy.kind}: neither a release name nor a build number is set",
        )
        return result

    artifacts = ArtifactCollector(variables, build_service, report).collect(include)
    if not artifacts:
        report.record(DiagnosticKind.NO_ARTIFACTS_FOUND, "No TfsGit artifacts found.")
        return result

    result.artifacts = DuplicateResolver(git_service, report).resolve(artifacts)

    synchronizer = RefSynchronizer(git_service, report, collection_url=collection_url)
    for artifact in result.artifacts:
        result.outcomes[artifact.name] = synchronizer.synchronize(artifact, result.ref_name)

    log.info(
        "Reconciled %s for %s artifact(s): %s",
        result.ref_name,
        len(result.artifacts),
        ", ".join(f"{outcome}={count}" for outcome, count in sorted(result.summary().items())),
    )
    return result
