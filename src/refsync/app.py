"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from refsync import __version__
from refsync.adapters.azure_devops import AzureDevOpsClient
from refsync.config.azure_devops import get_azure_devops_config
from refsync.config.options import get_ref_sync_options
from refsync.domain.reconcile import ReconcileResult, reconcile_refs
from refsync.domain.ref_names import BranchRefStrategy, RefNameTemplate, TagRefStrategy
from refsync.domain.variables import PipelineVariables

if TYPE_CHECKING:
    from refsync.config.options import RefSyncOptions
    from refsync.domain.ports import BuildService, GitRefService
    from refsync.domain.ref_names import RefNameStrategy

RefKind = Literal["tag", "branch"]

log = getLogger(__name__)


def build_strategy(kind: RefKind, options: RefSyncOptions) -> RefNameStrategy:
    if kind == "tag":
        return TagRefStrategy()
    if kind == "branch":
        return BranchRefStrategy(folder=options.branch_folder)
    raise ValueError(f"Unsupported ref kind: {kind}")


def sync_release_refs(
    kind: RefKind,
    *,
    variables: PipelineVariables | None = None,
    options: RefSyncOptions | None = None,
    git_service: GitRefService | None = None,
    build_service: BuildService | None = None,
    collection_url: str | None = None,
) -> ReconcileResult:
    """Create or move the release's tag or branch using the configured adapters.

    Services default to an Azure DevOps client built from the agent's
    environment; pass fakes to run against something else.
    """

    log.info("refsync version %s", __version__)
    effective_variables = (
        variables if variables is not None else PipelineVariables.from_environment()
    )
    effective_options = (
        options if options is not None else get_ref_sync_options(effective_variables)
    )

    if git_service is None or build_service is None:
        config = get_azure_devops_config()
        client = AzureDevOpsClient(config=config)
        git_service = git_service or client
        build_service = build_service or client
        collection_url = collection_url or config.collection_url

    strategy = build_strategy(kind, effective_options)
    log.info(
        "Starting %s sync: include=%s, branch_folder=%s",
        strategy.kind,
        list(effective_options.artifact_include_list) or "all",
        effective_options.branch_folder,
    )

    result = reconcile_refs(
        strategy=strategy,
        variables=effective_variables,
        git_service=git_service,
        build_service=build_service,
        template=RefNameTemplate.from_options(effective_options),
        include=effective_options.artifact_include_list,
        collection_url=collection_url or "",
    )

    log.info(
        "Finished %s sync: ref=%s, artifacts=%s, status=%s",
        strategy.kind,
        result.ref_name,
        len(result.artifacts),
        result.report.status.name,
    )
    return result
