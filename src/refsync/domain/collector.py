"""Collect Git-backed artifacts from pipeline variables."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from refsync.config.errors import MissingConfigurationError

from .report import DiagnosticKind
from .types import ArtifactDescriptor, InvalidCommitIdError, is_commit_id

if TYPE_CHECKING:
    from collections.abc import Collection

    from .ports import BuildService
    from .report import RunReport
    from .variables import PipelineVariables

log = getLogger(__name__)

GIT_PROVIDERS: Final[frozenset[str]] = frozenset({"TfsGit", "Git"})

ARTIFACT_PROVIDER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^RELEASE[._]ARTIFACTS[._](?P<name>.+)[._]REPOSITORY[._]PROVIDER$",
    re.IGNORECASE,
)


class ArtifactCollector:
    """Gathers (name, commit, repository) triples for the current release.

    Repository ids are resolved from the artifact's own variables first (two
    generations of variable naming), then from the build that produced it.
    """

    def __init__(
        self,
        variables: PipelineVariables,
        build_service: BuildService,
        report: RunReport,
    ) -> None:
        self._variables = variables
        self._build_service = build_service
        self._report = report

    def collect(self, include: Collection[str] = ()) -> list[ArtifactDescriptor]:
        artifacts = self._release_artifacts()
        if not artifacts:
            fallback = self._build_artifact()
            if fallback is not None:
                artifacts.append(fallback)
        return filter_included_artifacts(artifacts, include)

    def _release_artifacts(self) -> list[ArtifactDescriptor]:
        artifacts: list[ArtifactDescriptor] = []
        for variable, provider, match in self._variables.matching(ARTIFACT_PROVIDER_PATTERN):
            name = match.group("name")
            if provider.strip() not in GIT_PROVIDERS:
                log.debug("Matching variable %s, but artifact type: %s", variable, provider)
                continue

            log.debug("Getting repository id for artifact: %s", name)
            try:
                artifact = ArtifactDescriptor(
                    name=name,
                    commit_id=self._commit_id(name),
                    repository_id=self._repository_id(name),
                )
            except MissingConfigurationError as exc:
                self._report.record(DiagnosticKind.CONFIGURATION_MISSING, str(exc), artifact=name)
                continue
            artifacts.append(artifact)
        return artifacts

    def _build_artifact(self) -> ArtifactDescriptor | None:
        provider = self._variables.get("build.repository.provider")
        if provider not in GIT_PROVIDERS:
            log.debug("Build repository provider %s is not a Git provider", provider)
            return None

        name = self._variables.get("build.repository.name") or "build"
        commit_id = self._variables.get("build.sourceVersion")
        repository_id = self._variables.get("build.repository.id")
        if commit_id is None or repository_id is None:
            self._report.record(
                DiagnosticKind.CONFIGURATION_MISSING,
                "Build repository variables are incomplete: "
                f"build.sourceVersion={commit_id}, build.repository.id={repository_id}",
                artifact=name,
            )
            return None
        try:
            return ArtifactDescriptor(name=name, commit_id=commit_id, repository_id=repository_id)
        except InvalidCommitIdError as exc:
            self._report.record(DiagnosticKind.CONFIGURATION_MISSING, str(exc), artifact=name)
            return None

    def _commit_id(self, name: str) -> str:
        variable = f"RELEASE.ARTIFACTS.{name}.SOURCEVERSION"
        commit_id = self._variables.get(variable)
        if commit_id is None:
            raise MissingConfigurationError(f"Unable to get commit id from variable: {variable}")
        if not is_commit_id(commit_id):
            raise MissingConfigurationError(
                f"Invalid commit id {commit_id!r} in variable: {variable}"
            )
        return commit_id

    def _repository_id(self, name: str) -> str:
        repository_id = self._variables.get(f"RELEASE.ARTIFACTS.{name}.REPOSITORY_ID")
        if repository_id is not None:
            log.debug("Got repository id from variable: %s", repository_id)
            return repository_id

        repository_id = self._variables.get(f"release.artifacts.{name}.repository.id")
        if repository_id is not None:
            log.debug("Got repository id from YAML variable: %s", repository_id)
            return repository_id

        return self._repository_id_from_build(name)

    def _repository_id_from_build(self, name: str) -> str:
        variable = ""
        for variable in (
            f"RELEASE.ARTIFACTS.{name}.BUILDID",
            f"release.artifacts.{name}.buildId",
        ):
            raw_build_id = self._variables.get(variable)
            if raw_build_id is None:
                continue
            try:
                build_id = int(raw_build_id)
            except ValueError as exc:
                raise MissingConfigurationError(
                    f"Invalid build id {raw_build_id!r} in variable: {variable}"
                ) from exc
            build = self._build_service.get_build(build_id)
            log.debug("Got repository id from build %s: %s", build_id, build.repository_id)
            return build.repository_id

        raise MissingConfigurationError(f"Unable to get build id from variable: {variable}")


def filter_included_artifacts(
    artifacts: list[ArtifactDescriptor],
    include: Collection[str],
) -> list[ArtifactDescriptor]:
    """Keep only artifacts named in ``include``; an empty allow-list keeps everything.

    Names compare case-insensitively because agents upper-case variable names.
    """

    if not include:
        log.debug("Including all artifacts")
        return artifacts

    allowed = {name.casefold() for name in include}
    log.debug("Before filter count: %s", len(artifacts))
    filtered = [artifact for artifact in artifacts if artifact.name.casefold() in allowed]
    log.debug("After filter count: %s", len(filtered))
    return filtered
