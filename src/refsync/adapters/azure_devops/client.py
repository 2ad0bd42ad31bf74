"""HTTP client for the Azure DevOps Git and Build REST APIs."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Final, TypeVar
from urllib.parse import quote

from pydantic import ValidationError

from refsync.adapters.http_resilience import ResilientClient
from refsync.config.azure_devops import AZURE_DEVOPS_API_VERSION
from refsync.config.errors import MissingConfigurationError

from .schema import (
    BuildPayload,
    ErrorResponse,
    GitCommitRefList,
    GitRefList,
    GitRefUpdateResultList,
)
from .translator import (
    dump_update_request,
    parse_build,
    parse_commit,
    parse_ref,
    parse_update_result,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import httpx
    from pydantic import BaseModel

    from refsync.config.azure_devops import AzureDevOpsConfig
    from refsync.config.http_resilience import ResilienceConfig
    from refsync.domain.ports import BuildService, GitRefService
    from refsync.domain.types import (
        BuildInfo,
        CommitInfo,
        RefInfo,
        RefUpdateRequest,
        RefUpdateResult,
    )

log = getLogger(__name__)

CONTINUATION_HEADER: Final[str] = "x-ms-continuationtoken"


class AzureDevOpsAPIError(RuntimeError):
    """Raised when Azure DevOps returns an error or an unexpected payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AzureDevOpsClient:
    """Synchronous facade over the async REST calls.

    Every public method performs its request(s) to completion before
    returning, so callers see strictly sequential remote calls.
    """

    def __init__(
        self,
        *,
        config: AzureDevOpsConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    @property
    def collection_url(self) -> str:
        return self._config.collection_url

    def list_refs(self, repository_id: str, filter_prefix: str | None = None) -> list[RefInfo]:
        return asyncio.run(self._list_refs_async(repository_id, filter_prefix))

    def update_refs(
        self,
        updates: Sequence[RefUpdateRequest],
        repository_id: str,
    ) -> list[RefUpdateResult]:
        return asyncio.run(self._update_refs_async(updates, repository_id))

    def get_commits(self, commit_ids: Sequence[str], repository_id: str) -> list[CommitInfo]:
        return asyncio.run(self._get_commits_async(commit_ids, repository_id))

    def get_build(self, build_id: int) -> BuildInfo:
        if not self._config.project:
            raise MissingConfigurationError(
                f"Looking up build {build_id} requires SYSTEM_TEAMPROJECTID or SYSTEM_TEAMPROJECT"
            )
        return asyncio.run(self._get_build_async(build_id, self._config.project))

    async def _list_refs_async(
        self,
        repository_id: str,
        filter_prefix: str | None,
    ) -> list[RefInfo]:
        params: dict[str, str] = {"api-version": AZURE_DEVOPS_API_VERSION}
        if filter_prefix:
            params["filter"] = filter_prefix

        refs: list[RefInfo] = []
        async with self._client_factory(self._resilience) as client:
            while True:
                response = await client.get(_git_path(repository_id, "refs"), params=params)
                payload = _validate(GitRefList, response)
                refs.extend(parse_ref(ref) for ref in payload.value)
                token = response.headers.get(CONTINUATION_HEADER)
                if not token:
                    break
                params["continuationToken"] = token
        return refs

    async def _update_refs_async(
        self,
        updates: Sequence[RefUpdateRequest],
        repository_id: str,
    ) -> list[RefUpdateResult]:
        body = [dump_update_request(update) for update in updates]
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                _git_path(repository_id, "refs"),
                params={"api-version": AZURE_DEVOPS_API_VERSION},
                json=body,
            )
        payload = _validate(GitRefUpdateResultList, response)
        return [parse_update_result(result) for result in payload.value]

    async def _get_commits_async(
        self,
        commit_ids: Sequence[str],
        repository_id: str,
    ) -> list[CommitInfo]:
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                _git_path(repository_id, "commitsbatch"),
                params={"api-version": AZURE_DEVOPS_API_VERSION},
                json={"ids": list(commit_ids)},
            )
        payload = _validate(GitCommitRefList, response)
        return [parse_commit(commit) for commit in payload.value]

    async def _get_build_async(self, build_id: int, project: str) -> BuildInfo:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(
                f"{quote(project, safe='')}/_apis/build/builds/{build_id}",
                params={"api-version": AZURE_DEVOPS_API_VERSION},
            )
        return parse_build(_validate(BuildPayload, response))


def _git_path(repository_id: str, resource: str) -> str:
    return f"_apis/git/repositories/{quote(repository_id, safe='')}/{resource}"


def _error_detail(response: httpx.Response) -> str | None:
    try:
        return ErrorResponse.model_validate(response.json()).message
    except (ValueError, ValidationError):
        return None


ModelT = TypeVar("ModelT", bound="BaseModel")


def _validate(model: type[ModelT], response: httpx.Response) -> ModelT:
    if response.is_error:
        request = response.request
        message = f"{request.method} {request.url} failed: {response.status_code}"
        detail = _error_detail(response)
        if detail:
            message = f"{message} {detail}"
        log.error("Azure DevOps API error: %s", message)
        raise AzureDevOpsAPIError(message, status_code=response.status_code)

    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise AzureDevOpsAPIError(
            f"Unexpected Azure DevOps response payload for {response.request.url}",
            status_code=response.status_code,
        ) from exc


if TYPE_CHECKING:

    def _port_check(client: AzureDevOpsClient) -> tuple[GitRefService, BuildService]:
        return client, client
