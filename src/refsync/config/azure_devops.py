"""Azure DevOps connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

import httpx

from .env import first_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

AZURE_DEVOPS_API_VERSION: Final[str] = "7.1"
AZURE_DEVOPS_TIMEOUT_SECONDS: Final[float] = 30.0
PERSONAL_ACCESS_TOKEN_LENGTH: Final[int] = 52

COLLECTION_URL_VARS: Final[tuple[str, ...]] = (
    "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI",
    "SYSTEM_COLLECTIONURI",
)
ACCESS_TOKEN_VARS: Final[tuple[str, ...]] = ("SYSTEM_ACCESSTOKEN",)
PROJECT_VARS: Final[tuple[str, ...]] = ("SYSTEM_TEAMPROJECTID", "SYSTEM_TEAMPROJECT")
RETRIES_VAR: Final[str] = "REFSYNC_HTTP_RETRIES"

_RELEASE_HOST_SUFFIX = ".vsrm.visualstudio.com"
_COLLECTION_HOST_SUFFIX = ".visualstudio.com"


@dataclass(frozen=True, slots=True)
class AzureDevOpsConfig:
    """Holds Azure DevOps connection values."""

    collection_url: str
    access_token: str
    project: str | None
    resilience: ResilienceConfig


def normalize_collection_url(url: str) -> str:
    """Point release-management hosts at the collection and ensure a trailing slash."""

    normalized = url.strip().replace(_RELEASE_HOST_SUFFIX, _COLLECTION_HOST_SUFFIX)
    if not normalized.endswith("/"):
        normalized = f"{normalized}/"
    return normalized


def build_auth(token: str) -> tuple[httpx.Auth | None, dict[str, str]]:
    """Return (auth, headers) for a pipeline token.

    Personal access tokens use basic auth with an empty user name; job access
    tokens are OAuth bearer tokens.
    """

    if len(token) == PERSONAL_ACCESS_TOKEN_LENGTH:
        return httpx.BasicAuth("", token), {}
    return None, {"Authorization": f"Bearer {token}"}


def _retry_total(environ: Mapping[str, str] | None) -> int:
    raw = first_env_var((RETRIES_VAR,), environ=environ)
    if raw is None:
        return 0
    try:
        total = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{RETRIES_VAR} must be an integer, got {raw!r}") from exc
    if total < 0:
        raise ConfigurationError(f"{RETRIES_VAR} must be non-negative, got {total}")
    return total


def get_azure_devops_config(
    *,
    environ: Mapping[str, str] | None = None,
    resilience: ResilienceConfig | None = None,
) -> AzureDevOpsConfig:
    source = os.environ if environ is None else environ
    values = require_env_vars((COLLECTION_URL_VARS, ACCESS_TOKEN_VARS), environ=source)
    collection_url = normalize_collection_url(values[COLLECTION_URL_VARS[0]])
    token = values[ACCESS_TOKEN_VARS[0]]
    auth, headers = build_auth(token)
    headers["Accept"] = "application/json"

    return AzureDevOpsConfig(
        collection_url=collection_url,
        access_token=token,
        project=first_env_var(PROJECT_VARS, environ=source),
        resilience=resilience
        or ResilienceConfig(
            name="azure-devops",
            base_url=collection_url,
            timeout_seconds=AZURE_DEVOPS_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=_retry_total(source)),
            default_headers=headers,
            auth=auth,
        ),
    )
