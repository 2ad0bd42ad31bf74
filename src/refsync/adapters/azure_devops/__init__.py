"""Public interface for the Azure DevOps adapter."""

from __future__ import annotations

from .client import AzureDevOpsAPIError, AzureDevOpsClient
from .schema import (
    BuildPayload,
    GitCommitRefPayload,
    GitRefPayload,
    GitRefUpdateResultPayload,
)
from .translator import dump_update_request, parse_commit, parse_ref, parse_update_result

__all__ = [
    "AzureDevOpsAPIError",
    "AzureDevOpsClient",
    "BuildPayload",
    "GitCommitRefPayload",
    "GitRefPayload",
    "GitRefUpdateResultPayload",
    "dump_update_request",
    "parse_commit",
    "parse_ref",
    "parse_update_result",
]
