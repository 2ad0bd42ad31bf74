"""Application configuration helpers."""

from __future__ import annotations

from .azure_devops import (
    AZURE_DEVOPS_API_VERSION,
    AzureDevOpsConfig,
    build_auth,
    get_azure_devops_config,
    normalize_collection_url,
)
from .env import first_env_var, require_env_vars
from .errors import ConfigurationError, InvalidOptionError, MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy
from .logging import PipelineCommandFormatter, configure_logging, running_in_pipeline
from .options import RefSyncOptions, get_ref_sync_options

__all__ = [
    "AZURE_DEVOPS_API_VERSION",
    "AzureDevOpsConfig",
    "ConfigurationError",
    "InvalidOptionError",
    "MissingConfigurationError",
    "PipelineCommandFormatter",
    "RefSyncOptions",
    "ResilienceConfig",
    "RetryPolicy",
    "build_auth",
    "configure_logging",
    "first_env_var",
    "get_azure_devops_config",
    "get_ref_sync_options",
    "normalize_collection_url",
    "require_env_vars",
    "running_in_pipeline",
]
