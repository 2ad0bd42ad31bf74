from __future__ import annotations

import logging

import httpx
import pytest

from refsync.config import (
    ConfigurationError,
    InvalidOptionError,
    MissingConfigurationError,
    PipelineCommandFormatter,
    RefSyncOptions,
    first_env_var,
    get_azure_devops_config,
    get_ref_sync_options,
    normalize_collection_url,
    require_env_vars,
)
from refsync.domain.variables import PipelineVariables

PAT = "p" * 52


def test_first_env_var_skips_blank_values() -> None:
    environ = {"PRIMARY": "  ", "SECONDARY": " value "}

    assert first_env_var(("PRIMARY", "SECONDARY"), environ=environ) == "value"
    assert first_env_var(("MISSING",), environ=environ) is None


def test_require_env_vars_keys_by_first_alternative() -> None:
    environ = {"SYSTEM_COLLECTIONURI": "https://dev.azure.com/org/", "TOKEN": "t"}

    values = require_env_vars(
        [("SYSTEM_TEAMFOUNDATIONCOLLECTIONURI", "SYSTEM_COLLECTIONURI"), ("TOKEN",)],
        environ=environ,
    )

    assert values == {
        "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI": "https://dev.azure.com/org/",
        "TOKEN": "t",
    }


def test_require_env_vars_names_every_missing_group() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars([("A", "B"), ("C",)], environ={})

    assert "A or B" in str(exc.value)
    assert "C" in str(exc.value)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://contoso.vsrm.visualstudio.com/", "https://contoso.visualstudio.com/"),
        ("https://dev.azure.com/contoso", "https://dev.azure.com/contoso/"),
    ],
)
def test_normalize_collection_url(raw: str, expected: str) -> None:
    assert normalize_collection_url(raw) == expected


def test_azure_devops_config_uses_basic_auth_for_personal_access_tokens() -> None:
    config = get_azure_devops_config(
        environ={
            "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI": "https://contoso.vsrm.visualstudio.com",
            "SYSTEM_ACCESSTOKEN": PAT,
            "SYSTEM_TEAMPROJECT": "Fabrikam",
        }
    )

    assert config.collection_url == "https://contoso.visualstudio.com/"
    assert config.project == "Fabrikam"
    assert isinstance(config.resilience.auth, httpx.BasicAuth)
    assert config.resilience.default_headers is not None
    assert "Authorization" not in config.resilience.default_headers
    assert config.resilience.base_url == config.collection_url


def test_azure_devops_config_uses_bearer_header_for_job_tokens() -> None:
    config = get_azure_devops_config(
        environ={
            "SYSTEM_COLLECTIONURI": "https://dev.azure.com/contoso/",
            "SYSTEM_ACCESSTOKEN": "short-job-token",
        }
    )

    assert config.resilience.auth is None
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer short-job-token"
    assert config.project is None
    assert config.resilience.retry.total == 0


def test_azure_devops_config_reads_retry_budget() -> None:
    config = get_azure_devops_config(
        environ={
            "SYSTEM_COLLECTIONURI": "https://dev.azure.com/contoso/",
            "SYSTEM_ACCESSTOKEN": "token",
            "REFSYNC_HTTP_RETRIES": "3",
        }
    )

    assert config.resilience.retry.total == 3


def test_azure_devops_config_rejects_bad_retry_budget() -> None:
    with pytest.raises(ConfigurationError, match="REFSYNC_HTTP_RETRIES"):
        get_azure_devops_config(
            environ={
                "SYSTEM_COLLECTIONURI": "https://dev.azure.com/contoso/",
                "SYSTEM_ACCESSTOKEN": "token",
                "REFSYNC_HTTP_RETRIES": "many",
            }
        )


def test_azure_devops_config_requires_token() -> None:
    with pytest.raises(MissingConfigurationError, match="SYSTEM_ACCESSTOKEN"):
        get_azure_devops_config(environ={"SYSTEM_COLLECTIONURI": "https://dev.azure.com/x/"})


def test_options_default_when_inputs_are_unset() -> None:
    options = get_ref_sync_options(PipelineVariables.from_mapping({}))

    assert options == RefSyncOptions()
    assert options.search_regex == r"\s+"
    assert options.regex_flags == "g"


def test_options_read_task_inputs() -> None:
    variables = PipelineVariables.from_mapping(
        {
            "INPUT_STATICTAGNAME": "",
            "INPUT_SEARCHREGEX": "Release-",
            "INPUT_REPLACEPATTERN": "v",
            "INPUT_BRANCHFOLDER": "releases",
            "INPUT_ARTIFACTINCLUDELIST": "App\n\n  Docs  \r\n",
        }
    )

    options = get_ref_sync_options(variables)

    assert options.static_tag_name == ""
    assert options.search_regex == "Release-"
    assert options.replace_pattern == "v"
    assert options.branch_folder == "releases"
    assert options.artifact_include_list == ("App", "Docs")


def test_option_overrides_skip_none() -> None:
    options = RefSyncOptions(search_regex="x").with_overrides(
        search_regex=None, static_tag_name="fixed"
    )

    assert options.search_regex == "x"
    assert options.static_tag_name == "fixed"


def test_invalid_option_error_message() -> None:
    error = InvalidOptionError("regexFlags", "q", "unsupported flag 'q'")

    assert isinstance(error, ConfigurationError)
    assert str(error) == "Invalid value for 'regexFlags': 'q' (unsupported flag 'q')"


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("refsync.test", level, __file__, 1, message, None, None)


def test_pipeline_formatter_annotates_warnings_and_errors() -> None:
    formatter = PipelineCommandFormatter("%(message)s")

    assert formatter.format(_record(logging.WARNING, "careful")) == (
        "##vso[task.logissue type=warning]careful"
    )
    assert formatter.format(_record(logging.ERROR, "line one\nline two")) == (
        "##vso[task.logissue type=error]line one%0Aline two"
    )
    assert formatter.format(_record(logging.INFO, "plain")) == "plain"
