"""Task inputs controlling ref naming and artifact selection."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from refsync.domain.variables import PipelineVariables

DEFAULT_SEARCH_REGEX: Final[str] = r"\s+"
DEFAULT_REGEX_FLAGS: Final[str] = "g"
DEFAULT_REPLACE_PATTERN: Final[str] = ""
DEFAULT_STATIC_TAG_NAME: Final[str] = ""

STATIC_TAG_NAME_INPUT: Final[str] = "staticTagName"
SEARCH_REGEX_INPUT: Final[str] = "searchRegex"
REGEX_FLAGS_INPUT: Final[str] = "regexFlags"
REPLACE_PATTERN_INPUT: Final[str] = "replacePattern"
BRANCH_FOLDER_INPUT: Final[str] = "branchFolder"
ARTIFACT_INCLUDE_LIST_INPUT: Final[str] = "artifactIncludeList"


@dataclass(frozen=True, slots=True)
class RefSyncOptions:
    static_tag_name: str = DEFAULT_STATIC_TAG_NAME
    search_regex: str = DEFAULT_SEARCH_REGEX
    regex_flags: str = DEFAULT_REGEX_FLAGS
    replace_pattern: str = DEFAULT_REPLACE_PATTERN
    branch_folder: str | None = None
    artifact_include_list: tuple[str, ...] = field(default_factory=tuple)

    def with_overrides(self, **overrides: object) -> RefSyncOptions:
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)  # type: ignore[arg-type]


def get_ref_sync_options(variables: PipelineVariables) -> RefSyncOptions:
    """Read the task inputs, falling back to defaults for unset or blank ones."""

    def _input(name: str, default: str) -> str:
        value = variables.get_input(name)
        return default if value is None else value

    return RefSyncOptions(
        static_tag_name=_input(STATIC_TAG_NAME_INPUT, DEFAULT_STATIC_TAG_NAME),
        search_regex=_input(SEARCH_REGEX_INPUT, DEFAULT_SEARCH_REGEX),
        regex_flags=_input(REGEX_FLAGS_INPUT, DEFAULT_REGEX_FLAGS),
        replace_pattern=_input(REPLACE_PATTERN_INPUT, DEFAULT_REPLACE_PATTERN),
        branch_folder=variables.get_input(BRANCH_FOLDER_INPUT),
        artifact_include_list=variables.get_delimited_input(ARTIFACT_INCLUDE_LIST_INPUT),
    )
