"""Derive fully-qualified ref names from release identifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

from refsync.config.errors import InvalidOptionError
from refsync.config.options import (
    DEFAULT_REGEX_FLAGS,
    DEFAULT_REPLACE_PATTERN,
    DEFAULT_SEARCH_REGEX,
    DEFAULT_STATIC_TAG_NAME,
)

if TYPE_CHECKING:
    from refsync.config.options import RefSyncOptions

    from .variables import PipelineVariables

log = getLogger(__name__)

TAG_NAMESPACE: Final[str] = "refs/tags/"
BRANCH_NAMESPACE: Final[str] = "refs/heads"

RELEASE_NAME_VARIABLE: Final[str] = "RELEASE_RELEASENAME"
BUILD_NUMBER_VARIABLE: Final[str] = "build.buildNumber"

_FLAG_BITS: Final[dict[str, re.RegexFlag]] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}
_JS_NAMED_GROUP = re.compile(r"(?<!\\)((?:\\\\)*)\(\?<(?=[A-Za-z_])")
_REPLACEMENT_TOKEN = re.compile(
    r"""\$(?:
        (?P<dollar>\$)
        | (?P<whole>&)
        | (?P<before>`)
        | (?P<after>')
        | <(?P<name>[A-Za-z_][A-Za-z0-9_]*)>
        | (?P<index>\d{1,2})
    )""",
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class RefNameTemplate:
    """Search/replace rule turning a release identifier into a ref leaf name.

    Flags and replacement tokens follow the pipeline's template syntax:
    ``g`` replaces every match (otherwise only the first), ``$1`` and
    ``$<name>`` insert groups, ``$&`` the whole match and ``$$`` a dollar.
    """

    static_name: str = DEFAULT_STATIC_TAG_NAME
    search_regex: str = DEFAULT_SEARCH_REGEX
    regex_flags: str = DEFAULT_REGEX_FLAGS
    replace_pattern: str = DEFAULT_REPLACE_PATTERN

    @classmethod
    def from_options(cls, options: RefSyncOptions) -> RefNameTemplate:
        return cls(
            static_name=options.static_tag_name,
            search_regex=options.search_regex,
            regex_flags=options.regex_flags,
            replace_pattern=options.replace_pattern,
        )

    def compile(self) -> tuple[re.Pattern[str], bool]:
        """Return the compiled search pattern and whether to replace every match."""

        bits = re.RegexFlag(0)
        replace_all = False
        for flag in self.regex_flags:
            if flag == "g":
                replace_all = True
            elif flag == "u":
                continue
            elif flag in _FLAG_BITS:
                bits |= _FLAG_BITS[flag]
            else:
                raise InvalidOptionError(
                    "regexFlags", self.regex_flags, f"unsupported flag {flag!r}"
                )

        try:
            pattern = re.compile(_JS_NAMED_GROUP.sub(r"\1(?P<", self.search_regex), bits)
        except re.error as exc:
            raise InvalidOptionError("searchRegex", self.search_regex, str(exc)) from exc
        return pattern, replace_all

    def leaf_name(self, release_id: str) -> str:
        if self.static_name:
            return self.static_name

        pattern, replace_all = self.compile()
        return pattern.sub(
            lambda match: _expand_replacement(self.replace_pattern, match),
            release_id,
            count=0 if replace_all else 1,
        )


def _expand_replacement(template: str, match: re.Match[str]) -> str:
    def substitute(token: re.Match[str]) -> str:
        if token.group("dollar"):
            return "$"
        if token.group("whole"):
            return match.group(0)
        if token.group("before"):
            return match.string[: match.start()]
        if token.group("after"):
            return match.string[match.end() :]
        name = token.group("name")
        if name is not None:
            if name not in match.re.groupindex:
                return token.group(0)
            return match.group(name) or ""
        digits = token.group("index")
        # "$12" means group 12 only when it exists, otherwise group 1 then "2"
        if len(digits) == 2 and 0 < int(digits) <= match.re.groups:
            return match.group(int(digits)) or ""
        index = int(digits[0])
        if 0 < index <= match.re.groups:
            return (match.group(index) or "") + digits[1:]
        return token.group(0)

    return _REPLACEMENT_TOKEN.sub(substitute, template)


def generate_ref_name(
    release_id: str | None,
    prefix: str,
    template: RefNameTemplate,
) -> str | None:
    """Return ``prefix + leaf`` for ``release_id``, or ``None`` when it is blank."""

    if release_id is None or release_id == "":
        return None

    log.debug(
        "Search regex: %r, replace pattern: %r, flags: %r, static name: %r",
        template.search_regex,
        template.replace_pattern,
        template.regex_flags,
        template.static_name,
    )
    if not prefix.endswith("/"):
        prefix = f"{prefix}/"
    ref_name = f"{prefix}{template.leaf_name(release_id)}"
    log.debug("Ref name: %s", ref_name)
    return ref_name


@runtime_checkable
class RefNameStrategy(Protocol):
    """Supplies the ref namespace for one kind of ref."""

    @property
    def kind(self) -> str: ...

    @property
    def prefix(self) -> str: ...

    def ref_name(self, release_id: str | None, template: RefNameTemplate) -> str | None: ...


@dataclass(frozen=True, slots=True)
class TagRefStrategy:
    @property
    def kind(self) -> str:
        return "tag"

    @property
    def prefix(self) -> str:
        return TAG_NAMESPACE

    def ref_name(self, release_id: str | None, template: RefNameTemplate) -> str | None:
        return generate_ref_name(release_id, self.prefix, template)


@dataclass(frozen=True, slots=True)
class BranchRefStrategy:
    folder: str | None = None

    @property
    def kind(self) -> str:
        return "branch"

    @property
    def prefix(self) -> str:
        prefix = BRANCH_NAMESPACE
        if self.folder:
            folder = self.folder if self.folder.startswith("/") else f"/{self.folder}"
            prefix = f"{prefix}{folder}"
        if not prefix.endswith("/"):
            prefix = f"{prefix}/"
        return prefix

    def ref_name(self, release_id: str | None, template: RefNameTemplate) -> str | None:
        return generate_ref_name(release_id, self.prefix, template)


def resolve_ref_name(
    strategy: RefNameStrategy,
    variables: PipelineVariables,
    template: RefNameTemplate,
) -> str | None:
    """Name the ref after the release, falling back to the build number."""

    for variable in (RELEASE_NAME_VARIABLE, BUILD_NUMBER_VARIABLE):
        ref_name = strategy.ref_name(variables.get(variable), template)
        if ref_name is not None:
            return ref_name
        log.debug("No %s available for %s name", variable, strategy.kind)
    return None
