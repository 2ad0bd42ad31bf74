"""Snapshot of the pipeline variable namespace."""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

_ENV_SEPARATORS = re.compile(r"[.\s]")
_LINE_SPLIT = re.compile(r"\r\n|\r|\n")


def environment_name(name: str) -> str:
    """Return the environment-variable form of a pipeline variable name."""

    return _ENV_SEPARATORS.sub("_", name).upper()


class PipelineVariables:
    """Immutable, case-insensitive view over pipeline variables.

    Pipeline agents expose ``release.artifacts.app.buildId`` to processes as
    ``RELEASE_ARTIFACTS_APP_BUILDID``; lookups accept either spelling.
    """

    __slots__ = ("_by_env_name", "_by_name", "_items")

    def __init__(self, values: Mapping[str, str]) -> None:
        self._items: tuple[tuple[str, str], ...] = tuple(values.items())
        self._by_name: dict[str, str] = {}
        self._by_env_name: dict[str, str] = {}
        for name, value in self._items:
            self._by_name.setdefault(name.upper(), value)
            self._by_env_name.setdefault(environment_name(name), value)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> PipelineVariables:
        return cls(dict(os.environ if environ is None else environ))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> PipelineVariables:
        return cls(mapping)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"PipelineVariables({len(self._items)} variables)"

    def get(self, name: str) -> str | None:
        """Return the variable's value, or ``None`` when it is unset or blank."""

        value = self._by_name.get(name.upper())
        if value is None:
            value = self._by_env_name.get(environment_name(name))
        if value is None or not value.strip():
            return None
        return value.strip()

    def matching(self, pattern: re.Pattern[str]) -> Iterator[tuple[str, str, re.Match[str]]]:
        """Yield ``(name, value, match)`` for every variable whose name matches."""

        for name, value in self._items:
            match = pattern.match(name)
            if match is not None:
                yield name, value, match

    def names(self) -> Iterator[str]:
        for name, _ in self._items:
            yield name

    def get_input(self, name: str) -> str | None:
        return self.get(f"INPUT_{name}")

    def get_delimited_input(self, name: str) -> tuple[str, ...]:
        """Split a multi-line input into its non-blank, stripped entries."""

        raw = self.get_input(name)
        if raw is None:
            return ()
        return tuple(entry.strip() for entry in _LINE_SPLIT.split(raw) if entry.strip())
