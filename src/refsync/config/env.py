"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def first_env_var(
    names: Sequence[str],
    *,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Return the first non-blank value among ``names``, or ``None``."""

    source = os.environ if environ is None else environ
    for name in names:
        value = source.get(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def require_env_vars(
    names: Sequence[Sequence[str]],
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Resolve each group of alternative names, raising if any group is missing/blank.

    The result is keyed by the first (canonical) name of each group.
    """

    missing: list[str] = []
    values: dict[str, str] = {}
    for alternatives in names:
        value = first_env_var(alternatives, environ=environ)
        if value is None:
            missing.append(" or ".join(alternatives))
            continue
        values[alternatives[0]] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values
