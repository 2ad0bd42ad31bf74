"""Shared logging helpers for refsync."""

from __future__ import annotations

import logging
import os
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%H:%M:%S"

_ISSUE_TYPES = {
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def running_in_pipeline() -> bool:
    """Whether the process runs inside an Azure Pipelines agent."""

    return bool(os.getenv("TF_BUILD"))


class PipelineCommandFormatter(logging.Formatter):
    """Prefix warnings and errors with ``##vso[task.logissue]`` commands.

    The agent turns those lines into warning/error annotations on the run
    summary; lower levels are written as plain text.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        issue_type = _ISSUE_TYPES.get(record.levelno)
        if issue_type is None:
            return message
        # logging commands are single-line
        flattened = message.replace("\r", "%0D").replace("\n", "%0A")
        return f"##vso[task.logissue type={issue_type}]{flattened}"


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    pipeline_commands: bool | None = None,
) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points. ``pipeline_commands``
    defaults to on when running inside a pipeline agent.
    """

    use_commands = running_in_pipeline() if pipeline_commands is None else pipeline_commands
    if not use_commands:
        logging.basicConfig(level=level, format=_LOG_FORMAT, datefmt=_DATE_FORMAT, force=force)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(PipelineCommandFormatter("%(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=force)
