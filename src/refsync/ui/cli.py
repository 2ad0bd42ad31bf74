from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from refsync.app import sync_release_refs
from refsync.config import configure_logging, get_ref_sync_options
from refsync.config.errors import ConfigurationError
from refsync.domain.variables import PipelineVariables

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from refsync.config.options import RefSyncOptions

log = logging.getLogger(__name__)


def _add_template_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--static-name",
        type=str,
        help="Use this literal name instead of deriving one from the release name",
    )
    parser.add_argument(
        "--search-regex",
        type=str,
        help="Regular expression applied to the release name (default: whitespace)",
    )
    parser.add_argument(
        "--regex-flags",
        type=str,
        help="Flags for --search-regex, e.g. 'gi' (default: g)",
    )
    parser.add_argument(
        "--replace-pattern",
        type=str,
        help="Replacement for every --search-regex match; $1 and $<name> insert groups",
    )
    parser.add_argument(
        "--include",
        dest="include",
        action="append",
        metavar="ARTIFACT",
        help="Only process this artifact (repeatable; default: all Git artifacts)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Point a release tag or branch at its commit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--pipeline-commands",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Emit ##vso logging commands for warnings and errors (default: when TF_BUILD is set)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tag = subparsers.add_parser("tag", help="Create or move the release tag")
    _add_template_arguments(tag)

    branch = subparsers.add_parser("branch", help="Create or move the release branch")
    _add_template_arguments(branch)
    branch.add_argument(
        "--branch-folder",
        type=str,
        help="Folder under refs/heads to create the branch in",
    )

    return parser.parse_args(list(argv))


def _effective_options(args: argparse.Namespace, variables: PipelineVariables) -> RefSyncOptions:
    include = tuple(args.include) if args.include else None
    return get_ref_sync_options(variables).with_overrides(
        static_tag_name=args.static_name,
        search_regex=args.search_regex,
        regex_flags=args.regex_flags,
        replace_pattern=args.replace_pattern,
        branch_folder=getattr(args, "branch_folder", None),
        artifact_include_list=include,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        pipeline_commands=parsed_args.pipeline_commands,
    )

    try:
        variables = PipelineVariables.from_environment()
        options = _effective_options(parsed_args, variables)
        result = sync_release_refs(parsed_args.command, variables=variables, options=options)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during ref sync")
        sys.exit(1)

    if result.failed:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
