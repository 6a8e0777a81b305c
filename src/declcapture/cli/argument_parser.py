"""CLI argument parser for declcapture commands.

Supported commands:
- compile: Compile a declaration file into capture entries
- validate: Report every structural problem in a declaration file
- hooks: List the hook handlers a declaration file installs

Usage:
    from declcapture.cli.argument_parser import parse_args

    args = parse_args(["compile", "templates.yaml", "--format", "json"])
    print(f"Command: {args.command}")
"""

import argparse
from typing import List, Optional

from ..types.enums import EntryType, HookPhase, OutputFormat

OUTPUT_FORMATS = [fmt.value for fmt in OutputFormat]
ENTRY_TYPES = EntryType.get_all_types()
HOOK_PHASES = HookPhase.get_all_phases()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared by every command."""
    parser.add_argument(
        "file",
        help="Declaration file (.json, .yaml or .yml)"
    )

    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="table",
        help="Output format (default: table)"
    )


def _create_compile_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "compile",
        help="Compile declarations into capture entries",
        description="Compile a declaration file into the flat, ordered list of "
                    "capture entries and the hook registrations it requests."
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--default-type",
        choices=ENTRY_TYPES,
        default=None,
        help="Entry type for leaves that declare none "
             "(default: $DECLCAPTURE_DEFAULT_TYPE or entry)"
    )
    return parser


def _create_validate_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "validate",
        help="Validate declarations",
        description="Check every declaration and report all problems instead "
                    "of stopping at the first one."
    )
    _add_common_arguments(parser)
    return parser


def _create_hooks_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "hooks",
        help="List hook handlers installed by declarations",
        description="Compile a declaration file, install its hooks into a fresh "
                    "registry and list the handlers matching a key pattern."
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--pattern",
        default="",
        help="Regular expression searched in each handler's entry key (default: all)"
    )
    parser.add_argument(
        "--phase",
        action="append",
        choices=HOOK_PHASES,
        help="Only list handlers of this phase (repeatable, default: all phases)"
    )
    return parser


def create_parser() -> argparse.ArgumentParser:
    """Create the top-level parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="declcapture",
        description="Compile declarative capture template trees into capture entries."
    )
    parser.add_argument(
        "-v", "--version",
        action="store_true",
        help="Show version information and exit"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    _create_compile_parser(subparsers)
    _create_validate_parser(subparsers)
    _create_hooks_parser(subparsers)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return create_parser().parse_args(argv)
