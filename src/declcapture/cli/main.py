"""Main CLI entry point for declcapture.

Parses the command line, configures logging from the environment and
dispatches to the command implementations with unified error handling.

Exit codes:
    0   success
    1   invalid declarations or user error
    2   file not found
    3   permission denied
    4   unexpected error
    130 interrupted
"""

import importlib
import logging
import os
import sys
from typing import Any, Callable, List, NoReturn, Optional

from .. import __version__
from ..utils.logging import LogFormat, LogLevel, configure_logging, log_error
from .argument_parser import create_parser

DEBUG_MODE = os.getenv("DECLCAPTURE_DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("DECLCAPTURE_LOG_LEVEL", "WARNING").upper()

logger = logging.getLogger(__name__)

# command -> (module, function, description)
COMMAND_REGISTRY = {
    "compile": ("commands.compile_templates", "execute_compile", "Compile declarations into capture entries"),
    "validate": ("commands.validate_declarations", "execute_validate", "Validate declarations"),
    "hooks": ("commands.list_hooks", "execute_list_hooks", "List hook handlers installed by declarations"),
}


def _configure_logging() -> None:
    try:
        level = LogLevel.from_string(LOG_LEVEL)
    except ValueError:
        level = LogLevel.WARNING
    logging.basicConfig(
        level=level.logging_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s" if DEBUG_MODE else "%(message)s"
    )
    configure_logging(log_level=level, log_format=LogFormat.DEBUG if DEBUG_MODE else LogFormat.HUMAN)


def _format_error_message(error: BaseException) -> str:
    """Format an unexpected error for stderr."""
    if isinstance(error, FileNotFoundError):
        return f"Error: file not found: {error.filename or error}"
    elif isinstance(error, PermissionError):
        return f"Error: permission denied: {error}"
    elif isinstance(error, KeyboardInterrupt):
        return "Interrupted"
    elif DEBUG_MODE:
        return f"Error: {type(error).__name__}: {error}"
    return "Internal error, set DECLCAPTURE_DEBUG=true for details"


def _load_command(command_name: str) -> Callable[[Any], int]:
    module_path, func_name, _ = COMMAND_REGISTRY[command_name]
    module = importlib.import_module(f"{__package__}.{module_path}")
    return getattr(module, func_name)


def _execute_command_safely(command_name: str, command_func: Callable[[Any], int], args: Any) -> int:
    """Run a command, mapping uncaught exceptions to exit codes."""
    try:
        return command_func(args)
    except KeyboardInterrupt as e:
        logger.debug("%s interrupted by user", command_name)
        print(f"\n{_format_error_message(e)}", file=sys.stderr)
        return 130
    except FileNotFoundError as e:
        logger.error("%s: file not found: %s", command_name, e)
        print(_format_error_message(e), file=sys.stderr)
        return 2
    except PermissionError as e:
        logger.error("%s: permission denied: %s", command_name, e)
        print(_format_error_message(e), file=sys.stderr)
        return 3
    except Exception as e:
        log_error(e, f"{command_name} failed unexpectedly", command=command_name)
        print(_format_error_message(e), file=sys.stderr)
        return 4


def run(argv: Optional[List[str]] = None) -> int:
    """Parse argv and run the selected command.

    Returns:
        Process exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"declcapture {__version__}")
        return 0
    if not args.command:
        parser.print_help()
        return 0

    return _execute_command_safely(args.command, _load_command(args.command), args)


def main() -> NoReturn:
    """Console script entry point."""
    _configure_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
