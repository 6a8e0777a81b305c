"""compile command: compile a declaration file into capture entries.

Loads the declarations, compiles them with the process-wide configuration
(optionally overriding the default entry type) and prints the flat entry
list together with the hook registrations.
"""

import logging
from argparse import Namespace
from typing import Any, Dict

from ...api.operations import compile_templates, load_declarations
from ...config import CompilerConfig
from ...exceptions import DeclCaptureError
from ...utils.formatters import create_formatter
from ...utils.logging import log_operation

logger = logging.getLogger(__name__)


def format_error_output(error: DeclCaptureError) -> Dict[str, Any]:
    """Result envelope for a failed command."""
    return {
        "success": False,
        "message": error.message,
        "data": {"error_code": error.error_code, "suggested_fix": error.suggested_fix},
        "errors": [error.message],
    }


def execute_compile(args: Namespace) -> int:
    """Run the compile command.

    Returns:
        0 on success, 1 when the declarations are invalid
    """
    formatter = create_formatter(args.format)
    try:
        forest = load_declarations(args.file)
        overrides = {"default_type": args.default_type} if args.default_type else {}
        config = CompilerConfig.from_env(**overrides)

        with log_operation("compile", file=str(args.file)):
            result = compile_templates(forest, config=config)

    except DeclCaptureError as e:
        logger.info("Compilation of %s failed: %s", args.file, e.message)
        formatter.write(formatter.format_command_result(**format_error_output(e)))
        return 1

    formatter.write(formatter.format_entry_list(
        [entry.to_dict() for entry in result.entries],
        [hook.to_dict() for hook in result.hooks],
    ))
    return 0
