"""hooks command: list the hook handlers a declaration file installs.

The declarations are compiled and their hooks installed into a fresh
registry, so the process-wide registry is left untouched.
"""

from argparse import Namespace

from ...api.operations import compile_templates, load_declarations
from ...exceptions import DeclCaptureError
from ...services.hook_registry import ALL_PHASES, HookRegistry, install_hooks
from ...utils.formatters import create_formatter
from .compile_templates import format_error_output


def execute_list_hooks(args: Namespace) -> int:
    """Run the hooks command.

    Returns:
        0 on success, 1 when the declarations are invalid
    """
    formatter = create_formatter(args.format)
    registry = HookRegistry()
    try:
        result = compile_templates(load_declarations(args.file))
        install_hooks(result.hooks, registry)
        handlers = registry.find(args.pattern, args.phase or ALL_PHASES)
    except DeclCaptureError as e:
        formatter.write(formatter.format_command_result(**format_error_output(e)))
        return 1

    formatter.write(formatter.format_hook_list([handler.to_dict() for handler in handlers], len(handlers)))
    return 0
