"""validate command: report every problem in a declaration file."""

from argparse import Namespace

from ...api.operations import load_declarations, validate_declarations
from ...exceptions import DeclCaptureError
from ...utils.formatters import create_formatter
from .compile_templates import format_error_output


def execute_validate(args: Namespace) -> int:
    """Run the validate command.

    Returns:
        0 when every declaration is valid, 1 otherwise
    """
    formatter = create_formatter(args.format)
    try:
        forest = load_declarations(args.file)
    except DeclCaptureError as e:
        formatter.write(formatter.format_command_result(**format_error_output(e)))
        return 1

    result = validate_declarations(forest)
    formatter.write(formatter.format_validation_result(result.to_dict()))
    return 0 if result.is_valid else 1
