"""Public API of declcapture.

This module exposes the operations for compiling declarations, installing
and removing their hooks, validating forests and loading declaration files.
"""

from .operations import (
    compile_templates,
    declare_templates,
    load_declarations,
    remove_hooks,
    resolve_reference,
    validate_declarations,
)

__all__ = [
    "compile_templates",
    "declare_templates",
    "validate_declarations",
    "remove_hooks",
    "load_declarations",
    "resolve_reference",
]
