"""Services package for declcapture.

This package contains the declaration validator, the template compiler and
the hook registry.
"""

from .compiler import TemplateCompiler, flatten_entries
from .hook_registry import HookHandler, HookRegistry, get_registry, install_hooks, reset_registry
from .normalizer import DeclarationValidator, coerce_forest

__all__ = [
    "DeclarationValidator",
    "coerce_forest",
    "TemplateCompiler",
    "flatten_entries",
    "HookHandler",
    "HookRegistry",
    "get_registry",
    "reset_registry",
    "install_hooks",
]
