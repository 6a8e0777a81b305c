"""declcapture: compile declarative capture template trees.

A forest of declarations (named attribute bags, optionally nested through
``children``) is compiled into a flat, ordered list of capture entries.
Key fragments are inherited from ancestors, exclusive location and template
groups are resolved by priority, capture options are separated from
pass-through data, and hooks are returned as registrations that the hook
registry wires to host phases.

Usage:
    from declcapture import declare, declare_templates

    templates = declare_templates([
        declare("Work", keys="w", children=[
            declare("Task", keys="t", file="work.org", headline="Tasks",
                    template=["* TODO %?", "%U"], prepend=True),
            declare("Meeting", keys="m", file="work.org", olp=["Meetings"],
                    datetree=True, template="* %? :meeting:"),
        ]),
    ])
"""

__version__ = "0.1.0"

from .api import (
    compile_templates,
    declare_templates,
    load_declarations,
    remove_hooks,
    validate_declarations,
)
from .config import CompilerConfig, configure, get_config, reset_config
from .exceptions import (
    DeclarationError,
    DeclCaptureError,
    InvalidChildrenShapeError,
    InvalidParentShapeError,
    InvalidStringOrListError,
    MissingKeysError,
    UnresolvableHookTargetError,
)
from .models import CompilationResult, Declaration, Entry, HookRegistration, declare
from .services import HookRegistry, TemplateCompiler, get_registry, install_hooks, reset_registry
from .types import EntryType, HookPhase

__all__ = [
    "__version__",
    # Operations
    "compile_templates",
    "declare_templates",
    "validate_declarations",
    "load_declarations",
    "remove_hooks",
    # Models
    "Declaration",
    "declare",
    "Entry",
    "HookRegistration",
    "CompilationResult",
    # Services
    "TemplateCompiler",
    "HookRegistry",
    "get_registry",
    "reset_registry",
    "install_hooks",
    # Configuration
    "CompilerConfig",
    "get_config",
    "configure",
    "reset_config",
    # Types
    "EntryType",
    "HookPhase",
    # Exceptions
    "DeclCaptureError",
    "DeclarationError",
    "MissingKeysError",
    "InvalidParentShapeError",
    "InvalidChildrenShapeError",
    "InvalidStringOrListError",
    "UnresolvableHookTargetError",
]
