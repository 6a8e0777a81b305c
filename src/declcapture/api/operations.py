"""Public operations of declcapture.

These functions are the supported entry points for programs using the
package: compiling declarations, installing their hooks, loading declarations
from JSON/YAML files and removing installed hooks.

Usage:
    from declcapture.api import declare_templates

    templates = declare_templates([
        {"name": "Todo", "keys": "t", "file": "todo.org", "template": "* TODO %?"},
    ])
"""

import importlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from ..config import CompilerConfig
from ..exceptions import DeclarationLoadError
from ..models.declaration import CALLABLE_KEYWORDS, normalize_attribute_name
from ..models.entry import CompilationResult
from ..models.validation import ValidationResult
from ..services.compiler import TemplateCompiler
from ..services.hook_registry import HookRegistry, PhaseSelector, get_registry, install_hooks
from ..services.normalizer import DeclarationValidator

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def compile_templates(forest: Sequence[Any], config: Optional[CompilerConfig] = None) -> CompilationResult:
    """Compile a declaration forest into entries and hook registrations.

    No hooks are installed; see declare_templates() or install_hooks().

    Raises:
        DeclarationError: On the first invalid declaration
    """
    return TemplateCompiler(config=config).compile(forest)


def declare_templates(forest: Sequence[Any], config: Optional[CompilerConfig] = None,
                      registry: Optional[HookRegistry] = None) -> List[List[Any]]:
    """Compile a forest, install its hooks and return the entry records.

    Args:
        forest: Declarations as mappings or Declaration objects
        config: Compiler settings, process-wide settings when omitted
        registry: Hook registry, the process-wide one when omitted

    Returns:
        One ordered record per entry, ready for the capture engine
    """
    result = compile_templates(forest, config=config)
    install_hooks(result.hooks, registry)
    return result.to_lists()


def validate_declarations(forest: Sequence[Any]) -> ValidationResult:
    """Report every structural problem in a forest without compiling it."""
    return DeclarationValidator().check_forest(forest)


def remove_hooks(pattern: str = "", phases: PhaseSelector = "all", forget: bool = False,
                 registry: Optional[HookRegistry] = None) -> List[str]:
    """Remove installed hook handlers whose key matches pattern.

    Args:
        pattern: Regular expression searched in each handler's entry key
        phases: "all", one phase or an iterable of phases
        forget: Also drop the handler names from the registry's name table
        registry: Hook registry, the process-wide one when omitted

    Returns:
        Names of the removed handlers
    """
    target = registry if registry is not None else get_registry()
    return target.remove(pattern, phases=phases, forget=forget)


def resolve_reference(reference: str) -> Any:
    """Import the object named by a "package.module:attribute" reference.

    Raises:
        DeclarationLoadError: If the module or attribute cannot be found
    """
    module_name, _, attribute_path = reference.partition(":")
    try:
        target = importlib.import_module(module_name)
        for part in attribute_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError, ValueError) as e:
        raise DeclarationLoadError(f"Cannot resolve callable reference {reference!r}: {e}",
                                   original_error=e) from e
    return target


def _resolve_callables(node: Any) -> Any:
    """Replace "module:attribute" strings in callable slots, recursively."""
    if isinstance(node, list):
        return [_resolve_callables(item) for item in node]
    if not isinstance(node, dict):
        return node

    resolved: Dict[str, Any] = {}
    for key, value in node.items():
        keyword = normalize_attribute_name(key)
        if keyword in CALLABLE_KEYWORDS and isinstance(value, str) and ":" in value:
            value = resolve_reference(value)
        elif keyword == "children":
            value = _resolve_callables(value)
        resolved[key] = value
    return resolved


def load_declarations(path: Union[str, Path]) -> List[Any]:
    """Load a declaration forest from a JSON or YAML file.

    The file holds either a list of declarations or a mapping with a
    "templates" list. Callable slots (function, template-function and the
    hook slots) may reference callables as "module:attribute" strings.

    Raises:
        FileNotFoundError: If the file does not exist
        DeclarationLoadError: If the file cannot be parsed or has the wrong shape
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix not in JSON_SUFFIXES + YAML_SUFFIXES:
        raise DeclarationLoadError(f"Unsupported declaration file type '{suffix or file_path.name}'",
                                   file_path=file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f) if suffix in JSON_SUFFIXES else yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise DeclarationLoadError(f"Cannot parse {file_path}: {e}", file_path=file_path,
                                       original_error=e) from e

    if isinstance(data, dict) and "templates" in data:
        data = data["templates"]
    if not isinstance(data, list):
        raise DeclarationLoadError(
            f"{file_path} must contain a list of declarations, got {type(data).__name__}",
            file_path=file_path,
        )

    logger.debug("Loaded %d declarations from %s", len(data), file_path)
    return _resolve_callables(data)
