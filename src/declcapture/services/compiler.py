"""Template compiler: declaration forest to flat ordered entry list.

TemplateCompiler walks a forest of declarations depth first. Every node is
validated, its full key is built from its ancestors' key fragments, and then:

- a node with children becomes a group entry (full key and name only) whose
  children are compiled recursively, optionally reordered;
- a leaf resolves its location, template source, entry type, recognized
  options and pass-through attributes, and requests hook registrations.

The resolved tree is flattened depth first into the final entry list. Hook
registrations are returned next to the entries; wiring them into a host is the
job of the hook registry, not of the compiler.

Any invalid node aborts the whole compilation.
"""

import logging
from functools import cmp_to_key
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..config import CompilerConfig, SortPredicate, get_config
from ..exceptions import DeclarationError
from ..models.declaration import (
    DATETREE_KEYWORD,
    FILE_REFINEMENT_KEYWORDS,
    HOOK_KEYWORDS,
    LOCATION_KEYWORDS,
    OPTION_KEYWORDS,
    RECOGNIZED_KEYWORDS,
    TEMPLATE_KEYWORDS,
    TYPE_KEYWORD,
    Declaration,
    declaration_path,
    is_set,
)
from ..models.entry import (
    ClockTarget,
    CompilationResult,
    Entry,
    FileTarget,
    FileTemplate,
    FunctionTarget,
    FunctionTemplate,
    HookRegistration,
    IdTarget,
    LiteralTemplate,
    RawTarget,
    Target,
    TemplateSource,
)
from ..types.enums import EntryType, HookPhase
from .normalizer import Ancestors, DeclarationValidator, coerce_forest

logger = logging.getLogger(__name__)


def sort_declarations(declarations: Sequence[Declaration], predicate: SortPredicate) -> List[Declaration]:
    """Stable sort by a binary "less than" predicate."""
    def compare(left: Declaration, right: Declaration) -> int:
        if predicate(left, right):
            return -1
        if predicate(right, left):
            return 1
        return 0

    return sorted(declarations, key=cmp_to_key(compare))


def flatten_entries(entries: Iterable[Entry]) -> Iterator[Entry]:
    """Yield entries depth first, each group before its children."""
    for entry in entries:
        yield entry
        if entry.is_group:
            yield from flatten_entries(entry.children)


class TemplateCompiler:
    """Compiles declaration forests into capture entries.

    Args:
        config: Compiler settings. When omitted the process-wide configuration
            is read at the start of every compile call.
        validator: Validator applied to every node
    """

    def __init__(self, config: Optional[CompilerConfig] = None,
                 validator: Optional[DeclarationValidator] = None):
        self.config = config
        self.validator = validator or DeclarationValidator()

    def compile(self, forest: Sequence[Any]) -> CompilationResult:
        """Compile a forest of declarations.

        Args:
            forest: Declarations as mappings or Declaration objects

        Returns:
            CompilationResult with the flat ordered entries and the hook
            registrations requested by the declarations

        Raises:
            DeclarationError: On the first invalid declaration
            InvalidArgumentError: If forest is not a list of declarations
        """
        config = self.config or get_config()
        roots = coerce_forest(forest)
        if config.sort_forest is not None:
            roots = sort_declarations(roots, config.sort_forest)

        hooks: List[HookRegistration] = []
        tree = [self._compile_node(root, (), config, hooks) for root in roots]
        entries = list(flatten_entries(tree))

        logger.info("Compiled %d declarations into %d entries and %d hooks",
                    len(roots), len(entries), len(hooks))
        return CompilationResult(entries=entries, hooks=hooks)

    def _compile_node(self, node: Declaration, ancestors: Ancestors,
                      config: CompilerConfig, hooks: List[HookRegistration]) -> Entry:
        self.validator.validate(node, ancestors)
        full_key = "".join(ancestor.keys for ancestor in ancestors) + node.keys

        if node.has_children:
            children = self.validator.children_of(node)
            if config.sort_children is not None:
                children = sort_declarations(children, config.sort_children)
            lineage = (*ancestors, node)
            compiled = [self._compile_node(child, lineage, config, hooks) for child in children]
            logger.debug("Group %r (%s) with %d children", node.name, full_key, len(compiled))
            return Entry(full_key=full_key, name=node.name, children=compiled, is_group=True)

        options, passthrough = partition_attributes(node)
        entry = Entry(
            full_key=full_key,
            name=node.name,
            entry_type=resolve_type(node, config.default_type, ancestors),
            target=resolve_target(node),
            template=resolve_template(node),
            options=options,
            passthrough=passthrough,
        )
        hooks.extend(resolve_hooks(node, full_key))
        logger.debug("Entry %r (%s) resolved", node.name, full_key)
        return entry


def resolve_target(node: Declaration) -> Optional[Target]:
    """Resolve the location group; the first set keyword in priority order wins."""
    for keyword in LOCATION_KEYWORDS:
        value = node.get(keyword)
        if not is_set(value):
            continue
        if keyword == "clock":
            return ClockTarget()
        if keyword == "id":
            return IdTarget(value)
        if keyword == "function":
            # Alongside a file, function is a refinement of that file
            if is_set(node.get("file")):
                continue
            return FunctionTarget(value)
        if keyword == "target":
            return RawTarget(value)
        return _resolve_file_target(node, value)
    return None


def _resolve_file_target(node: Declaration, path: Any) -> FileTarget:
    for refinement in FILE_REFINEMENT_KEYWORDS:
        value = node.get(refinement)
        if not is_set(value):
            continue
        datetree = None
        if refinement == "olp" and is_set(node.get(DATETREE_KEYWORD)):
            datetree = node.get(DATETREE_KEYWORD)
        return FileTarget(path=path, refinement=refinement, refinement_value=value, datetree=datetree)
    return FileTarget(path=path)


def resolve_template(node: Declaration) -> Optional[TemplateSource]:
    """Resolve the template-source group; the first set keyword in priority order wins."""
    for keyword in TEMPLATE_KEYWORDS:
        value = node.get(keyword)
        if not is_set(value):
            continue
        if keyword == "template":
            if isinstance(value, (list, tuple)):
                value = "\n".join(value)
            return LiteralTemplate(value)
        if keyword == "template-file":
            return FileTemplate(value)
        return FunctionTemplate(value)
    return None


def resolve_type(node: Declaration, default_type: EntryType,
                 ancestors: Ancestors = ()) -> Optional[EntryType]:
    """Resolve the entry type of a leaf.

    Groups and bare (name, keys) nodes get no type. Otherwise the declared
    type is used, falling back to default_type.

    Raises:
        DeclarationError: If the declared type is not a known entry type
    """
    if node.has_children or node.is_bare:
        return None
    declared = node.get(TYPE_KEYWORD)
    if not is_set(declared):
        return default_type
    try:
        return EntryType.from_string(declared)
    except ValueError as e:
        raise DeclarationError(
            str(e),
            node.name,
            error_code="USER_INVALID_TYPE",
            suggested_fix=f"Use one of: {', '.join(EntryType.get_all_types())}",
            context={"path": declaration_path(node, ancestors)},
        ) from e


def partition_attributes(node: Declaration) -> Tuple[List[Tuple[str, Any]], List[Tuple[str, Any]]]:
    """Split a node's set attributes into recognized options and pass-through data.

    Both lists keep declared order. Location, template, hook and structural
    keywords belong to neither list.
    """
    options: List[Tuple[str, Any]] = []
    passthrough: List[Tuple[str, Any]] = []
    for attribute, value in node.items():
        if not is_set(value):
            continue
        if attribute in OPTION_KEYWORDS:
            options.append((attribute, value))
        elif attribute not in RECOGNIZED_KEYWORDS:
            passthrough.append((attribute, value))
    return options, passthrough


def resolve_hooks(node: Declaration, full_key: str) -> List[HookRegistration]:
    """Build one registration per hook slot set on the node."""
    registrations = []
    for slot in HOOK_KEYWORDS:
        callback = node.get(slot)
        if not is_set(callback):
            continue
        registrations.append(HookRegistration(
            match_key=full_key,
            callback=callback,
            phase=HookPhase.from_string(slot),
            entry_name=node.name,
        ))
    return registrations
