"""Declaration node model and the static keyword sets.

A declaration is a named attribute bag describing one capture template or a
named group of templates. Declarations are read-only input: the compiler
never mutates them and never stores a parent pointer on a child.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional, Tuple

# Structural attributes. Only these may appear on a declaration with children.
STRUCTURAL_KEYWORDS: FrozenSet[str] = frozenset({"name", "keys", "children"})

TYPE_KEYWORD = "type"

# Location group in priority order
LOCATION_KEYWORDS: Tuple[str, ...] = ("clock", "id", "function", "target", "file")

# Refinements of a file location in priority order
FILE_REFINEMENT_KEYWORDS: Tuple[str, ...] = ("olp", "headline", "regexp", "function")

DATETREE_KEYWORD = "datetree"

# Template-source group in priority order
TEMPLATE_KEYWORDS: Tuple[str, ...] = ("template", "template-file", "template-function")

HOOK_KEYWORDS: Tuple[str, ...] = ("hook", "prepare-finalize", "before-finalize", "after-finalize")

# Capture behavior options passed through verbatim to the entry
OPTION_KEYWORDS: FrozenSet[str] = frozenset({
    "prepend",
    "immediate-finish",
    "jump-to-captured",
    "empty-lines",
    "empty-lines-before",
    "empty-lines-after",
    "clock-in",
    "clock-keep",
    "clock-resume",
    "time-prompt",
    "tree-type",
    "unnarrowed",
    "table-line-pos",
    "kill-buffer",
    "no-save",
})

# Attributes holding callables; string references may be resolved by loaders
CALLABLE_KEYWORDS: FrozenSet[str] = frozenset({"function", "template-function", *HOOK_KEYWORDS})

RECOGNIZED_KEYWORDS: FrozenSet[str] = frozenset(
    STRUCTURAL_KEYWORDS
    | {TYPE_KEYWORD, DATETREE_KEYWORD}
    | set(LOCATION_KEYWORDS)
    | set(FILE_REFINEMENT_KEYWORDS)
    | set(TEMPLATE_KEYWORDS)
    | set(HOOK_KEYWORDS)
    | OPTION_KEYWORDS
)


def is_set(value: Any) -> bool:
    """True unless value is None or False.

    Zero, empty strings and empty lists count as set values.
    """
    return value is not None and value is not False


def normalize_attribute_name(name: str) -> str:
    """Normalize an attribute name to its hyphenated keyword spelling.

    ":template-file", "template_file" and "template-file" all map to
    "template-file".
    """
    return str(name).lstrip(":").replace("_", "-")


def attribute_key(name: Any) -> Any:
    """Key under which a declared attribute is stored.

    Alternative spellings of recognized keywords are normalized; any other
    name is pass-through data and is kept exactly as written.
    """
    normalized = normalize_attribute_name(name)
    if normalized in RECOGNIZED_KEYWORDS:
        return normalized
    return name


@dataclass(frozen=True)
class Declaration:
    """One user-authored declaration node.

    Attributes:
        name: Human-readable identifier (uniqueness is not enforced)
        attributes: Every other attribute, in declared order, keyed by its
            hyphenated keyword name
    """
    name: Any
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Declaration:
        """Create a Declaration from a plain mapping.

        The mapping must hold a "name" entry; all other entries become
        attributes in their insertion order.
        """
        attributes: Dict[str, Any] = {}
        name = None
        for raw_key, value in data.items():
            key = attribute_key(raw_key)
            if key == "name":
                name = value
            else:
                attributes[key] = value
        return cls(name=name, attributes=attributes)

    @classmethod
    def coerce(cls, value: Any) -> Optional[Declaration]:
        """Return value as a Declaration, or None if it is not declaration-shaped."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        return None

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.attributes.get(attribute, default)

    def __contains__(self, attribute: str) -> bool:
        return attribute in self.attributes

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Iterate (attribute, value) pairs in declared order."""
        return iter(self.attributes.items())

    @property
    def keys(self) -> Any:
        """The activation-key fragment of this node."""
        return self.attributes.get("keys")

    @property
    def has_children(self) -> bool:
        """True when children is set; an empty list counts as absent."""
        children = self.attributes.get("children")
        if isinstance(children, (list, tuple)):
            return bool(children)
        return is_set(children)

    @property
    def is_bare(self) -> bool:
        """True for a node holding nothing but its name and keys."""
        return set(self.attributes) == {"keys"}

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the plain mapping form."""
        return {"name": self.name, **self.attributes}


def declare(name: Any, **attributes: Any) -> Declaration:
    """Build a Declaration using Python keyword arguments.

    Underscores in recognized keyword names become hyphens, so
    ``template_file=`` sets the "template-file" attribute. Other names are
    kept as written. Child declarations may be given as
    Declarations or plain mappings.

    Example:
        >>> declare("Todo", keys="t", file="todo.org", headline="Tasks",
        ...         template="* TODO %?", prepend=True)
    """
    return Declaration(
        name=name,
        attributes={attribute_key(key): value for key, value in attributes.items()},
    )


def declaration_path(node: Declaration, ancestors: Tuple[Declaration, ...] = ()) -> str:
    """Slash-separated path of names from the root to node, for messages."""
    return "/".join(str(item.name) for item in (*ancestors, node))
