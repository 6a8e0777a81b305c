"""Resolved entry model, target and template descriptors, hook registrations.

Target descriptors and template sources are closed variant sets. Each variant
knows its discriminant tag and how to render itself into the ordered record
consumed by the capture engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Union

from ..types.enums import EntryType, HookPhase
from .declaration import is_set


def describe_value(value: Any) -> Any:
    """Render a value for structured (JSON/YAML) output.

    Callables are shown as their dotted import path; lists, tuples and dicts
    are converted recursively.
    """
    if isinstance(value, (list, tuple)):
        return [describe_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): describe_value(item) for key, item in value.items()}
    if callable(value):
        module = getattr(value, "__module__", None)
        qualname = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
        if module and qualname:
            return f"{module}:{qualname}"
        return repr(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


# ===== Target descriptors =====

@dataclass(frozen=True)
class ClockTarget:
    """Capture into the currently clocked item."""
    tag: ClassVar[str] = "clock"

    def to_list(self) -> List[Any]:
        return [self.tag]


@dataclass(frozen=True)
class IdTarget:
    """Capture under the entry with the given id."""
    id: Any
    tag: ClassVar[str] = "id"

    def to_list(self) -> List[Any]:
        return [self.tag, self.id]


@dataclass(frozen=True)
class FunctionTarget:
    """Let a function move point to the capture location."""
    function: Callable
    tag: ClassVar[str] = "function"

    def to_list(self) -> List[Any]:
        return [self.tag, self.function]


@dataclass(frozen=True)
class RawTarget:
    """Caller-supplied target descriptor, used verbatim."""
    value: Any

    @property
    def tag(self) -> str:
        if isinstance(self.value, (list, tuple)) and self.value:
            return str(self.value[0])
        return "target"

    def to_list(self) -> Any:
        if isinstance(self.value, tuple):
            return list(self.value)
        return self.value


@dataclass(frozen=True)
class FileTarget:
    """A file, optionally refined by an outline path, headline, regexp or function.

    Attributes:
        path: Base file path
        refinement: Refinement keyword ("olp", "headline", "regexp", "function")
        refinement_value: Value of the refinement keyword
        datetree: Datetree modifier, only kept for an "olp" refinement
    """
    path: Any
    refinement: Optional[str] = None
    refinement_value: Any = None
    datetree: Any = None

    @property
    def tag(self) -> str:
        parts = ["file"]
        if self.refinement:
            parts.append(self.refinement)
        if is_set(self.datetree):
            parts.append("datetree")
        return "+".join(parts)

    def to_list(self) -> List[Any]:
        record = [self.tag, self.path]
        if self.refinement == "olp":
            if isinstance(self.refinement_value, (list, tuple)):
                record.extend(self.refinement_value)
            else:
                record.append(self.refinement_value)
        elif self.refinement:
            record.append(self.refinement_value)
        return record


Target = Union[ClockTarget, IdTarget, FunctionTarget, RawTarget, FileTarget]


# ===== Template sources =====

@dataclass(frozen=True)
class LiteralTemplate:
    """Template text given inline."""
    text: str
    tag: ClassVar[str] = "string"

    def to_value(self) -> Any:
        return self.text


@dataclass(frozen=True)
class FileTemplate:
    """Template read from a file by the capture engine."""
    path: Any
    tag: ClassVar[str] = "file"

    def to_value(self) -> Any:
        return [self.tag, self.path]


@dataclass(frozen=True)
class FunctionTemplate:
    """Template produced by calling a function."""
    function: Callable
    tag: ClassVar[str] = "function"

    def to_value(self) -> Any:
        return [self.tag, self.function]


TemplateSource = Union[LiteralTemplate, FileTemplate, FunctionTemplate]


# ===== Entries and hooks =====

@dataclass
class Entry:
    """One resolved capture entry.

    A group entry (compiled from a declaration with children) carries only
    its full key, name and children; its record is (full_key, name). Leaf
    records omit every absent field instead of emitting placeholders.

    Attributes:
        full_key: Ancestor key fragments followed by the node's own keys
        name: Declared name
        entry_type: Resolved entry type, None for groups and bare nodes
        target: Resolved location descriptor
        template: Resolved template source
        options: Recognized capture options in declared order
        passthrough: Unrecognized attributes in declared order
        children: Compiled children of a group entry
        is_group: True when compiled from a declaration with children
    """
    full_key: str
    name: Any
    entry_type: Optional[EntryType] = None
    target: Optional[Target] = None
    template: Optional[TemplateSource] = None
    options: List[Tuple[str, Any]] = field(default_factory=list)
    passthrough: List[Tuple[str, Any]] = field(default_factory=list)
    children: List[Entry] = field(default_factory=list)
    is_group: bool = False

    def to_list(self) -> List[Any]:
        """Render the ordered record consumed by the capture engine."""
        record: List[Any] = [self.full_key, self.name]
        if self.is_group:
            return record
        if self.entry_type is not None:
            record.append(self.entry_type.value)
        if self.target is not None:
            record.append(self.target.to_list())
        if self.template is not None:
            record.append(self.template.to_value())
        for keyword, value in (*self.options, *self.passthrough):
            record.extend((keyword, value))
        return record

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON/YAML-friendly dictionary."""
        result: Dict[str, Any] = {"keys": self.full_key, "name": describe_value(self.name)}
        if self.is_group:
            result["group"] = True
            return result
        if self.entry_type is not None:
            result["type"] = self.entry_type.value
        if self.target is not None:
            result["target"] = describe_value(self.target.to_list())
        if self.template is not None:
            result["template"] = describe_value(self.template.to_value())
        if self.options:
            result["options"] = {keyword: describe_value(value) for keyword, value in self.options}
        if self.passthrough:
            result["passthrough"] = {keyword: describe_value(value) for keyword, value in self.passthrough}
        return result


HANDLER_PREFIX = "declcapture-hook"


@dataclass(frozen=True)
class HookRegistration:
    """Request to run callback during phase while match_key is the active entry."""
    match_key: str
    callback: Callable
    phase: HookPhase
    entry_name: Any

    @property
    def handler_name(self) -> str:
        """Generated handler name, embedding the phase and the match key."""
        return f"{HANDLER_PREFIX}/{self.phase.value}/{self.match_key}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "handler": self.handler_name,
            "keys": self.match_key,
            "phase": self.phase.value,
            "host_hook": self.phase.host_hook,
            "entry": describe_value(self.entry_name),
            "callback": describe_value(self.callback),
        }


@dataclass
class CompilationResult:
    """Output of one compile call: flat ordered entries plus hook registrations."""
    entries: List[Entry] = field(default_factory=list)
    hooks: List[HookRegistration] = field(default_factory=list)

    def to_lists(self) -> List[List[Any]]:
        return [entry.to_list() for entry in self.entries]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "hooks": [hook.to_dict() for hook in self.hooks],
            "total_entries": len(self.entries),
            "total_hooks": len(self.hooks),
        }
