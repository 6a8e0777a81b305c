"""Process-wide compiler configuration.

The configuration is read at compile time. It holds the default entry type
for leaves that do not declare one and the optional ordering predicates for
child lists and for the top-level forest.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Optional

from .exceptions import ConfigurationError
from .models.declaration import Declaration
from .types.enums import EntryType

logger = logging.getLogger(__name__)

DEFAULT_TYPE_ENV = "DECLCAPTURE_DEFAULT_TYPE"

SortPredicate = Callable[[Declaration, Declaration], bool]


@dataclass(frozen=True)
class CompilerConfig:
    """Compiler settings.

    Attributes:
        default_type: Entry type used by leaves that declare no type
        sort_children: "Less than" predicate ordering each node's children
        sort_forest: "Less than" predicate ordering the top-level declarations
    """
    default_type: EntryType = EntryType.ENTRY
    sort_children: Optional[SortPredicate] = None
    sort_forest: Optional[SortPredicate] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "default_type", EntryType.from_string(self.default_type))
        except ValueError as e:
            raise ConfigurationError(str(e), setting="default_type") from e

        for name in ("sort_children", "sort_forest"):
            predicate = getattr(self, name)
            if predicate is not None and not callable(predicate):
                raise ConfigurationError(
                    f"{name} must be a callable predicate or None, got {type(predicate).__name__}",
                    setting=name,
                )

    @classmethod
    def from_env(cls, **overrides: Any) -> CompilerConfig:
        """Build a configuration from environment variables.

        DECLCAPTURE_DEFAULT_TYPE sets the default entry type.
        """
        default_type = os.getenv(DEFAULT_TYPE_ENV)
        if default_type and "default_type" not in overrides:
            overrides["default_type"] = default_type
        return cls(**overrides)


_global_config: Optional[CompilerConfig] = None


def get_config() -> CompilerConfig:
    """Get the process-wide configuration."""
    global _global_config
    if _global_config is None:
        _global_config = CompilerConfig.from_env()
    return _global_config


def configure(**changes: Any) -> CompilerConfig:
    """Update the process-wide configuration and return it.

    Raises:
        ConfigurationError: On an unknown setting or an invalid value
    """
    global _global_config
    known = {item.name for item in fields(CompilerConfig)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}", setting=unknown[0])
    _global_config = replace(get_config(), **changes)
    logger.debug("Compiler configuration updated: %s", ", ".join(sorted(changes)))
    return _global_config


def reset_config() -> None:
    """Drop the process-wide configuration; the next read rebuilds it."""
    global _global_config
    _global_config = None
