"""Type definitions for declcapture.

This package provides the enumerations shared by the compiler, the hook
registry and the CLI.
"""

from .enums import EntryType, HookPhase, OutputFormat

__all__ = [
    "EntryType",
    "HookPhase",
    "OutputFormat",
]
