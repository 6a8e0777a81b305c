"""Data models package for declcapture.

This package contains the declaration input model, the resolved entry and
hook registration output models, and validation report models.
"""

from .declaration import Declaration, declaration_path, declare
from .entry import (
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
)
from .validation import ValidationError, ValidationResult, ValidationWarning

__all__ = [
    "Declaration",
    "declare",
    "declaration_path",
    "Entry",
    "CompilationResult",
    "HookRegistration",
    "ClockTarget",
    "IdTarget",
    "FunctionTarget",
    "RawTarget",
    "FileTarget",
    "LiteralTemplate",
    "FileTemplate",
    "FunctionTemplate",
    "ValidationResult",
    "ValidationError",
    "ValidationWarning",
]
