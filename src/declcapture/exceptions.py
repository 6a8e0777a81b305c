"""Exception hierarchy for declcapture with user-friendly error details.

Every error raised by the package derives from DeclCaptureError, which carries
a standardized error code, a suggested fix, a context dictionary and a
severity/category classification.

Categories:
- User errors: malformed declarations, bad configuration, bad arguments
- Load errors: unreadable or malformed declaration files
"""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ErrorSeverity(Enum):
    """Severity of an error."""
    LOW = "low"               # warning or hint
    MEDIUM = "medium"         # user-fixable error
    HIGH = "high"             # requires intervention
    CRITICAL = "critical"     # unrecoverable


class ErrorCategory(Enum):
    """Broad classification of an error."""
    USER = "user"
    SYSTEM = "system"
    INTERNAL = "internal"
    EXTERNAL = "external"


class DeclCaptureError(Exception):
    """Base exception for declcapture.

    Attributes:
        message: Human-readable error message
        error_code: Standardized error code (CATEGORY_SPECIFIC_CODE)
        suggested_fix: Suggestion for resolving the error
        context: Extra information about where the error happened
        original_error: Wrapped exception, if any
        severity: Error severity
        category: Error category
        error_id: Short unique identifier for this error instance
        timestamp: When the error was created
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        suggested_fix: str = None,
        context: Dict[str, Any] = None,
        original_error: Exception = None,
        severity: Union[str, ErrorSeverity] = ErrorSeverity.MEDIUM,
        category: Union[str, ErrorCategory] = ErrorCategory.INTERNAL,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.suggested_fix = suggested_fix or "Check the declarations and try again"
        self.context = context or {}
        self.original_error = original_error

        self.severity = severity if isinstance(severity, ErrorSeverity) else ErrorSeverity(severity)
        self.category = category if isinstance(category, ErrorCategory) else ErrorCategory(category)

        self.error_id = str(uuid.uuid4())[:8]
        self.timestamp = datetime.now()

    def get_user_message(self) -> str:
        """Get the message with its suggested fix appended."""
        user_msg = f"{self.message} (error id: {self.error_id})"
        if self.suggested_fix:
            user_msg += f"\n\nSuggested fix:\n{self.suggested_fix}"
        return user_msg

    def get_full_details(self) -> Dict[str, Any]:
        """Get all error details, for debugging and structured output."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "suggested_fix": self.suggested_fix,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def add_context(self, key: str, value: Any) -> None:
        """Attach additional context information."""
        self.context[key] = value


# ===== User errors =====

class UserError(DeclCaptureError):
    """Base class for errors the declaration author can fix directly."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.USER)
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        super().__init__(message, **kwargs)


class ConfigurationError(UserError):
    """Invalid compiler configuration value."""

    def __init__(self, message: str, setting: str = None, **kwargs):
        self.setting = setting
        kwargs.setdefault("error_code", "USER_CONFIG_INVALID")
        kwargs.setdefault("suggested_fix", "Check the configuration value and its allowed range")
        if self.setting:
            kwargs.setdefault("context", {}).update({"setting": self.setting})
        super().__init__(message, **kwargs)


class InvalidArgumentError(UserError):
    """Invalid argument passed to an API function or command."""

    def __init__(self, message: str, argument_name: str = None, valid_values: List[str] = None, **kwargs):
        self.argument_name = argument_name
        self.valid_values = valid_values or []
        kwargs.setdefault("error_code", "USER_INVALID_ARGUMENT")

        suggested_fix = "Check the arguments"
        if self.argument_name and self.valid_values:
            suggested_fix = f"'{self.argument_name}' must be one of: {', '.join(self.valid_values)}"
        kwargs.setdefault("suggested_fix", suggested_fix)

        context = kwargs.setdefault("context", {})
        if self.argument_name:
            context["argument_name"] = self.argument_name
        if self.valid_values:
            context["valid_values"] = self.valid_values

        super().__init__(message, **kwargs)


class DeclarationLoadError(UserError):
    """A declaration file could not be read or parsed."""

    def __init__(self, message: str, file_path: Union[str, Path] = None, **kwargs):
        self.file_path = Path(file_path) if file_path else None
        kwargs.setdefault("error_code", "USER_DECLARATION_LOAD")
        kwargs.setdefault("suggested_fix", "Make sure the file is valid JSON or YAML holding a list of declarations")
        if self.file_path:
            kwargs.setdefault("context", {}).update({"file_path": str(self.file_path)})
        super().__init__(message, **kwargs)


class DeclarationError(UserError):
    """A declaration node violates a structural rule.

    The message always names the offending declaration and the rule.
    """

    rule = "invalid declaration"

    def __init__(self, message: str, declaration_name: Optional[str] = None, **kwargs):
        self.declaration_name = declaration_name
        kwargs.setdefault("error_code", "USER_DECLARATION_INVALID")
        context = kwargs.setdefault("context", {})
        context["declaration"] = declaration_name
        context["rule"] = self.rule
        super().__init__(f"Declaration {declaration_name!r}: {message}", **kwargs)


class MissingKeysError(DeclarationError):
    """A declaration has no keys, or empty keys."""

    rule = "keys must be a non-empty string"

    def __init__(self, declaration_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "USER_MISSING_KEYS")
        kwargs.setdefault("suggested_fix", "Add a non-empty 'keys' attribute to the declaration")
        super().__init__(self.rule, declaration_name, **kwargs)


class InvalidParentShapeError(DeclarationError):
    """A declaration with children carries attributes other than name/keys/children."""

    rule = "a declaration with children may only carry name, keys and children"

    def __init__(self, declaration_name: Optional[str] = None, extra_attributes: List[str] = None, **kwargs):
        self.extra_attributes = list(extra_attributes or [])
        kwargs.setdefault("error_code", "USER_INVALID_PARENT")
        kwargs.setdefault("suggested_fix", "Move the extra attributes onto the children")
        kwargs.setdefault("context", {})["extra_attributes"] = self.extra_attributes
        message = self.rule
        if self.extra_attributes:
            message += f" (found: {', '.join(self.extra_attributes)})"
        super().__init__(message, declaration_name, **kwargs)


class InvalidChildrenShapeError(DeclarationError):
    """The children attribute is not a list of declarations."""

    rule = "children must be a list of declarations"

    def __init__(self, declaration_name: Optional[str] = None, detail: str = None, **kwargs):
        kwargs.setdefault("error_code", "USER_INVALID_CHILDREN")
        kwargs.setdefault("suggested_fix", "Wrap the child declarations in a list")
        message = self.rule
        if detail:
            message += f" ({detail})"
        super().__init__(message, declaration_name, **kwargs)


class InvalidStringOrListError(DeclarationError):
    """An attribute that must be a string or a list of strings is neither."""

    rule = "value must be a string or a list of strings"

    def __init__(self, declaration_name: Optional[str] = None, attribute: str = None, value: Any = None, **kwargs):
        self.attribute = attribute
        kwargs.setdefault("error_code", "USER_INVALID_STRING_OR_LIST")
        kwargs.setdefault("suggested_fix", f"Give '{attribute}' a string or a list of strings")
        context = kwargs.setdefault("context", {})
        context["attribute"] = attribute
        context["value_type"] = type(value).__name__
        super().__init__(f"'{attribute}' {self.rule}, got {type(value).__name__}", declaration_name, **kwargs)


class UnresolvableHookTargetError(UserError):
    """A hook phase name does not map to a known host hook."""

    def __init__(self, phase: Any, valid_phases: List[str] = None, **kwargs):
        self.phase = phase
        self.valid_phases = list(valid_phases or [])
        kwargs.setdefault("error_code", "USER_UNKNOWN_HOOK_PHASE")
        kwargs.setdefault("suggested_fix", f"Use one of: {', '.join(self.valid_phases)}")
        kwargs.setdefault("context", {}).update({"phase": str(phase), "valid_phases": self.valid_phases})
        super().__init__(f"Hook phase {phase!r} does not map to a known host hook", **kwargs)


__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "DeclCaptureError",
    "UserError",
    "ConfigurationError",
    "InvalidArgumentError",
    "DeclarationLoadError",
    "DeclarationError",
    "MissingKeysError",
    "InvalidParentShapeError",
    "InvalidChildrenShapeError",
    "InvalidStringOrListError",
    "UnresolvableHookTargetError",
]
