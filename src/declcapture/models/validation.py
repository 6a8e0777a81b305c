"""Validation report models.

ValidationResult collects every problem found in a declaration forest for
reporting. The compiler itself does not use it: compilation fails fast on the
first invalid declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ValidationError:
    """A blocking problem with one declaration.

    Attributes:
        field_name: Path of the declaration ("Work/Meeting")
        error_code: Standardized error code for programmatic handling
        message: Human-readable error description
        suggested_fix: Optional suggestion for fixing the error
    """
    field_name: str
    error_code: str
    message: str
    suggested_fix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "field_name": self.field_name,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.suggested_fix is not None:
            result["suggested_fix"] = self.suggested_fix
        return result


@dataclass
class ValidationWarning:
    """A non-blocking problem with one declaration."""
    field_name: str
    warning_code: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "field_name": self.field_name,
            "warning_code": self.warning_code,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a declaration forest.

    Attributes:
        is_valid: Overall validation result (True if no errors)
        errors: Blocking problems
        warnings: Non-blocking problems
        suggestions: Improvement suggestions
        checked: Number of declarations checked
    """
    is_valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    checked: int = 0

    def add_error(
        self,
        field_name: str,
        error_code: str,
        message: str,
        suggested_fix: Optional[str] = None
    ) -> None:
        """Add a validation error and mark result as invalid."""
        self.errors.append(ValidationError(
            field_name=field_name,
            error_code=error_code,
            message=message,
            suggested_fix=suggested_fix
        ))
        self.is_valid = False

    def add_warning(self, field_name: str, warning_code: str, message: str) -> None:
        """Add a validation warning."""
        self.warnings.append(ValidationWarning(
            field_name=field_name,
            warning_code=warning_code,
            message=message
        ))

    def add_suggestion(self, suggestion: str) -> None:
        self.suggestions.append(suggestion)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def merge(self, other: ValidationResult) -> None:
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.suggestions.extend(other.suggestions)
        self.checked += other.checked
        if other.has_errors():
            self.is_valid = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_valid": self.is_valid,
            "checked": self.checked,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "suggestions": self.suggestions.copy(),
        }
