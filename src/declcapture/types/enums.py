"""Enumerations used by the declcapture compiler, registry and CLI.

All enums inherit from str and Enum to support JSON serialization and
provide utility methods for validation and parsing.
"""

from enum import Enum
from typing import List


class EntryType(str, Enum):
    """Kind of capture entry produced for a leaf declaration.

    Values:
        ENTRY: A headline with its subtree
        ITEM: A plain list item
        CHECKITEM: A checkbox list item
        TABLE_LINE: A new line in a table
        PLAIN: Text inserted as-is
    """
    ENTRY = "entry"
    ITEM = "item"
    CHECKITEM = "checkitem"
    TABLE_LINE = "table-line"
    PLAIN = "plain"

    @classmethod
    def from_string(cls, value: str) -> "EntryType":
        """Parse entry type from string.

        Args:
            value: String value to parse

        Returns:
            EntryType enum value

        Raises:
            ValueError: If value is not a valid entry type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid_values = [entry_type.value for entry_type in cls]
            raise ValueError(f"Invalid entry type '{value}'. Valid values: {valid_values}")

    @classmethod
    def get_all_types(cls) -> List[str]:
        """Get all valid entry type values."""
        return [entry_type.value for entry_type in cls]


class HookPhase(str, Enum):
    """Lifecycle phase a declaration hook is attached to.

    Each phase corresponds to one host hook that the capture engine runs
    while an entry is being captured.

    Values:
        MODE: Run when the capture buffer is set up
        PREPARE_FINALIZE: Run before finalizing, buffer still narrowed
        BEFORE_FINALIZE: Run right before the capture is stored
        AFTER_FINALIZE: Run after the capture buffer is closed
    """
    MODE = "mode"
    PREPARE_FINALIZE = "prepare-finalize"
    BEFORE_FINALIZE = "before-finalize"
    AFTER_FINALIZE = "after-finalize"

    @classmethod
    def from_string(cls, value: str) -> "HookPhase":
        """Parse hook phase from string.

        Accepts the phase value ("before-finalize") and the declaration
        slot name ("hook" for MODE).

        Raises:
            ValueError: If value is not a valid hook phase
        """
        if isinstance(value, cls):
            return value
        if value == "hook":
            return cls.MODE
        try:
            return cls(value)
        except ValueError:
            valid_values = [phase.value for phase in cls]
            raise ValueError(f"Invalid hook phase '{value}'. Valid values: {valid_values}")

    @classmethod
    def get_all_phases(cls) -> List[str]:
        """Get all valid hook phase values."""
        return [phase.value for phase in cls]

    @property
    def slot(self) -> str:
        """Declaration attribute that holds the callback for this phase."""
        return "hook" if self is HookPhase.MODE else self.value

    @property
    def host_hook(self) -> str:
        """Name of the host hook variable this phase is wired into."""
        return f"org-capture-{self.value}-hook"


class OutputFormat(str, Enum):
    """Output format options for CLI commands.

    Values:
        JSON: Structured JSON output for programmatic consumption
        TABLE: Human-readable table format
        YAML: YAML format
        QUIET: Minimal output (success/error status only)
    """
    JSON = "json"
    TABLE = "table"
    YAML = "yaml"
    QUIET = "quiet"

    @classmethod
    def from_string(cls, value: str) -> "OutputFormat":
        """Parse output format from string.

        Raises:
            ValueError: If value is not a valid output format
        """
        try:
            return cls(value)
        except ValueError:
            valid_values = [fmt.value for fmt in cls]
            raise ValueError(f"Invalid output format '{value}'. Valid values: {valid_values}")
