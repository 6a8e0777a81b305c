"""Output formatters for the declcapture CLI.

Formatters share one result envelope:

{
    "success": boolean,
    "message": string,
    "data": object,
    "warnings": array,
    "errors": array
}

- JSONFormatter: structured JSON
- TableFormatter: human-readable tables
- YAMLFormatter: YAML, via PyYAML
- QuietFormatter: counts and errors only
"""

import json
import os
import shutil
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TextIO

import yaml

from ..types.enums import OutputFormat


class BaseFormatter(ABC):
    """Interface every formatter implements."""

    def __init__(self, file: Optional[TextIO] = None):
        self.file = file if file is not None else sys.stdout

    @abstractmethod
    def format_command_result(
        self,
        success: bool,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        warnings: Optional[List[str]] = None,
        errors: Optional[List[str]] = None
    ) -> str:
        """Format a generic command result."""

    @abstractmethod
    def format_entry_list(self, entries: List[Dict[str, Any]], hooks: List[Dict[str, Any]]) -> str:
        """Format compiled entries and the hook registrations they requested."""

    @abstractmethod
    def format_hook_list(self, hooks: List[Dict[str, Any]], total_count: int) -> str:
        """Format installed hook handlers."""

    @abstractmethod
    def format_validation_result(self, validation_result: Dict[str, Any]) -> str:
        """Format a ValidationResult dictionary."""

    def write(self, text: str) -> None:
        """Write formatted text followed by a newline, skipping empty output."""
        if text:
            print(text, file=self.file)


def _envelope(success: bool, message: str, data: Optional[Dict[str, Any]] = None,
              warnings: Optional[List[str]] = None, errors: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "success": success,
        "message": message,
        "data": data or {},
        "warnings": warnings or [],
        "errors": errors or []
    }


def _validation_envelope(validation_result: Dict[str, Any]) -> Dict[str, Any]:
    errors = validation_result.get("errors", [])
    warnings = validation_result.get("warnings", [])
    message = (f"Checked {validation_result.get('checked', 0)} declarations: "
               f"{len(errors)} errors, {len(warnings)} warnings")
    return _envelope(
        success=validation_result.get("is_valid", not errors),
        message=message,
        data=validation_result,
        warnings=[f"{w['field_name']}: {w['message']}" for w in warnings],
        errors=[f"{e['field_name']}: {e['message']}" for e in errors],
    )


class JSONFormatter(BaseFormatter):
    """Structured JSON output."""

    def __init__(self, file: Optional[TextIO] = None, pretty: bool = True):
        super().__init__(file)
        self.pretty = pretty

    def format_command_result(self, success, message, data=None, warnings=None, errors=None) -> str:
        return self._format_json(_envelope(success, message, data, warnings, errors))

    def format_entry_list(self, entries, hooks) -> str:
        data = {"entries": entries, "hooks": hooks,
                "total_entries": len(entries), "total_hooks": len(hooks)}
        return self._format_json(_envelope(True, f"Compiled {len(entries)} entries", data))

    def format_hook_list(self, hooks, total_count) -> str:
        data = {"hooks": hooks, "total_count": total_count}
        return self._format_json(_envelope(True, f"Found {total_count} hook handlers", data))

    def format_validation_result(self, validation_result) -> str:
        return self._format_json(_validation_envelope(validation_result))

    def _format_json(self, obj: Any) -> str:
        if self.pretty:
            return json.dumps(obj, ensure_ascii=False, indent=2, default=str)
        return json.dumps(obj, ensure_ascii=False, separators=(',', ':'), default=str)


class TableFormatter(BaseFormatter):
    """Human-readable tables with optional terminal colors."""

    def __init__(self, file: Optional[TextIO] = None, max_width: Optional[int] = None):
        super().__init__(file)
        self.max_width = max_width or self._get_terminal_width()
        self._supports_color = self._check_color_support()

    def format_command_result(self, success, message, data=None, warnings=None, errors=None) -> str:
        lines = []
        status_symbol = "✓" if success else "✗"
        status_color = self._green if success else self._red
        lines.append(f"{status_color}{status_symbol} {message}{self._reset}")

        if data:
            lines.append("")
            lines.append(self._format_data_table(data))

        if warnings:
            lines.append("")
            lines.append(f"{self._yellow}Warnings:{self._reset}")
            for warning in warnings:
                lines.append(f"  ⚠ {warning}")

        if errors:
            lines.append("")
            lines.append(f"{self._red}Errors:{self._reset}")
            for error in errors:
                lines.append(f"  ✗ {error}")

        return "\n".join(lines)

    def format_entry_list(self, entries, hooks) -> str:
        if not entries:
            return f"{self._yellow}No entries{self._reset}"

        lines = [f"{self._bold}Capture entries ({len(entries)}){self._reset}", ""]
        rows = []
        for entry in entries:
            target = entry.get("target")
            rows.append([
                entry["keys"],
                str(entry["name"]),
                "group" if entry.get("group") else entry.get("type", "-"),
                " ".join(str(part) for part in target) if isinstance(target, list) else str(target or "-"),
                self._truncate(str(entry.get("template", "-")).replace("\n", "\\n"), 40),
            ])
        lines.append(self._create_table(["Keys", "Name", "Type", "Target", "Template"], rows))

        if hooks:
            lines.append("")
            lines.append(self.format_hook_list(hooks, len(hooks)))
        return "\n".join(lines)

    def format_hook_list(self, hooks, total_count) -> str:
        if not hooks:
            return f"{self._yellow}No hook handlers{self._reset}"

        lines = [f"{self._bold}Hook handlers ({total_count}){self._reset}", ""]
        rows = [[hook["keys"], hook["phase"], str(hook["entry"]), str(hook["callback"])] for hook in hooks]
        lines.append(self._create_table(["Keys", "Phase", "Entry", "Callback"], rows))
        return "\n".join(lines)

    def format_validation_result(self, validation_result) -> str:
        envelope = _validation_envelope(validation_result)
        return self.format_command_result(
            envelope["success"], envelope["message"],
            warnings=envelope["warnings"], errors=envelope["errors"],
        )

    def _create_table(self, headers: List[str], rows: List[List[str]]) -> str:
        if not rows:
            return ""

        col_widths = [len(header) for header in headers]
        for row in rows:
            for i, cell in enumerate(row):
                col_widths[i] = max(col_widths[i], len(str(cell)))

        # Shrink columns proportionally to fit the terminal
        total_width = sum(col_widths) + len(headers) * 3 - 1
        if total_width > self.max_width:
            scale = (self.max_width - len(headers) * 3 + 1) / sum(col_widths)
            col_widths = [max(8, int(w * scale)) for w in col_widths]

        lines = []
        header_line = " │ ".join(header.ljust(col_widths[i]) for i, header in enumerate(headers))
        lines.append(f"{self._bold}{header_line}{self._reset}")
        lines.append("─┼─".join("─" * w for w in col_widths))
        for row in rows:
            lines.append(" │ ".join(
                self._truncate(str(cell), col_widths[i]).ljust(col_widths[i]) for i, cell in enumerate(row)
            ))
        return "\n".join(lines)

    def _format_data_table(self, data: Dict[str, Any]) -> str:
        lines = []
        for key, value in data.items():
            if isinstance(value, dict):
                lines.append(f"{self._bold}{key}:{self._reset}")
                for sub_key, sub_value in value.items():
                    lines.append(f"  {sub_key}: {sub_value}")
            elif isinstance(value, list):
                lines.append(f"{self._bold}{key}:{self._reset}")
                for item in value:
                    lines.append(f"  - {item}")
            else:
                lines.append(f"{self._bold}{key}:{self._reset} {value}")
        return "\n".join(lines)

    def _truncate(self, text: str, max_length: int) -> str:
        if len(text) <= max_length:
            return text
        return text[:max_length - 3] + "..."

    def _get_terminal_width(self) -> int:
        try:
            return shutil.get_terminal_size().columns
        except (AttributeError, OSError):
            return 80

    def _check_color_support(self) -> bool:
        return (
            hasattr(self.file, 'isatty') and self.file.isatty() and
            os.environ.get('TERM', '').lower() != 'dumb' and
            os.environ.get('NO_COLOR') is None
        )

    @property
    def _reset(self) -> str:
        return "\033[0m" if self._supports_color else ""

    @property
    def _bold(self) -> str:
        return "\033[1m" if self._supports_color else ""

    @property
    def _green(self) -> str:
        return "\033[32m" if self._supports_color else ""

    @property
    def _red(self) -> str:
        return "\033[31m" if self._supports_color else ""

    @property
    def _yellow(self) -> str:
        return "\033[33m" if self._supports_color else ""


class YAMLFormatter(BaseFormatter):
    """YAML output of the result envelope."""

    def format_command_result(self, success, message, data=None, warnings=None, errors=None) -> str:
        return self._format_yaml(_envelope(success, message, data, warnings, errors))

    def format_entry_list(self, entries, hooks) -> str:
        data = {"entries": entries, "hooks": hooks,
                "total_entries": len(entries), "total_hooks": len(hooks)}
        return self._format_yaml(_envelope(True, f"Compiled {len(entries)} entries", data))

    def format_hook_list(self, hooks, total_count) -> str:
        data = {"hooks": hooks, "total_count": total_count}
        return self._format_yaml(_envelope(True, f"Found {total_count} hook handlers", data))

    def format_validation_result(self, validation_result) -> str:
        return self._format_yaml(_validation_envelope(validation_result))

    def _format_yaml(self, obj: Any) -> str:
        return yaml.safe_dump(obj, allow_unicode=True, sort_keys=False, default_flow_style=False).rstrip("\n")


class QuietFormatter(BaseFormatter):
    """Minimal output for scripts: counts on success, errors on failure."""

    def format_command_result(self, success, message, data=None, warnings=None, errors=None) -> str:
        if not success and errors:
            return "\n".join(errors)
        elif not success:
            return message
        return ""

    def format_entry_list(self, entries, hooks) -> str:
        return str(len(entries))

    def format_hook_list(self, hooks, total_count) -> str:
        return str(total_count)

    def format_validation_result(self, validation_result) -> str:
        errors = validation_result.get("errors", [])
        if errors:
            return "\n".join(f"{e['field_name']}: {e['message']}" for e in errors)
        return ""


def create_formatter(format_type: str, file: Optional[TextIO] = None) -> BaseFormatter:
    """Create the formatter for a format name ("json", "table", "yaml", "quiet").

    Raises:
        ValueError: If the format is not supported
    """
    output_format = OutputFormat.from_string(format_type.lower())
    formatters = {
        OutputFormat.JSON: JSONFormatter,
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.YAML: YAMLFormatter,
        OutputFormat.QUIET: QuietFormatter,
    }
    return formatters[output_format](file)
