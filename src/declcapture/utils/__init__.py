"""Utility modules for declcapture: structured logging and output formatting."""

from .formatters import create_formatter
from .logging import configure_logging, get_logger, log_operation

__all__ = [
    "create_formatter",
    "configure_logging",
    "get_logger",
    "log_operation",
]
