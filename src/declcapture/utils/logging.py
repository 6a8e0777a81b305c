"""Structured logging for declcapture.

StructuredLogger writes to three channels under the "declcapture" logger
namespace:

- general: progress messages (compile summaries, loaded files)
- errors: failures, with the error code and context of DeclCaptureError
- timing: durations of CLI operations, file output only

Every record may carry structured fields (file, operation, error_code, ...),
rendered as JSON, as a human-readable line or as a debug line with the
source location.
"""

import json
import logging
import logging.handlers
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from ..exceptions import DeclCaptureError

FIELDS_ATTRIBUTE = "fields"


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @classmethod
    def from_string(cls, value: str) -> "LogLevel":
        """Parse a level name case-insensitively ("WARNING", "debug")."""
        try:
            return cls(str(value).lower())
        except ValueError:
            valid_values = [level.value for level in cls]
            raise ValueError(f"Invalid log level '{value}'. Valid values: {valid_values}")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.name)


class LogFormat(Enum):
    JSON = "json"
    HUMAN = "human"
    DEBUG = "debug"


class LogChannel(Enum):
    GENERAL = "general"
    ERRORS = "errors"
    TIMING = "timing"


class StructuredLogger:
    """Channelled logger with console and optional rotating file output.

    Args:
        name: Logger namespace; channels are "<name>.<channel>"
        log_dir: Directory for channel log files, used with enable_file
        log_format: Record format of the file handlers
        log_level: Minimum level of every channel
        enable_console: Write general and error records to stderr
        enable_file: Write each channel to "<log_dir>/<channel>.log"
        max_file_size: Rotation size in bytes
        backup_count: Rotated files to keep
    """

    def __init__(self, name: str = "declcapture",
                 log_dir: Optional[Path] = None,
                 log_format: LogFormat = LogFormat.HUMAN,
                 log_level: LogLevel = LogLevel.INFO,
                 enable_console: bool = True,
                 enable_file: bool = False,
                 max_file_size: int = 10 * 1024 * 1024,
                 backup_count: int = 5):
        self.name = name
        self.log_format = log_format
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path.home() / ".declcapture" / "logs"
        if enable_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.channels: Dict[LogChannel, logging.Logger] = {}
        for channel in LogChannel:
            self.channels[channel] = self._build_channel(
                channel, enable_console, enable_file, max_file_size, backup_count
            )

    def _build_channel(self, channel: LogChannel, enable_console: bool, enable_file: bool,
                       max_file_size: int, backup_count: int) -> logging.Logger:
        logger = logging.getLogger(f"{self.name}.{channel.value}")
        logger.setLevel(self.log_level.logging_level)
        logger.handlers.clear()
        logger.propagate = False

        if enable_file:
            handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f"{channel.value}.log",
                maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8",
            )
            handler.setFormatter(_formatter_for(self.log_format))
            logger.addHandler(handler)

        # Timing records only go to files
        if enable_console and channel is not LogChannel.TIMING:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(_formatter_for(LogFormat.DEBUG if self.log_format is LogFormat.DEBUG
                                                else LogFormat.HUMAN))
            logger.addHandler(console)

        return logger

    def debug(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.DEBUG, LogChannel.GENERAL, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.INFO, LogChannel.GENERAL, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.WARNING, LogChannel.GENERAL, message, fields)

    def error(self, message: str, error: Optional[BaseException] = None, **fields: Any) -> None:
        """Log a failure on the errors channel.

        A DeclCaptureError contributes its error id, code, category and
        context; other exceptions contribute their type and message.
        """
        if error is not None:
            fields["error_type"] = type(error).__name__
            fields["error_message"] = str(error)
            if isinstance(error, DeclCaptureError):
                fields.update(
                    error_id=error.error_id,
                    error_code=error.error_code,
                    category=error.category.value,
                    context=error.context,
                )
        self._log(LogLevel.ERROR, LogChannel.ERRORS, message, fields)

    def timing(self, operation: str, duration_ms: float, status: str = "completed", **fields: Any) -> None:
        fields.update(operation=operation, duration_ms=round(duration_ms, 3), status=status)
        self._log(LogLevel.INFO, LogChannel.TIMING, f"{operation} {status} in {duration_ms:.2f}ms", fields)

    @contextmanager
    def operation_timer(self, operation: str, **fields: Any) -> Iterator[None]:
        """Time the enclosed block; failures are logged and re-raised."""
        start = time.perf_counter()
        self.debug(f"Starting {operation}", operation=operation, **fields)
        try:
            yield
        except Exception as e:
            self.timing(operation, (time.perf_counter() - start) * 1000, "failed", **fields)
            self.error(f"{operation} failed", error=e, **fields)
            raise
        self.timing(operation, (time.perf_counter() - start) * 1000, "completed", **fields)

    def _log(self, level: LogLevel, channel: LogChannel, message: str, fields: Dict[str, Any]) -> None:
        self.channels[channel].log(level.logging_level, message, extra={FIELDS_ATTRIBUTE: fields})


def _formatter_for(log_format: LogFormat) -> logging.Formatter:
    if log_format is LogFormat.JSON:
        return JsonFormatter()
    if log_format is LogFormat.DEBUG:
        return DebugFormatter()
    return HumanFormatter()


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, FIELDS_ATTRIBUTE, None) or {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, structured fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(_record_fields(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """"[LEVEL] message (key=value, ...)" lines for the console."""

    def __init__(self):
        super().__init__(fmt="[%(levelname)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)
        fields = {key: value for key, value in _record_fields(record).items() if key != "context"}
        if fields:
            result += " (" + ", ".join(f"{key}={value}" for key, value in fields.items()) + ")"
        return result


class DebugFormatter(logging.Formatter):
    """Timestamped lines with the source location and every field."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s:%(module)s:%(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)
        fields = _record_fields(record)
        if fields:
            result += " | " + ", ".join(f"{key}={value}" for key, value in fields.items())
        return result


_global_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get the global structured logger, creating a console-only one if needed."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger()
    return _global_logger


def configure_logging(**options: Any) -> StructuredLogger:
    """Replace the global structured logger; options are StructuredLogger arguments."""
    global _global_logger
    _global_logger = StructuredLogger(**options)
    return _global_logger


def log_error(error: BaseException, message: Optional[str] = None, **fields: Any) -> None:
    get_logger().error(message or f"Error: {type(error).__name__}", error=error, **fields)


def log_operation(operation: str, **fields: Any):
    """Context manager timing an operation on the global logger."""
    return get_logger().operation_timer(operation, **fields)


__all__ = [
    "LogLevel",
    "LogFormat",
    "LogChannel",
    "StructuredLogger",
    "JsonFormatter",
    "HumanFormatter",
    "DebugFormatter",
    "get_logger",
    "configure_logging",
    "log_error",
    "log_operation",
]
