"""
Logging infrastructure for screendiff.

Console output always goes to stderr so stdout stays free for the IPC
protocol. File logs rotate under DATA_ROOT/logs: a detailed text log and an
optional JSON-lines log.
"""

import json
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from screendiff.core.paths import LOGS_DIR

# Log format for console (human-readable)
CONSOLE_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s: %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"

# Log format for file (more detail)
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Log rotation settings
MAX_LOG_SIZE_MB = 5
MAX_LOG_FILES = 3

# LogRecord attributes that are not user-supplied extras
_RESERVED_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys() | {"message", "asctime", "taskName"}
)


class StructuredLogFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS:
                continue
            try:
                json.dumps(value)
                extra_fields[key] = value
            except (TypeError, ValueError):
                extra_fields[key] = str(value)
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colours the level name on a terminal.
    """

    # ANSI color codes
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        original_levelname = record.levelname
        record.levelname = f"{self.COLORS.get(record.levelno, '')}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def _to_level(level: int | str) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


def setup_logging(
    console_level: int | str = DEFAULT_CONSOLE_LEVEL,
    file_level: int | str = DEFAULT_FILE_LEVEL,
    log_dir: Path | str | None = None,
    log_file: str | None = "screendiff.log",
    structured_file: str | None = "screendiff.jsonl",
    use_colors: bool = True,
) -> logging.Logger:
    """
    Set up logging for screendiff.

    Args:
        console_level: Log level for stderr output
        file_level: Log level for file output
        log_dir: Directory for log files (defaults to DATA_ROOT/logs)
        log_file: Name of the text log file (None to disable file logging)
        structured_file: Name of the JSON log file (None to disable)
        use_colors: Use colored output in console

    Returns:
        Root logger instance
    """
    console_level = _to_level(console_level)
    file_level = _to_level(file_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        ColoredConsoleFormatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT, use_colors=use_colors)
    )
    root_logger.addHandler(console_handler)

    if log_file or structured_file:
        log_dir = LOGS_DIR if log_dir is None else Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        if log_file:
            file_handler = RotatingFileHandler(
                log_dir / log_file,
                maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
                backupCount=MAX_LOG_FILES,
                encoding="utf-8",
            )
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
            root_logger.addHandler(file_handler)

        if structured_file:
            structured_handler = RotatingFileHandler(
                log_dir / structured_file,
                maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
                backupCount=MAX_LOG_FILES,
                encoding="utf-8",
            )
            structured_handler.setLevel(file_level)
            structured_handler.setFormatter(StructuredLogFormatter())
            root_logger.addHandler(structured_handler)

    # Pillow logs every PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)

    root_logger.info(
        f"Logging initialized (console: {logging.getLevelName(console_level)}, "
        f"file: {logging.getLevelName(file_level) if log_file or structured_file else 'off'})"
    )

    return root_logger


def log_timing(
    logger: logging.Logger,
    operation: str,
    duration_seconds: float,
    level: int = logging.DEBUG,
    **extra: Any,
) -> None:
    """
    Log how long an operation took.

    Args:
        logger: Logger to use
        operation: Name of the operation
        duration_seconds: Duration in seconds
        level: Log level
        **extra: Extra fields to include
    """
    if duration_seconds < 1:
        duration_str = f"{duration_seconds * 1000:.1f}ms"
    else:
        duration_str = f"{duration_seconds:.2f}s"

    logger.log(
        level,
        f"{operation} completed in {duration_str}",
        extra={"operation": operation, "duration_seconds": duration_seconds, **extra},
    )
