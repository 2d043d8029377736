"""
Logging configuration for chart-recipes.

Handlers and formats:

  - File: always DEBUG level, one file per run in ~/.chart-recipes/logs/
    (or <data_dir>/logs/ when CHART_RECIPES_DIR / data_dir is set)
  - Console: DEBUG if --verbose, WARNING+ otherwise
  - Format: "timestamp | level | name | tag | message"
  - Config console_format options:
    - "simple": (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "full":   same structured format as the file handler
    - "clean":  no console output at all (file logging still active)

Tag a record with ``extra=tagged("render")`` to make it easy to grep for.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import get_data_dir


LOGGER_NAME = "chart-recipes"

# Log directory
LOG_DIR = get_data_dir() / "logs"

_current_log_file: Optional[Path] = None


def tagged(tag: str) -> dict:
    """Return ``extra`` dict for logger calls: ``logger.info("...", extra=tagged("x"))``."""
    return {"log_tag": tag}


class _TagFilter(logging.Filter):
    """Makes sure every record has a log_tag attribute for the formatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "log_tag") or not record.log_tag:
            record.log_tag = "-"
        return True


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for a chart-recipes run.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING+ only

    Returns:
        Configured logger instance
    """
    global _current_log_file
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level
    logger.propagate = False

    # Clear existing handlers (in case of re-init)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.filters.clear()
    logger.addFilter(_TagFilter())

    # File handler - one log file per run
    run_timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = LOG_DIR / f"recipes_{run_timestamp}.log"
    _current_log_file = log_file
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(log_tag)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    # Console handler - less verbose unless --verbose flag
    import config as _config
    console_format = _config.get("console_format", "simple")

    if console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        if console_format == "full":
            console_handler.setFormatter(file_format)  # identical to file handler
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)
    # "clean": no console handler at all (file logging still active)

    logger.debug(f"Run started at {datetime.now().isoformat()}")
    logger.debug(f"Log file: {log_file}")
    return logger


def get_logger() -> logging.Logger:
    """Get the chart-recipes logger (configured with defaults on first use)."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        return setup_logging(verbose=False)
    return logger


def log_error(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
) -> None:
    """Log an error with full details including stack trace.

    Args:
        message: Error description
        exc: Optional exception to include stack trace from
        context: Optional dict of additional context (recipe name, output path, etc.)
    """
    logger = get_logger()

    lines = [message]

    if context:
        lines.append("  Context:")
        for key, value in context.items():
            lines.append(f"    {key}: {value}")

    if exc:
        lines.append(f"  Exception type: {type(exc).__name__}")
        lines.append(f"  Exception message: {exc}")
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        lines.append("  Stack trace:")
        lines.extend(f"    {line}" for line in stack.rstrip().splitlines())

    logger.error("\n".join(lines), extra=tagged("error"))


def get_current_log_path() -> Path:
    """Return the path to the current run's log file."""
    if _current_log_file is not None:
        return _current_log_file
    # Fallback: find most recent log file in the directory
    logs = sorted(LOG_DIR.glob("recipes_*.log"))
    if logs:
        return logs[-1]
    return LOG_DIR / f"recipes_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"


def get_recent_errors(days: int = 7, limit: int = 50) -> list[dict]:
    """Retrieve recent errors and warnings from log files.

    Args:
        days: How many days back to search
        limit: Maximum number of entries to return

    Returns:
        List of entries with timestamp, level, tag, message, and details
    """
    errors = []
    cutoff = datetime.now().timestamp() - days * 86400
    # Collect all log files, newest first
    log_files = sorted(LOG_DIR.glob("recipes_*.log"), reverse=True)

    for log_file in log_files:
        if log_file.stat().st_mtime < cutoff:
            break

        with open(log_file, "r", encoding="utf-8") as f:
            current_error = None
            for line in f:
                if "| ERROR" in line or "| WARNING" in line:
                    if current_error:
                        errors.append(current_error)
                    # Format: timestamp | level | name | tag | message
                    parts = line.split(" | ", 4)
                    if len(parts) >= 5:
                        current_error = {
                            "timestamp": parts[0].strip(),
                            "level": parts[1].strip(),
                            "tag": parts[3].strip(),
                            "message": parts[4].strip(),
                            "details": [],
                        }
                elif current_error and line.startswith("  "):
                    # Continuation of error details
                    current_error["details"].append(line.rstrip())
                elif current_error and " | " in line:
                    errors.append(current_error)
                    current_error = None

            if current_error:
                errors.append(current_error)

        if len(errors) >= limit:
            break

    return errors[:limit]


def print_recent_errors(days: int = 7, limit: int = 10) -> None:
    """Print recent errors to console for review."""
    errors = get_recent_errors(days=days, limit=limit)

    if not errors:
        print(f"No errors found in the last {days} days.")
        return

    print(f"Recent errors (last {days} days, showing up to {limit}):")
    print("-" * 60)

    for i, error in enumerate(errors, 1):
        print(f"\n{i}. [{error['timestamp']}] {error['level']}")
        print(f"   {error['message']}")
        if error["details"]:
            for detail in error["details"][:5]:  # Limit detail lines
                print(f"   {detail}")
            if len(error["details"]) > 5:
                print(f"   ... and {len(error['details']) - 5} more lines")

    print("-" * 60)
    print(f"Full logs available at: {LOG_DIR}")
