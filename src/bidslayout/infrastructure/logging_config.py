"""
Logging configuration for bidslayout.

Library modules only obtain loggers; handlers are installed by the command
line entry point (or by an application embedding the package).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .paths import get_log_file_path

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def rotate_log_files(log_file: Optional[Path] = None) -> None:
    """
    Move the previous session's log aside before a new session starts.

    The current log becomes log.old.txt (replacing any older one), so only
    the last two sessions are kept.
    """
    if log_file is None:
        log_file = get_log_file_path()
    old_log_file = log_file.with_name(f"{log_file.stem}.old{log_file.suffix}")

    if not log_file.exists():
        return

    try:
        log_file.replace(old_log_file)
    except OSError as e:
        print(f"Warning: Could not rotate log file: {e}", file=sys.stderr)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    log_to_file: bool = True
) -> None:
    """
    Configure logging for a bidslayout session.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        log_file: Log file path. If None and log_to_file=True, uses the
            persistent data directory.
        format_string: Optional custom format string for log messages.
        log_to_file: Whether to log to a file as well as to stderr.
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    formatter = logging.Formatter(format_string)

    # stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_to_file:
        if log_file is None:
            log_file = get_log_file_path()
        rotate_log_files(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8', mode='w')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format=format_string,
        force=True
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)
