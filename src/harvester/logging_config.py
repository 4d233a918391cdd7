"""Logging setup for harvest runs.

Console output is short (time, level, message) so per-item progress lines stay
readable; the optional log file carries the logger name as well.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

CONSOLE_FORMAT = '%(asctime)s %(levelname)-7s %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_DATE_FORMAT = '%H:%M:%S'

# Third-party loggers that flood DEBUG output during page automation
NOISY_LOGGERS = ('playwright', 'asyncio')


def parse_level(level: str) -> int:
    """Numeric level for a name such as 'info'.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    numeric_level = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric_level


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure the root logger for a harvest run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also append log records to this file
        format_string: Overrides both the console and file formats
        stream: Console stream (default: stdout)
    """
    numeric_level = parse_level(level)

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT, CONSOLE_DATE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (usually for ``__name__``)."""
    return logging.getLogger(name)
