"""
Logging setup for Term Relay

Configures application-wide logging with rotation, formatting, and levels.
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

ROOT_LOGGER_NAME = 'term_relay'

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Third-party loggers kept at WARNING
QUIET_LOGGERS = ('discord', 'discord.http', 'discord.gateway', 'asyncio')

_SIZE_PATTERN = re.compile(r'^\s*(\d+)\s*([KMG]?B?)?\s*$', re.IGNORECASE)
_SIZE_UNITS = {'': 1, 'B': 1, 'K': 1024, 'KB': 1024, 'M': 1024 ** 2, 'MB': 1024 ** 2,
               'G': 1024 ** 3, 'GB': 1024 ** 3}


def parse_size(size: str) -> int:
    """Convert a size string such as "10MB" into bytes"""
    match = _SIZE_PATTERN.match(str(size))
    if not match:
        raise ValueError(f"Invalid size: {size!r}")
    value, unit = match.groups()
    return int(value) * _SIZE_UNITS[(unit or '').upper()]


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _build_handlers(level: int, log_file: Optional[str], max_bytes: int,
                    backup_count: int) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
        )
        # The file keeps everything; the console follows the configured level
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(rotating)

    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 ** 2,
    backup_count: int = 5
) -> logging.Logger:
    """Configure the ``term_relay`` logger once.

    Console output goes to stdout at ``level``; when ``log_file`` is given a
    rotating file receives DEBUG and above. Calling again only updates the
    level.
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(numeric_level)

    if root.handlers:
        return root

    for handler in _build_handlers(numeric_level, log_file, max_bytes, backup_count):
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Logging initialized at {logging.getLevelName(numeric_level)}"
              + (f", writing to {log_file}" if log_file else ""))
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a child logger with the given name"""
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
