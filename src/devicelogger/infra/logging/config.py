from __future__ import annotations

"""
Diagnostics Channel Settings.

The package reports its own failures (unwritable log file, unreadable store,
failing listener) through the stdlib 'logging' tree. This module holds the
settings of that channel; it is unrelated to the device log file itself.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings of the diagnostics channel.

    Attributes:
        level: Threshold name ('DEBUG' ... 'CRITICAL'); unknown names mean INFO.
        console: Mirror diagnostics on stderr.
        log_file: Optional path of a rotating diagnostics file.
        max_bytes: Rollover size of the diagnostics file.
        backup_count: Rolled-over diagnostics files to keep.
        console_fmt: Format of stderr records.
        file_fmt: Format of file records.
        datefmt: Timestamp format of file records.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 1

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @property
    def level_number(self) -> int:
        return _LEVEL_MAP.get(str(self.level or "").strip().upper(), logging.INFO)
