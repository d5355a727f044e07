from __future__ import annotations

"""
Logger Configuration Model.

Immutable startup configuration of the logging service. Runtime changes
(minimum level, size limit, file name) go through the service itself; this
object only carries the values used at construction.
"""

from dataclasses import dataclass

from devicelogger.domain.constants import DEFAULT_FILE_NAME, DEFAULT_MAXIMUM_FILE_SIZE_MB
from devicelogger.domain.levels import LogLevel


@dataclass(frozen=True)
class LoggerConfig:
    """
    Startup values for a DeviceLogger instance.

    Attributes:
        minimum_level: Lowest severity written to the file.
        maximum_file_size_mb: Size above which the file is truncated.
            Fractional values are accepted.
        file_name: Log file name without extension, used when no name was
            persisted by a previous run.
        save_crashes_to_file: Write a CRASH line when a fault is intercepted.
    """
    minimum_level: LogLevel = LogLevel.INFO
    maximum_file_size_mb: float = DEFAULT_MAXIMUM_FILE_SIZE_MB
    file_name: str = DEFAULT_FILE_NAME
    save_crashes_to_file: bool = True
