from __future__ import annotations

"""
Severity and Domain Definitions.

Defines the ordered severity scale used to admit or drop log events, the
closed set of subsystem tags attached to every event, and the pure
admission predicate shared by the service and the logging bridge.
"""

import logging
from enum import Enum, IntEnum
from typing import Dict

# -----------------------------------------------------------------------------
# SEVERITY
# -----------------------------------------------------------------------------

class LogLevel(IntEnum):
    """
    Ordered severity of a log event.

    Integer values define the ordering: verbose < info < warning < error.
    """
    VERBOSE = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @property
    def marker(self) -> str:
        """Single uppercase letter rendered in the log line."""
        return self.name[0]

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """
        Resolve a level from its textual name.

        Args:
            value: Level name, case-insensitive. Accepts the aliases
                'debug' (verbose) and 'warn' (warning).

        Returns:
            LogLevel: The matching level.

        Raises:
            ValueError: If the name is not a known level.
        """
        key = str(value or "").strip().upper()
        level = _LEVEL_ALIASES.get(key)
        if level is None:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_logging_level(cls, levelno: int) -> "LogLevel":
        """Map a numeric level of the stdlib 'logging' module onto this scale."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.VERBOSE


_LEVEL_ALIASES: Dict[str, LogLevel] = {
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.VERBOSE,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def should_admit(level: LogLevel, minimum: LogLevel) -> bool:
    """
    Decide whether an event passes the severity threshold.

    Inclusive at the threshold: an event exactly at the minimum is admitted.

    Args:
        level: Severity of the incoming event.
        minimum: Configured minimum severity.

    Returns:
        bool: True if the event must be written.
    """
    return int(level) >= int(minimum)


# -----------------------------------------------------------------------------
# DOMAINS
# -----------------------------------------------------------------------------

class LogDomain(Enum):
    """Subsystem that emitted a log event."""
    APP = "App"
    CACHE = "Cache"
    CONTROLLER = "Controller"
    DB = "Database"
    IO = "IO"
    LAYOUT = "Layout"
    MODEL = "Model"
    NETWORK = "Network"
    ROUTING = "Routing"
    SERVICE = "Service"
    VIEW = "View"

    @property
    def display_name(self) -> str:
        return self.value
