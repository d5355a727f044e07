from __future__ import annotations

"""
stdlib Logging Bridge.

Routes records emitted through the 'logging' module into a DeviceLogger, so
application code can keep using module-level loggers while the device log
file receives the events.

Usage:
    start_listening(device_logger)
    logging.getLogger("app.network").warning("retrying", extra={"domain": LogDomain.NETWORK})
"""

import logging
from typing import Optional

from devicelogger.domain.levels import LogDomain, LogLevel
from devicelogger.service import DeviceLogger

# Diagnostics of this package never loop back into the device log
_OWN_LOGGER_PREFIX = "devicelogger"


class DeviceLogHandler(logging.Handler):
    """logging.Handler that feeds a DeviceLogger."""

    def __init__(self, device_logger: DeviceLogger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._device_logger = device_logger

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _OWN_LOGGER_PREFIX or record.name.startswith(_OWN_LOGGER_PREFIX + "."):
            return

        try:
            message = record.getMessage()
            if record.exc_info:
                formatter = self.formatter or logging.Formatter()
                message = f"{message}\n{formatter.formatException(record.exc_info)}"

            self._device_logger.log(
                message,
                LogLevel.from_logging_level(record.levelno),
                _record_domain(record),
                record.name,
            )
        except Exception:
            self.handleError(record)


def start_listening(
        device_logger: DeviceLogger,
        target: Optional[logging.Logger] = None,
) -> DeviceLogHandler:
    """
    Attach a DeviceLogHandler to a logger (root by default).

    Calling it again for the same target replaces the previous bridge handler
    instead of adding a second one.

    Args:
        device_logger: Service receiving the records.
        target: Logger to listen to.

    Returns:
        DeviceLogHandler: The attached handler.
    """
    target = target or logging.getLogger()
    stop_listening(target)

    handler = DeviceLogHandler(device_logger)
    target.addHandler(handler)
    return handler


def stop_listening(target: Optional[logging.Logger] = None) -> None:
    """Detach every bridge handler from a logger (root by default)."""
    target = target or logging.getLogger()
    for h in list(target.handlers):
        if isinstance(h, DeviceLogHandler):
            target.removeHandler(h)
            h.close()


def _record_domain(record: logging.LogRecord) -> LogDomain:
    domain = getattr(record, "domain", None)
    if isinstance(domain, LogDomain):
        return domain
    if isinstance(domain, str):
        for member in LogDomain:
            if domain.strip().lower() in (member.name.lower(), member.value.lower()):
                return member
    return LogDomain.APP
