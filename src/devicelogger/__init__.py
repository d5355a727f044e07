from __future__ import annotations

from devicelogger.bridge import DeviceLogHandler, start_listening, stop_listening
from devicelogger.domain.config import LoggerConfig
from devicelogger.domain.levels import LogDomain, LogLevel, should_admit
from devicelogger.domain.models import CrashRecord, LogEvent
from devicelogger.mail import create_mail_message
from devicelogger.service import DeviceLogger

__version__ = "0.1.0"

__all__ = [
    "CrashRecord",
    "DeviceLogHandler",
    "DeviceLogger",
    "LogDomain",
    "LogEvent",
    "LogLevel",
    "LoggerConfig",
    "create_mail_message",
    "should_admit",
    "start_listening",
    "stop_listening",
]
