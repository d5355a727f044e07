from __future__ import annotations

"""
Domain Constants.

Centralizes default values, persisted key names, and the fixed tags used
when fault interceptors write into the log file.
"""

from typing import Tuple

# -----------------------------------------------------------------------------
# LOG FILE DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_FILE_NAME = "DeviceLogs"
LOG_FILE_EXTENSION = ".log"
DEFAULT_MAXIMUM_FILE_SIZE_MB = 100
BYTES_PER_MB = 1024 * 1024

# -----------------------------------------------------------------------------
# PERSISTED STORE
# -----------------------------------------------------------------------------
STORE_FILENAME = "store.json"
STORE_KEY_FILE_NAME = "DeviceLogger.LogFileName"
STORE_KEY_CRASH_LOG = "DeviceLogger.CrashLog"

# -----------------------------------------------------------------------------
# CRASH CAPTURE
# -----------------------------------------------------------------------------
FAULT_DUMP_FILENAME = "faults.dump"
CRASH_MARKER = "CRASH"
CRASH_DOMAIN = "Logger"
CRASH_SOURCE_EXCEPTION = "DeviceLogger.Crash.Exception"
CRASH_SOURCE_SIGNAL = "DeviceLogger.Crash.Signal"
UNKNOWN_SIGNAL_NAME = "OTHER"

# Signals delivered asynchronously; safe to handle at Python level.
ASYNC_FATAL_SIGNALS: Tuple[str, ...] = ("SIGPIPE", "SIGTRAP")

# Synchronous faults; handled by faulthandler at C level.
NATIVE_FATAL_SIGNALS: Tuple[str, ...] = ("SIGABRT", "SIGILL", "SIGSEGV", "SIGFPE", "SIGBUS")

# faulthandler headline text -> signal name
FAULT_HEADLINES = {
    "Segmentation fault": "SIGSEGV",
    "Floating point exception": "SIGFPE",
    "Aborted": "SIGABRT",
    "Bus error": "SIGBUS",
    "Illegal instruction": "SIGILL",
}
