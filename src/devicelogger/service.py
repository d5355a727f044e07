from __future__ import annotations

"""
DeviceLogger Service.

The explicitly constructed service object that owns one log file, one
listener slot and one crash logger. Construct it once at startup and pass it
to the callers that need it; tests build independent instances on isolated
storage roots.

Emission path: severity filter -> log writer -> size guard -> listener.
"""

import logging
import os
import threading
from types import TracebackType
from typing import Any, Callable, Optional, Type

from devicelogger.core.crash_logger import CrashLogger, terminate_process
from devicelogger.core.crash_store import CrashStore
from devicelogger.core.listener import ListenerForwarder, ListenerLike
from devicelogger.core.size_guard import SizeGuard
from devicelogger.core.writer import LogWriter, current_queue_name
from devicelogger.domain.config import LoggerConfig
from devicelogger.domain.constants import (
    BYTES_PER_MB,
    FAULT_DUMP_FILENAME,
    STORE_FILENAME,
    STORE_KEY_FILE_NAME,
)
from devicelogger.domain.levels import LogDomain, LogLevel, should_admit
from devicelogger.domain.models import CrashRecord, LogEvent
from devicelogger.infra.clock import Clock, TimestampFormatter, localized_timestamp, system_clock
from devicelogger.infra.fs import is_valid_file_name, resolve_root
from devicelogger.infra.store import KeyValueStore

logger = logging.getLogger(__name__)


class DeviceLogger:
    """
    Process-local log sink with crash capture.
    """

    def __init__(
            self,
            config: Optional[LoggerConfig] = None,
            root_dir: Optional[str] = None,
            store: Optional[KeyValueStore] = None,
            clock: Clock = system_clock,
            formatter: TimestampFormatter = localized_timestamp,
            terminate: Callable[[int], Any] = terminate_process,
    ) -> None:
        """
        Initialize the service, reopen the persisted log file and check its size.

        Args:
            config: Startup values; defaults to LoggerConfig().
            root_dir: Storage root; defaults to the user data directory.
            store: Durable key-value store; defaults to '<root>/store.json'.
            clock: Time source for rendered lines.
            formatter: Timestamp renderer for rendered lines.
            terminate: Process terminator used after a fatal signal.
        """
        cfg = config or LoggerConfig()

        self._root_dir = resolve_root(root_dir)
        self._store = store or KeyValueStore(os.path.join(self._root_dir, STORE_FILENAME))

        self._config_lock = threading.Lock()
        self._minimum_level = cfg.minimum_level
        self._maximum_file_size_mb = cfg.maximum_file_size_mb
        self._save_crashes_to_file = cfg.save_crashes_to_file

        self._writer = LogWriter(self._root_dir, clock=clock, formatter=formatter)
        self._size_guard = SizeGuard(self._writer)
        self._forwarder = ListenerForwarder()
        self._crash_store = CrashStore(self._store)
        self._crash_logger = CrashLogger(
            writer=self._writer,
            forwarder=self._forwarder,
            crash_store=self._crash_store,
            dump_path=os.path.join(self._root_dir, FAULT_DUMP_FILENAME),
            save_to_file=lambda: self.save_crashes_to_file,
            terminate=terminate,
        )

        persisted = self._store.get(STORE_KEY_FILE_NAME)
        file_name = persisted if is_valid_file_name(persisted) else cfg.file_name
        self._initialize_file(file_name)
        self._check_file_size()

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------

    @property
    def root_dir(self) -> str:
        return self._root_dir

    @property
    def minimum_level(self) -> LogLevel:
        """Minimum level to write logs into the file."""
        with self._config_lock:
            return self._minimum_level

    @minimum_level.setter
    def minimum_level(self, level: LogLevel) -> None:
        try:
            level = LogLevel(level)
        except (TypeError, ValueError):
            logger.warning(f"DeviceLogger: Ignored unknown minimum level {level!r}")
            return
        with self._config_lock:
            self._minimum_level = level

    @property
    def maximum_file_size_mb(self) -> float:
        """Maximum allowed file size in MB; setting it triggers a size check."""
        with self._config_lock:
            return self._maximum_file_size_mb

    @maximum_file_size_mb.setter
    def maximum_file_size_mb(self, value: float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            logger.warning(f"DeviceLogger: Ignored invalid maximum file size {value!r}")
            return
        with self._config_lock:
            self._maximum_file_size_mb = value
        self._check_file_size()

    @property
    def save_crashes_to_file(self) -> bool:
        with self._config_lock:
            return self._save_crashes_to_file

    @save_crashes_to_file.setter
    def save_crashes_to_file(self, value: bool) -> None:
        with self._config_lock:
            self._save_crashes_to_file = bool(value)

    @property
    def listener(self) -> Optional[ListenerLike]:
        """Listener receiving every admitted event (held weakly)."""
        return self._forwarder.listener

    @listener.setter
    def listener(self, listener: Optional[ListenerLike]) -> None:
        self._forwarder.listener = listener

    @property
    def file_name(self) -> str:
        """Name of the log file without extension."""
        return self._writer.file_name

    @file_name.setter
    def file_name(self, new_name: str) -> None:
        if not is_valid_file_name(new_name):
            logger.warning(f"DeviceLogger: Rejected invalid log file name {new_name!r}")
            return

        new_name = new_name.strip()
        with self._writer.lock:
            if new_name == self._writer.file_name:
                return
            self._writer.rename(new_name)
            self._store.set(STORE_KEY_FILE_NAME, new_name)

    # -------------------------------------------------------------------------
    # FILE ACCESS
    # -------------------------------------------------------------------------

    @property
    def log_file_path(self) -> Optional[str]:
        return self._writer.path

    @property
    def current_file_size(self) -> int:
        """Current log file size in whole MB."""
        return self._writer.size_bytes // BYTES_PER_MB

    @property
    def current_file_size_bytes(self) -> int:
        return self._writer.size_bytes

    def get_log_data(self) -> Optional[bytes]:
        return self._writer.read_all()

    def get_log_content(self) -> Optional[str]:
        """
        Returns:
            Optional[str]: Whole log file decoded as UTF-8, or None if missing.
        """
        data = self._writer.read_all()
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")

    def get_recent_lines(self, n_lines: int = 100) -> Optional[str]:
        """Return the last n lines of the log file."""
        content = self.get_log_content()
        if content is None:
            return None
        if n_lines <= 0:
            return ""
        return "".join(content.splitlines(keepends=True)[-n_lines:])

    def clear_logs(self) -> None:
        """Clear all the content in the file."""
        if self._writer.clear():
            logger.warning("DeviceLogger: Log file is cleared")

    # -------------------------------------------------------------------------
    # EMISSION
    # -------------------------------------------------------------------------

    def log(
            self,
            message: str,
            level: LogLevel,
            domain: LogDomain = LogDomain.APP,
            source: str = "",
    ) -> bool:
        """
        Filter, write and forward one event.

        Args:
            message: Event text.
            level: Event severity.
            domain: Subsystem tag.
            source: Caller identifier.

        Returns:
            bool: True if the event was admitted by the severity filter.
        """
        if not should_admit(level, self.minimum_level):
            return False

        event = LogEvent(message=message, level=level, domain=domain, source=source)
        self.emit(event)
        return True

    def emit(self, event: LogEvent) -> None:
        """Write and forward an already admitted event."""
        self._writer.write(
            event.source,
            event.level,
            event.domain,
            current_queue_name(),
            event.message,
        )
        self._check_file_size()
        self._forwarder.forward(event)

    def verbose(self, message: str, domain: LogDomain = LogDomain.APP, source: str = "") -> bool:
        return self.log(message, LogLevel.VERBOSE, domain, source)

    def info(self, message: str, domain: LogDomain = LogDomain.APP, source: str = "") -> bool:
        return self.log(message, LogLevel.INFO, domain, source)

    def warning(self, message: str, domain: LogDomain = LogDomain.APP, source: str = "") -> bool:
        return self.log(message, LogLevel.WARNING, domain, source)

    def error(self, message: str, domain: LogDomain = LogDomain.APP, source: str = "") -> bool:
        return self.log(message, LogLevel.ERROR, domain, source)

    # -------------------------------------------------------------------------
    # CRASH CAPTURE
    # -------------------------------------------------------------------------

    @property
    def crash_logger(self) -> CrashLogger:
        return self._crash_logger

    @property
    def crash_store(self) -> CrashStore:
        return self._crash_store

    def start_crash_capture(self) -> Optional[CrashRecord]:
        """
        Arm the fault interceptors and return the crash of the previous run.

        Returns:
            Optional[CrashRecord]: The pending record, delivered once.
        """
        return self._crash_logger.arm()

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def close(self) -> None:
        self._writer.close()

    def __enter__(self) -> "DeviceLogger":
        return self

    def __exit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _initialize_file(self, file_name: str) -> None:
        self._writer.initialize(file_name)
        self._store.set(STORE_KEY_FILE_NAME, file_name)

    def _check_file_size(self) -> None:
        self._size_guard.check(self.maximum_file_size_mb)
