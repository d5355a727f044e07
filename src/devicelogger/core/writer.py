from __future__ import annotations

"""
Append-Only Log Writer.

Owns the single active log file of a service instance: its name, its open
handle and its cached size. Every access to that state goes through one
re-entrant lock, so concurrent writes never interleave partial lines and a
rename or clear never races an in-flight write.

The handle is opened unbuffered in append mode; each rendered line reaches
the file through a single write call.

A signal handler running on the thread that holds the lock re-enters it.
Between two writes its line lands after the last complete one; inside
'rename', after the old handle is closed and before the new one is open,
there is no handle and its line is dropped.
"""

import logging
import os
import threading
from typing import BinaryIO, Optional, Union

from devicelogger.domain.levels import LogDomain, LogLevel
from devicelogger.infra.clock import Clock, TimestampFormatter, localized_timestamp, system_clock
from devicelogger.infra.fs import log_file_path, safe_mkdir, safe_remove

logger = logging.getLogger(__name__)


def current_queue_name() -> str:
    """Name of the emitting execution context (the current thread)."""
    return threading.current_thread().name


class LogWriter:
    """
    Serializes log lines into '<root>/<file_name>.log'.
    """

    def __init__(
            self,
            root_dir: str,
            clock: Clock = system_clock,
            formatter: TimestampFormatter = localized_timestamp,
    ) -> None:
        """
        Args:
            root_dir: Directory holding the log file.
            clock: Source of the current time for rendered lines.
            formatter: Renders the timestamp between the brackets.
        """
        self._root_dir = root_dir
        self._clock = clock
        self._formatter = formatter

        self._lock = threading.RLock()
        self._handle: Optional[BinaryIO] = None
        self._file_name: Optional[str] = None
        self._size_bytes = 0

    # -------------------------------------------------------------------------
    # STATE ACCESSORS
    # -------------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def file_name(self) -> Optional[str]:
        with self._lock:
            return self._file_name

    @property
    def path(self) -> Optional[str]:
        with self._lock:
            if self._file_name is None:
                return None
            return log_file_path(self._root_dir, self._file_name)

    @property
    def size_bytes(self) -> int:
        """Cached size of the active file, refreshed on every write and clear."""
        with self._lock:
            return self._size_bytes

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._handle is not None

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def initialize(self, file_name: str) -> bool:
        """
        Ensure '<file_name>.log' exists and open it for appending.

        A failure is reported through diagnostics only; the handle then stays
        absent and subsequent writes are dropped until the next successful
        initialization.

        Args:
            file_name: Log file name without extension.

        Returns:
            bool: True if the handle is open.
        """
        with self._lock:
            self._close_handle()
            self._file_name = file_name
            self._size_bytes = 0

            ok, err = safe_mkdir(self._root_dir)
            if not ok:
                logger.warning(f"LogWriter: Cannot create log directory {self._root_dir}: {err}")
                return False

            path = log_file_path(self._root_dir, file_name)
            try:
                # 'ab' creates the file empty when absent and keeps existing content
                self._handle = open(path, "ab", buffering=0)
                self._size_bytes = os.fstat(self._handle.fileno()).st_size
            except OSError as e:
                logger.warning(f"LogWriter: Cannot open log file {path}: {e}")
                self._handle = None
                return False

            logger.debug(f"LogWriter: Log file ready at {path} ({self._size_bytes} bytes)")
            return True

    def close(self) -> None:
        with self._lock:
            self._close_handle()

    # -------------------------------------------------------------------------
    # OPERATIONS
    # -------------------------------------------------------------------------

    def render_line(
            self,
            source: str,
            level: Union[LogLevel, str],
            queue: str,
            message: str,
    ) -> str:
        """
        Build the text record for one log call.

        Args:
            source: Caller identifier.
            level: Severity (rendered as its marker) or a literal marker.
            queue: Name of the emitting execution context.
            message: Event text.

        Returns:
            str: '[timestamp] L >> source: message [QUEUE: queue]' plus newline.
        """
        marker = level.marker if isinstance(level, LogLevel) else str(level)
        stamp = self._formatter(self._clock())
        return f"[{stamp}] {marker} >> {source}: {message} [QUEUE: {queue}]\n"

    def write(
            self,
            source: str,
            level: Union[LogLevel, str],
            domain: Union[LogDomain, str],
            queue: str,
            message: str,
            timeout: float = -1,
    ) -> bool:
        """
        Append one rendered line at the end of the active file.

        The domain travels with the call but is not part of the line format.

        Args:
            source: Caller identifier.
            level: Severity or literal marker.
            domain: Subsystem tag of the event.
            queue: Name of the emitting execution context.
            message: Event text.
            timeout: Seconds to wait for the writer lock; -1 waits forever.

        Returns:
            bool: True if the line reached the file.
        """
        if not self._lock.acquire(timeout=timeout):
            logger.debug(f"LogWriter: Writer busy, dropped line from {source}")
            return False

        try:
            if self._handle is None:
                logger.debug(f"LogWriter: No open log file, dropped line from {source}")
                return False

            try:
                data = self.render_line(source, level, queue, message).encode("utf-8")
            except UnicodeError as e:
                logger.debug(f"LogWriter: Unencodable message from {source} dropped: {e}")
                return False

            try:
                self._write_all(data)
                self._size_bytes = os.fstat(self._handle.fileno()).st_size
            except OSError as e:
                logger.warning(f"LogWriter: Write to {self.path} failed: {e}")
                return False

            return True
        finally:
            self._lock.release()

    def rename(self, new_file_name: str) -> bool:
        """
        Switch to a new log file, deleting the current one.

        No data is carried over. A name equal to the current one is a no-op.

        Args:
            new_file_name: New log file name without extension.

        Returns:
            bool: True if a rotation took place and the new file is open.
        """
        with self._lock:
            if new_file_name == self._file_name:
                return False

            old_path = self.path
            self._close_handle()

            if old_path:
                ok, err = safe_remove(old_path)
                if not ok:
                    logger.warning(f"LogWriter: Couldn't delete log file {old_path}: {err}")

            return self.initialize(new_file_name)

    def clear(self) -> bool:
        """
        Truncate the active file to empty in place.

        Returns:
            bool: True if the file is now empty.
        """
        with self._lock:
            path = self.path
            if path is None:
                return False

            if self._handle is None or not os.path.exists(path):
                if not self.initialize(self._file_name):
                    return False

            try:
                self._handle.truncate(0)
                self._size_bytes = 0
            except OSError as e:
                logger.warning(f"LogWriter: Can't truncate log file {path}: {e}")
                return False

            return True

    def read_all(self) -> Optional[bytes]:
        """
        Return the full content of the active file.

        Returns:
            Optional[bytes]: File bytes, or None if the file is missing.
        """
        with self._lock:
            path = self.path
            if path is None or not os.path.exists(path):
                return None
            try:
                with open(path, "rb") as f:
                    return f.read()
            except OSError as e:
                logger.warning(f"LogWriter: Can't read log file {path}: {e}")
                return None

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self._handle.write(view)
            if not written:
                raise OSError("short write to log file")
            view = view[written:]

    def _close_handle(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.close()
        except OSError as e:
            logger.debug(f"LogWriter: Error closing log file: {e}")
        finally:
            self._handle = None
