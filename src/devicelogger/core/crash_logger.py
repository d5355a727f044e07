from __future__ import annotations

"""
Crash Logger (Fault Interceptors).

Captures uncaught exceptions and fatal signals, writes a CRASH line to the
log file, notifies the listener and persists a CrashRecord that the next
launch retrieves when it arms the logger again.

Two capture paths exist because Python cannot run interpreter code inside a
synchronous fault:
- Uncaught exceptions and asynchronously delivered fatal signals (SIGPIPE,
  SIGTRAP) run full Python handlers on the main thread.
- Synchronous faults (SIGSEGV, SIGFPE, SIGBUS, SIGILL, SIGABRT) are left to
  'faulthandler', which dumps the traceback into a dedicated file with
  async-signal-safe code and then chains to the previous handler. The dump
  is turned into a CrashRecord when the next process arms.
"""

import faulthandler
import logging
import os
import re
import signal
import sys
import threading
import traceback
from types import FrameType, TracebackType
from typing import Any, Callable, Dict, IO, Iterable, List, Optional, Type

from devicelogger.core.crash_store import CrashStore
from devicelogger.core.listener import ListenerForwarder
from devicelogger.core.writer import LogWriter, current_queue_name
from devicelogger.domain.constants import (
    ASYNC_FATAL_SIGNALS,
    CRASH_DOMAIN,
    CRASH_MARKER,
    CRASH_SOURCE_EXCEPTION,
    CRASH_SOURCE_SIGNAL,
    FAULT_HEADLINES,
    NATIVE_FATAL_SIGNALS,
    UNKNOWN_SIGNAL_NAME,
)
from devicelogger.domain.levels import LogDomain, LogLevel
from devicelogger.domain.models import CrashRecord, LogEvent

logger = logging.getLogger(__name__)

_FAULT_HEADLINE_PREFIX = "Fatal Python error: "
_FAULT_FRAME_RE = re.compile(r'^\s*File "(?P<file>.*)", line (?P<line>\d+) in (?P<func>.+)$')


# ==============================================================================
# HELPERS
# ==============================================================================

def signal_name(signum: int) -> str:
    """Symbolic name of a signal number, or 'OTHER' when unknown."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        return UNKNOWN_SIGNAL_NAME


def signal_reason(name: str, signum: int) -> str:
    return f"Signal {name}({signum}) was raised."


def format_frames(frames: Iterable[traceback.FrameSummary]) -> List[str]:
    """Render stack frames oldest first, one 'file:line in function' entry each."""
    return [f"{fs.filename}:{fs.lineno} in {fs.name}" for fs in frames]


def terminate_process(signum: int) -> None:
    """Kill the current process without unwinding."""
    sigkill = getattr(signal, "SIGKILL", None)
    if sigkill is not None:
        os.kill(os.getpid(), sigkill)
    os._exit(128 + signum)


def parse_fault_dump(text: str) -> Optional[CrashRecord]:
    """
    Convert a faulthandler dump into a CrashRecord.

    Only the current thread's frames are kept, reordered oldest first to
    match the stacks captured at Python level.

    Args:
        text: Raw dump content.

    Returns:
        Optional[CrashRecord]: The record, or None if the dump holds no
        fatal error.
    """
    lines = text.splitlines()
    headline = None
    for line in lines:
        if line.startswith(_FAULT_HEADLINE_PREFIX):
            headline = line[len(_FAULT_HEADLINE_PREFIX):].strip()
            break

    if headline is None:
        return None

    name = FAULT_HEADLINES.get(headline, UNKNOWN_SIGNAL_NAME)
    signum = getattr(signal, name, None)
    if signum is not None:
        reason = signal_reason(name, int(signum))
    else:
        reason = f"Fatal error: {headline}"

    stack: List[str] = []
    in_current = False
    for line in lines:
        if line.startswith("Current thread"):
            in_current = True
            continue
        if in_current:
            match = _FAULT_FRAME_RE.match(line)
            if match:
                stack.append(f"{match.group('file')}:{match.group('line')} in {match.group('func')}")
            elif not line.strip():
                break

    if not stack:
        for line in lines:
            match = _FAULT_FRAME_RE.match(line)
            if match:
                stack.append(f"{match.group('file')}:{match.group('line')} in {match.group('func')}")

    stack.reverse()
    return CrashRecord(name=name, reason=reason, call_stack=stack)


def _resolve_signals(names: Iterable[str]) -> List[int]:
    return [int(getattr(signal, n)) for n in names if hasattr(signal, n)]


# ==============================================================================
# CRASH LOGGER
# ==============================================================================

class CrashLogger:
    """
    Installs the fault interceptors and reports captured crashes.

    States: unarmed -> armed. Once armed the interceptors stay installed for
    the rest of the process; a fatal signal ends in termination.
    """

    def __init__(
            self,
            writer: LogWriter,
            forwarder: ListenerForwarder,
            crash_store: CrashStore,
            dump_path: str,
            save_to_file: Callable[[], bool] = lambda: True,
            terminate: Callable[[int], Any] = terminate_process,
            write_timeout: float = 1.0,
    ) -> None:
        """
        Args:
            writer: Log writer receiving the CRASH line.
            forwarder: Listener forwarder notified of the crash.
            crash_store: Single-slot persistence for the record.
            dump_path: File receiving faulthandler output.
            save_to_file: Read at crash time; False skips the CRASH line.
            terminate: Ends the process after a fatal signal.
            write_timeout: Bound on waiting for the writer lock in a handler.
        """
        self._writer = writer
        self._forwarder = forwarder
        self._crash_store = crash_store
        self._dump_path = dump_path
        self._save_to_file = save_to_file
        self._terminate = terminate
        self._write_timeout = write_timeout

        self._arm_lock = threading.Lock()
        self._armed = False
        self._previous_excepthook: Optional[Callable[..., Any]] = None
        self._previous_signal_handlers: Dict[int, Any] = {}
        self._fault_file: Optional[IO[str]] = None

    @property
    def is_armed(self) -> bool:
        return self._armed

    @property
    def dump_path(self) -> str:
        return self._dump_path

    # -------------------------------------------------------------------------
    # ARMING
    # -------------------------------------------------------------------------

    def arm(self) -> Optional[CrashRecord]:
        """
        Install the interceptors and return the crash left by a previous run.

        Idempotent: calls after the first one change nothing and return None.

        Returns:
            Optional[CrashRecord]: The pending record, delivered once.
        """
        with self._arm_lock:
            if self._armed:
                return None

            self._recover_fault_dump()

            self._previous_excepthook = sys.excepthook
            sys.excepthook = self.handle_exception

            self._install_signal_handlers()
            self._enable_faulthandler()
            self._armed = True

        logger.debug("CrashLogger: Armed")
        return self._crash_store.consume()

    # -------------------------------------------------------------------------
    # INTERCEPTORS
    # -------------------------------------------------------------------------

    def handle_exception(
            self,
            exc_type: Type[BaseException],
            exc: BaseException,
            tb: Optional[TracebackType],
    ) -> None:
        """
        sys.excepthook replacement.

        Chains to the previous hook first, then records the crash. The
        interpreter terminates once this returns.
        """
        previous = self._previous_excepthook
        if previous is not None:
            try:
                previous(exc_type, exc, tb)
            except Exception as e:
                logger.error(f"CrashLogger: Previous exception hook failed: {e}")

        if not self._armed or issubclass(exc_type, KeyboardInterrupt):
            return

        record = CrashRecord(
            name=exc_type.__name__,
            reason=str(exc),
            call_stack=format_frames(traceback.extract_tb(tb)),
        )
        self._report(record, CRASH_SOURCE_EXCEPTION)

    def handle_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        """
        Handler for fatal signals delivered at Python level.

        Records the crash, chains to a previous Python-level handler, restores
        default dispositions and terminates the process.
        """
        if not self._armed:
            return

        try:
            name = signal_name(signum)
            record = CrashRecord(
                name=name,
                reason=signal_reason(name, int(signum)),
                call_stack=self._capture_stack(),
            )
            self._report(record, CRASH_SOURCE_SIGNAL)
            self._chain_signal(signum, frame)
        finally:
            self._restore_defaults()
            self._terminate(signum)

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _capture_stack(self) -> List[str]:
        # The two most recent frames are this helper and handle_signal
        return format_frames(traceback.extract_stack()[:-2])

    def _report(self, record: CrashRecord, source: str, forward: bool = True) -> None:
        """Write, forward and persist a record; every step is best-effort."""
        msg = f"{record.name} - Reason: {record.reason or 'Unknown reason'}"

        try:
            if self._save_to_file():
                stack_text = "\n ".join(record.call_stack)
                self._writer.write(
                    source,
                    CRASH_MARKER,
                    CRASH_DOMAIN,
                    current_queue_name(),
                    f"{msg}\n STACK:\n {stack_text}",
                    timeout=self._write_timeout,
                )
        except Exception as e:
            logger.error(f"CrashLogger: Failed to write crash line: {e}")

        if forward:
            self._forwarder.forward(LogEvent(
                message=f"CRASH!! - {msg}",
                level=LogLevel.ERROR,
                domain=LogDomain.APP,
                source=source,
            ))

        if not self._crash_store.persist(record):
            logger.error(f"CrashLogger: Crash record '{record.name}' could not be persisted")

    def _chain_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        previous = self._previous_signal_handlers.get(signum)
        if not callable(previous) or previous == self.handle_signal:
            return
        try:
            previous(signum, frame)
        except Exception as e:
            logger.error(f"CrashLogger: Previous handler for {signal_name(signum)} failed: {e}")

    def _install_signal_handlers(self) -> None:
        for signum in _resolve_signals(ASYNC_FATAL_SIGNALS):
            try:
                previous = signal.signal(signum, self.handle_signal)
            except (OSError, RuntimeError, ValueError) as e:
                logger.warning(f"CrashLogger: Cannot intercept {signal_name(signum)}: {e}")
                continue
            self._previous_signal_handlers[signum] = previous

    def _enable_faulthandler(self) -> None:
        try:
            os.makedirs(os.path.dirname(self._dump_path) or ".", exist_ok=True)
            self._fault_file = open(self._dump_path, "w", encoding="utf-8")
            faulthandler.enable(file=self._fault_file, all_threads=True)
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning(f"CrashLogger: Native fault capture unavailable: {e}")

    def _restore_defaults(self) -> None:
        sys.excepthook = sys.__excepthook__

        if faulthandler.is_enabled():
            faulthandler.disable()

        for signum in _resolve_signals(ASYNC_FATAL_SIGNALS + NATIVE_FATAL_SIGNALS):
            try:
                signal.signal(signum, signal.SIG_DFL)
            except (OSError, RuntimeError, ValueError):
                pass

    def _recover_fault_dump(self) -> None:
        """Turn a dump left by a native fault of the previous run into a record."""
        try:
            with open(self._dump_path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"CrashLogger: Cannot read fault dump {self._dump_path}: {e}")
            return

        record = parse_fault_dump(text)
        if record is None:
            return

        logger.warning(f"CrashLogger: Recovered native fault from previous run: {record.name}")
        self._report(record, CRASH_SOURCE_SIGNAL, forward=False)

        try:
            open(self._dump_path, "w").close()
        except OSError as e:
            logger.warning(f"CrashLogger: Cannot reset fault dump {self._dump_path}: {e}")
