from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A frozen clock so rendered log lines are deterministic.
3. Service and hook fixtures isolated under pytest's tmp_path.
"""

import os
import sys
from datetime import datetime
from typing import Any, Dict, Generator, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from devicelogger.domain.config import LoggerConfig  # noqa: E402
from devicelogger.service import DeviceLogger  # noqa: E402

FROZEN_MOMENT = datetime(2026, 10, 19, 14, 3, 59)
FROZEN_STAMP = "10/19/26 14:03:59"


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def frozen_clock() -> Any:
    """Clock returning a fixed moment."""
    return lambda: FROZEN_MOMENT


@pytest.fixture
def fixed_formatter() -> Any:
    """Timestamp formatter independent of the host locale."""
    return lambda moment: moment.strftime("%m/%d/%y %H:%M:%S")


@pytest.fixture
def terminations() -> List[int]:
    """Collects signal numbers passed to the injected process terminator."""
    return []


@pytest.fixture
def device_logger(
        tmp_path: Any,
        frozen_clock: Any,
        fixed_formatter: Any,
        terminations: List[int],
) -> Generator[DeviceLogger, None, None]:
    """
    Provide a DeviceLogger rooted in a temporary directory.

    The terminator only records the signal so crash tests never kill pytest.

    Yields:
        DeviceLogger: Service with default configuration.
    """
    service = DeviceLogger(
        config=LoggerConfig(),
        root_dir=str(tmp_path),
        clock=frozen_clock,
        formatter=fixed_formatter,
        terminate=terminations.append,
    )
    yield service
    service.close()


@pytest.fixture
def isolated_fault_hooks(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    """
    Replace interpreter-wide fault hooks with recorders.

    signal.signal, faulthandler and sys.excepthook are restored by
    monkeypatch after the test, so arming a CrashLogger leaves no trace.

    Returns:
        Dict[str, Any]: Recorded calls: 'signals' (signum, handler) pairs,
        'faulthandler' enable/disable events.
    """
    import faulthandler
    import signal

    calls: Dict[str, Any] = {"signals": [], "faulthandler": []}
    installed: Dict[int, Any] = {}
    enabled = {"value": False}

    def fake_signal(signum: int, handler: Any) -> Any:
        calls["signals"].append((signum, handler))
        previous = installed.get(signum, signal.SIG_DFL)
        installed[signum] = handler
        return previous

    def fake_enable(file: Any = None, all_threads: bool = True) -> None:
        enabled["value"] = True
        calls["faulthandler"].append(("enable", getattr(file, "name", None)))

    def fake_disable() -> None:
        enabled["value"] = False
        calls["faulthandler"].append(("disable", None))

    monkeypatch.setattr(signal, "signal", fake_signal)
    monkeypatch.setattr(faulthandler, "enable", fake_enable)
    monkeypatch.setattr(faulthandler, "disable", fake_disable)
    monkeypatch.setattr(faulthandler, "is_enabled", lambda: enabled["value"])
    monkeypatch.setattr(sys, "excepthook", sys.__excepthook__)

    calls["installed"] = installed
    return calls

