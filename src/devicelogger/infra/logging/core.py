from __future__ import annotations

"""
Diagnostics Channel Lifecycle.

Installs a single QueueHandler on the root logger and drains it from a
QueueListener thread, so a diagnostic emitted while the device log writer
holds its lock never blocks on console or file I/O. Configuration is
idempotent and reversible: 'shutdown_logging' detaches exactly what
'configure_logging' attached and leaves foreign handlers in place.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional

from devicelogger.infra.fs import get_user_data_dir
from devicelogger.infra.logging.config import LoggingConfig
from devicelogger.infra.logging.handlers import _is_our_handler, _tag_handler, build_sinks

_CONFIGURED_FLAG_ATTR: str = "_devicelogger_configured"
_QUEUE_LISTENER_ATTR: str = "_devicelogger_queue_listener"

DIAGNOSTICS_DIR_NAME = "diagnostics"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_diagnostics_path(file_name: str = "diagnostics.log") -> str:
    """Path of the diagnostics file inside the user data directory."""
    return os.path.join(get_user_data_dir(), DIAGNOSTICS_DIR_NAME, file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach the diagnostics channel to the root logger.

    A second call is a no-op unless 'force' is set, in which case the previous
    channel is torn down first. If building the channel fails, an emergency
    stderr handler is installed instead so diagnostics are never lost silently.

    Args:
        cfg: Channel settings.
        force: Replace an existing configuration.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    _detach(root)

    try:
        level = cfg.level_number
        root.setLevel(level)

        sinks = build_sinks(cfg, level)
        if not sinks:
            return root

        records: queue.Queue = queue.Queue(-1)
        listener = QueueListener(records, *sinks, respect_handler_level=True)
        listener.start()

        root.addHandler(_tag_handler(QueueHandler(records)))
        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        atexit.register(_stop_listener, listener)
    except Exception as e:
        _detach(root)
        _install_emergency_console(root, e)

    return root


def shutdown_logging() -> None:
    """Flush pending diagnostics and detach the channel from the root logger."""
    _detach(logging.getLogger())


def get_logger(name: str) -> logging.Logger:
    """Module-level logger accessor (usually called with __name__)."""
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _detach(root: logging.Logger) -> None:
    """Stop the listener, close its sinks and remove tagged root handlers."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _stop_listener(listener)
        for sink in listener.handlers:
            sink.close()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


def _stop_listener(listener: Optional[QueueListener]) -> None:
    # atexit may run after an explicit shutdown already joined the thread
    if listener is not None and getattr(listener, "_thread", None) is not None:
        listener.stop()


def _install_emergency_console(root: logging.Logger, error: Exception) -> None:
    fallback = logging.StreamHandler(sys.stderr)
    fallback.setFormatter(logging.Formatter("DIAGNOSTICS FALLBACK | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(_tag_handler(fallback))
    root.setLevel(logging.INFO)
    root.warning(f"Diagnostics channel could not be configured ({error}); using stderr only.")
