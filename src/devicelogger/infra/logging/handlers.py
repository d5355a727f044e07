from __future__ import annotations

"""
Diagnostics Sinks.

Factories for the handlers that sit behind the diagnostics queue, plus the
marker attribute that separates handlers owned by this package from the ones
a host application attached to the same root logger (including the device
log bridge, which must survive a diagnostics reconfiguration).
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from devicelogger.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_devicelogger_handler"


# ==============================================================================
# OWNERSHIP MARKER
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> logging.Handler:
    """Mark a handler as managed by the diagnostics channel and return it."""
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


# ==============================================================================
# SINK FACTORIES
# ==============================================================================

def build_sinks(cfg: LoggingConfig, level: int) -> List[logging.Handler]:
    """
    Create the handlers the queue listener dispatches to.

    Args:
        cfg: Diagnostics settings.
        level: Numeric threshold applied to every sink.

    Returns:
        List[logging.Handler]: Console and/or file sinks; empty when both are off
        or the file cannot be opened and the console is disabled.
    """
    sinks: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        sinks.append(_tag_handler(console))

    if cfg.log_file:
        rotating = _open_rotating_file(cfg, level)
        if rotating is not None:
            sinks.append(rotating)

    return sinks


def _open_rotating_file(cfg: LoggingConfig, level: int) -> Optional[RotatingFileHandler]:
    """
    Open the diagnostics file, rolling it over at 'cfg.max_bytes'.

    An unwritable location is reported on stderr and yields None: the
    diagnostics channel degrades to the console instead of failing the caller.
    """
    path = os.path.abspath(cfg.log_file)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Diagnostics file unavailable at '{path}': {e}\n")
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
    return _tag_handler(handler)
