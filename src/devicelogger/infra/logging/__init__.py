from __future__ import annotations

from .config import LoggingConfig
from .core import (
    _CONFIGURED_FLAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    get_default_diagnostics_path,
    get_logger,
    shutdown_logging,
)
from .handlers import _HANDLER_TAG_ATTR, _is_our_handler, _tag_handler

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "get_default_diagnostics_path",
    "shutdown_logging",
]
