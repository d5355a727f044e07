from __future__ import annotations

"""
Listener Forwarder.

Hands every admitted event to at most one external listener. The reference
is weak: registering a listener does not keep it alive, and a collected
listener behaves as if none was registered.
"""

import logging
import threading
import weakref
from types import MethodType
from typing import Any, Callable, Optional, Protocol, Union

from devicelogger.domain.models import LogEvent

logger = logging.getLogger(__name__)


class LogListener(Protocol):
    """Anything exposing 'log(event)' can receive forwarded events."""

    def log(self, event: LogEvent) -> None:
        ...


ListenerLike = Union[LogListener, Callable[[LogEvent], Any]]


class ListenerForwarder:
    """Single-slot, non-owning listener registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ref: Optional[Callable[[], Any]] = None

    @property
    def listener(self) -> Optional[ListenerLike]:
        with self._lock:
            return self._ref() if self._ref is not None else None

    @listener.setter
    def listener(self, listener: Optional[ListenerLike]) -> None:
        with self._lock:
            if listener is None:
                self._ref = None
            elif isinstance(listener, MethodType):
                self._ref = weakref.WeakMethod(listener)
            else:
                self._ref = weakref.ref(listener)

    def forward(self, event: LogEvent) -> None:
        """
        Pass the event to the registered listener unchanged.

        Exceptions raised by the listener are reported through diagnostics
        and never reach the caller.
        """
        target = self.listener
        if target is None:
            return

        receiver = getattr(target, "log", target)
        try:
            receiver(event)
        except Exception as e:
            logger.warning(f"ListenerForwarder: Listener {target!r} failed: {e}")
