from __future__ import annotations

"""
Logging Domain Data Models.

Defines the immutable event passed through the emission path and the
crash record captured by the fault interceptors, including the flat
mapping used to persist a crash across application restarts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from devicelogger.domain.levels import LogDomain, LogLevel

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LogEvent:
    """
    A single log call as received by the service.

    Attributes:
        message: Free text of the event.
        level: Severity of the event.
        domain: Subsystem tag.
        source: Identifier of the calling site.
    """
    message: str
    level: LogLevel
    domain: LogDomain = LogDomain.APP
    source: str = ""


@dataclass(frozen=True)
class CrashRecord:
    """
    Minimal capture of a fault, persisted for retrieval on the next launch.

    Attributes:
        name: Exception class name or signal name.
        reason: Human readable description of the fault.
        call_stack: Ordered stack entries, one frame per entry.
    """
    name: str
    reason: str
    call_stack: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the flat mapping stored in the key-value store."""
        return {
            "name": self.name,
            "reason": self.reason,
            "callStack": list(self.call_stack),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CrashRecord"]:
        """
        Rebuild a record from its persisted mapping.

        Args:
            data: Raw value read from the store.

        Returns:
            Optional[CrashRecord]: The record, or None if the mapping is
            missing a field or holds a value of the wrong type.
        """
        if not isinstance(data, Mapping):
            return None

        name = data.get("name")
        reason = data.get("reason")
        call_stack = data.get("callStack")

        if not isinstance(name, str) or not isinstance(reason, str):
            return None
        if not isinstance(call_stack, list) or not all(isinstance(s, str) for s in call_stack):
            return None

        return cls(name=name, reason=reason, call_stack=list(call_stack))
