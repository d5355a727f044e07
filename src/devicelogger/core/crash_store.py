from __future__ import annotations

"""
Crash Record Persistence.

Single-slot storage of the last captured fault. A new crash overwrites the
slot; the next launch consumes it exactly once.
"""

import logging
from typing import Optional

from devicelogger.domain.constants import STORE_KEY_CRASH_LOG
from devicelogger.domain.models import CrashRecord
from devicelogger.infra.store import KeyValueStore

logger = logging.getLogger(__name__)


class CrashStore:
    """Reads and writes the pending crash slot of a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: str = STORE_KEY_CRASH_LOG) -> None:
        self._store = store
        self._key = key

    def persist(self, record: CrashRecord) -> bool:
        """
        Overwrite the slot with the given record (last crash wins).

        Returns:
            bool: True if the record reached the disk.
        """
        return self._store.set(self._key, record.to_dict())

    def peek(self) -> Optional[CrashRecord]:
        """Read the pending record without consuming it."""
        raw = self._store.get(self._key)
        if raw is None:
            return None
        return CrashRecord.from_dict(raw)

    def consume(self) -> Optional[CrashRecord]:
        """
        Read, delete and return the pending record.

        A malformed slot is deleted and reported as absent. Repeated calls
        without an intervening crash return None.

        Returns:
            Optional[CrashRecord]: The pending record, if any.
        """
        raw = self._store.get(self._key)
        if raw is None:
            return None

        self._store.remove(self._key)

        record = CrashRecord.from_dict(raw)
        if record is None:
            logger.warning("CrashStore: Discarded malformed crash record")
        return record
