from __future__ import annotations

"""
Durable Key-Value Store.

A small JSON document holding named slots that must survive application
restarts: the active log file name and the pending crash record. Writes go
through a temporary file and an atomic replace so a crash mid-write leaves
the previous document intact. Designed to fail silently (Fail-Safe): read
errors yield an empty store and write errors are only logged.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Thread-safe JSON-backed mapping persisted at a fixed path.
    """

    def __init__(self, path: str) -> None:
        """
        Args:
            path: Absolute path of the JSON document.
        """
        self._path = path
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a slot.

        Args:
            key: Slot name.
            default: Value returned when the slot is absent.

        Returns:
            Any: Stored value or default.
        """
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """
        Overwrite a slot and persist the document.

        Returns:
            bool: True if the document reached the disk.
        """
        with self._lock:
            data = self._load()
            data[key] = value
            return self._save(data)

    def remove(self, key: str) -> bool:
        """
        Delete a slot if present.

        Returns:
            bool: True if the slot was present and the removal was persisted.
        """
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            return self._save(data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._load()

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self._path):
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"KeyValueStore: Unreadable store at {self._path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"KeyValueStore: Invalid store format at {self._path}. Ignoring.")
            return {}

        return data

    def _save(self, data: Dict[str, Any]) -> bool:
        directory = os.path.dirname(self._path) or "."
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".store-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=4)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"KeyValueStore: Failed to save store at {self._path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass
            return False
