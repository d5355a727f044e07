from __future__ import annotations

"""
Size Guard.

Keeps the active log file within the configured maximum by truncating it
once it grows past the limit. Correction happens after the fact: a single
write may push the file above the bound, the next check empties it.
"""

import logging

from devicelogger.core.writer import LogWriter
from devicelogger.domain.constants import BYTES_PER_MB

logger = logging.getLogger(__name__)


def exceeds_limit(size_bytes: int, maximum_mb: float) -> bool:
    """
    Args:
        size_bytes: Current file size.
        maximum_mb: Configured limit in megabytes; may be fractional.

    Returns:
        bool: True if the file is strictly larger than the limit.
    """
    return size_bytes > maximum_mb * BYTES_PER_MB


class SizeGuard:
    """Truncates the writer's file when it exceeds a limit."""

    def __init__(self, writer: LogWriter) -> None:
        self._writer = writer

    def check(self, maximum_mb: float) -> bool:
        """
        Compare the current size against the limit and clear on exceed.

        Args:
            maximum_mb: Limit in megabytes.

        Returns:
            bool: True if the file was cleared.
        """
        with self._writer.lock:
            size_bytes = self._writer.size_bytes
            logger.debug(
                f"SizeGuard: Current log file size: {size_bytes} bytes - "
                f"Maximum Allowed: {maximum_mb} MB"
            )
            if not exceeds_limit(size_bytes, maximum_mb):
                return False

            cleared = self._writer.clear()

        if cleared:
            logger.warning(f"SizeGuard: Log file exceeded {maximum_mb} MB and was cleared")
        return cleared
