from __future__ import annotations

"""
Timestamp sources for rendered log lines.

The writer takes a clock and a formatter so tests can pin both.
"""

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]
TimestampFormatter = Callable[[datetime], str]


def system_clock() -> datetime:
    return datetime.now()


def localized_timestamp(moment: datetime) -> str:
    """Render the locale's short date and medium time, e.g. '10/19/26 14:03:59'."""
    return moment.strftime("%x %X")
