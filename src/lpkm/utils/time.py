"""
Time utilities for monotonic timestamps.
Timestamps are ISO 8601 formatted and monotonic within a session.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from ..config import TIMESTAMP_FORMAT


class MonotonicClock:
    """
    Monotonic clock that ensures timestamps never go backwards.
    Keeps key creation order stable even if the wall clock moves.
    """

    def __init__(self):
        self._last_timestamp: Optional[str] = None

    def now(self) -> str:
        """
        Get current timestamp, guaranteed to be > previous timestamp.

        Returns:
            ISO 8601 formatted timestamp string
        """
        current_str = datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)

        # If clock went backwards or same time, advance by one microsecond
        if self._last_timestamp is not None and current_str <= self._last_timestamp:
            last_dt = datetime.strptime(self._last_timestamp, TIMESTAMP_FORMAT)
            current_str = (last_dt + timedelta(microseconds=1)).strftime(TIMESTAMP_FORMAT)

        self._last_timestamp = current_str
        return current_str


# Global monotonic clock instance
_clock = MonotonicClock()


def now() -> str:
    """
    Get current monotonic timestamp.

    Returns:
        ISO 8601 formatted timestamp string
    """
    return _clock.now()
