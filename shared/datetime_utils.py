"""
Date/time helpers — framework-agnostic.

All timestamps handled by the login defense layer are timezone-aware UTC.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC ``datetime``."""
    return datetime.now(timezone.utc)


def ceil_minutes(delta: timedelta) -> int:
    """Round *delta* up to whole minutes.

    ``timedelta(seconds=61)`` → ``2``. Zero or negative deltas give ``0``.
    """
    seconds = delta.total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 60)


def ceil_seconds(delta: timedelta) -> int:
    """Round *delta* up to whole seconds; never negative."""
    seconds = delta.total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds)
