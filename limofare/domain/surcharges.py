"""
Time-of-day surcharge resolver.

A window ``[start_time, end_time]`` (``"HH:MM"``, inclusive on both ends)
matches when the pickup's minutes-since-midnight fall inside it.  Windows
are same-day only: a window such as ``22:00-02:00`` has start > end and
can never match.  The first matching window wins.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional, Sequence

from .entities import TimeSurcharge

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """``"17:30"`` -> ``1050``.  Raises ``ValueError`` on anything else."""
    if not isinstance(value, str):
        raise ValueError(f"expected 'HH:MM', got {value!r}")
    hours_s, sep, minutes_s = value.strip().partition(":")
    if not sep:
        raise ValueError(f"expected 'HH:MM', got {value!r}")
    hours, minutes = int(hours_s), int(minutes_s)
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"time out of range: {value!r}")
    return hours * 60 + minutes


def minutes_since_midnight(moment: datetime | time) -> int:
    return moment.hour * 60 + moment.minute


def resolve_surcharge(
    pickup_time: Optional[datetime | time],
    windows: Sequence[TimeSurcharge],
) -> Optional[TimeSurcharge]:
    """Return the first window containing *pickup_time*, or ``None``."""
    if pickup_time is None or not windows:
        return None

    pickup_minutes = minutes_since_midnight(pickup_time)
    for window in windows:
        try:
            start = parse_hhmm(window.start_time)
            end = parse_hhmm(window.end_time)
        except ValueError as exc:
            logger.warning("Skipping malformed surcharge window %r: %s", window, exc)
            continue
        if start <= pickup_minutes <= end:
            return window
    return None


def surcharge_amount(
    pickup_time: Optional[datetime | time], windows: Sequence[TimeSurcharge]
) -> float:
    window = resolve_surcharge(pickup_time, windows)
    return float(window.surcharge) if window else 0.0
