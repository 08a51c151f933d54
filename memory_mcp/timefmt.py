"""
Timestamp rendering for memory entry headers.

Converts a count of seconds since the Unix epoch into the fixed-width
``YYYY-MM-DD HH:MM UTC`` form using integer arithmetic only.
"""

from __future__ import annotations

import math
import time
from typing import Optional, Tuple

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60

# Days in a 400-year Gregorian era
DAYS_PER_ERA = 146097
# 1970-01-01 counted from 0000-03-01
EPOCH_SHIFT = 719468


def is_leap_year(year: int) -> bool:
    """Gregorian rule: divisible by 4, not by 100 unless also by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_to_civil(days: int) -> Tuple[int, int, int]:
    """Convert days since 1970-01-01 to a (year, month, day) triple.

    Years are counted from March so the leap day falls at the end of the
    year; this keeps the month table free of leap-year branches.
    """
    z = days + EPOCH_SHIFT
    era = z // DAYS_PER_ERA
    doe = z - era * DAYS_PER_ERA                                   # [0, 146096]
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365  # [0, 399]
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)                # [0, 365]
    mp = (5 * doy + 2) // 153                                      # [0, 11]
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def format_timestamp(unix_secs: int) -> str:
    """Render seconds since the epoch as ``YYYY-MM-DD HH:MM UTC``."""
    unix_secs = math.floor(unix_secs)
    days, seconds_today = divmod(unix_secs, SECONDS_PER_DAY)
    hours = seconds_today // SECONDS_PER_HOUR
    minutes = (seconds_today % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE

    year, month, day = days_to_civil(days)
    return f"{year:04d}-{month:02d}-{day:02d} {hours:02d}:{minutes:02d} UTC"


def now_timestamp(now: Optional[float] = None) -> str:
    """Render the current instant (or ``now`` if given)."""
    if now is None:
        now = time.time()
    return format_timestamp(now)
