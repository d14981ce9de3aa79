"""
Calendar date handling for ledger records.

Assignment start/end dates are persisted in the configured calendar format
(day/month/year, ``15/01/2023``, by default); status-log and maintenance
timestamps are ISO-8601.  Both must be compared after explicit parsing,
never lexically.

Parsing never raises: an unparseable value yields ``None`` and the caller
chooses a degradation (sort last, fall back to the query date).
"""

from __future__ import annotations

import math
from datetime import date, datetime, time

DEFAULT_DATE_FORMAT = "%d/%m/%Y"

_SECONDS_PER_DAY = 86400


def _day_first(text: str) -> datetime | None:
    # Only the leading date token counts; "15/01/2023 10:30" reads as 15/01/2023.
    parts = text.split()[0].split("/")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(p) for p in parts)
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_calendar_date(value: str | None, fmt: str = DEFAULT_DATE_FORMAT) -> datetime | None:
    """
    Parse a record date into a naive ``datetime``.

    Tried in order: the configured ``fmt``, then ``D/M/YYYY`` (day first, with
    or without zero padding, trailing time ignored), then ISO dates and ISO
    timestamps.  Timezone-aware timestamps are normalised to naive local wall
    time so they compare with calendar date values.

    Returns:
        The parsed value, or None when the input is empty or malformed.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        pass

    if "/" in text:
        return _day_first(text)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def format_calendar_date(moment: datetime | date, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    """Render a moment as a calendar date string in the configured format."""
    return moment.strftime(fmt)


def as_naive(moment: datetime | date) -> datetime:
    """Naive datetime view of a date or (possibly aware) datetime."""
    if isinstance(moment, datetime):
        return moment.replace(tzinfo=None)
    return datetime.combine(moment, time())


def whole_days_between(start: datetime, end: datetime) -> int:
    """Elapsed whole days between two moments, rounded up (ceil), unsigned."""
    seconds = abs((end - start).total_seconds())
    return math.ceil(seconds / _SECONDS_PER_DAY)


def is_on_or_after(
    later: str | None,
    earlier: str | None,
    fmt: str = DEFAULT_DATE_FORMAT,
) -> bool:
    """
    True when ``later`` is on or after ``earlier`` as calendar dates.

    Unparseable values cannot violate the ordering and compare as True.
    """
    later_dt = parse_calendar_date(later, fmt)
    earlier_dt = parse_calendar_date(earlier, fmt)
    if later_dt is None or earlier_dt is None:
        return True
    return later_dt.date() >= earlier_dt.date()
