# File: utils/dt_utils.py
"""Date and time utilities for MissionHome.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_now_utc: Current UTC datetime
    - as_local: Convert to local timezone
    - start_of_local_day / end_of_local_day: Day boundaries (DST-safe)
    - dt_parse_date: Parse date strings
    - dt_parse: Normalize datetime inputs
    - to_local_date: Normalize any input to a local calendar date
    - date_key: Canonical YYYY-MM-DD date-key
    - days_elapsed: Whole days between two instants
    - dt_add_months: Calendar month arithmetic
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

DATE_KEY_FORMAT = "%Y-%m-%d"


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be UTC, matching how timestamps are stored.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(
    value: date | datetime, tz: ZoneInfo | None = None
) -> datetime:
    """Get local midnight (00:00:00) for a date or datetime.

    DST-safe implementation: a plain date is combined with midnight in the
    local zone instead of being shifted from UTC.

    Args:
        value: A calendar date (taken as local) or a datetime in any timezone
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    tz_info = tz or DEFAULT_TIME_ZONE

    if isinstance(value, datetime):
        local_dt = as_local(value, tz_info)
        return local_dt.replace(hour=0, minute=0, second=0, microsecond=0)

    return datetime.combine(value, datetime.min.time(), tzinfo=tz_info)


def end_of_local_day(value: date | datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the last representable instant of the local day (23:59:59.999999)."""
    start = start_of_local_day(value, tz)
    return start + relativedelta(days=1, microseconds=-1)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts "2025-04-07" (ISO) first, then a few common separators.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    for fmt in ("%Y/%m/%d", "%d.%m.%Y"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize string, date or datetime input to an aware datetime.

    Naive inputs get `default_tzinfo` (DEFAULT_TIME_ZONE if None). A plain
    date maps to local midnight of that day.

    Returns:
        Timezone-aware datetime, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-04-15")
        datetime.datetime(2025, 4, 15, 0, 0, tzinfo=ZoneInfo('Europe/Warsaw'))
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            parsed_date = dt_parse_date(dt_input)
            if parsed_date is None:
                _LOGGER.debug("DEBUG: dt_parse - unparseable input '%s'", dt_input)
                return None
            result = datetime.combine(parsed_date, datetime.min.time())

    elif isinstance(dt_input, datetime):
        result = dt_input

    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())

    else:
        # Unsupported input type
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)

    return result


def to_local_date(
    value: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Return the local calendar date for any supported input, or None.

    Plain dates pass through unchanged; datetimes and ISO strings are
    converted to the local zone before the date is taken.
    """
    if value is None:
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    parsed = dt_parse(value, default_tzinfo=tz)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


def date_key(value: str | date | datetime | None, tz: ZoneInfo | None = None) -> str | None:
    """Return the canonical YYYY-MM-DD date-key in local time, or None.

    Example:
        >>> date_key(datetime(2025, 4, 7, 23, 30, tzinfo=UTC))  # Europe/Warsaw
        '2025-04-08'
    """
    local_date = to_local_date(value, tz)
    if local_date is None:
        return None
    return local_date.strftime(DATE_KEY_FORMAT)


def days_elapsed(earlier: datetime, later: datetime) -> int:
    """Return the number of whole days from `earlier` to `later` (floored).

    Negative when `later` precedes `earlier`.
    """
    seconds = (as_local(later) - as_local(earlier)).total_seconds()
    return int(seconds // timedelta(days=1).total_seconds())


def dt_add_months(value: date, months: int) -> date:
    """Add calendar months; the day clamps to the last day of short months."""
    return value + relativedelta(months=months)
