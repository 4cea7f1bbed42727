"""Tests for utils/dt_utils.py - date-keys, parsing and day arithmetic."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from custom_components.missionhome.utils import dt_utils
from custom_components.missionhome.utils.dt_utils import (
    date_key,
    days_elapsed,
    dt_add_months,
    dt_parse,
    dt_parse_date,
    end_of_local_day,
    start_of_local_day,
    to_local_date,
)

WARSAW = ZoneInfo("Europe/Warsaw")


class TestDateKey:
    """Test canonical date-key formatting."""

    def test_plain_date(self) -> None:
        """Plain dates format as YYYY-MM-DD."""
        assert date_key(date(2025, 4, 7)) == "2025-04-07"

    def test_datetime_uses_local_day(self) -> None:
        """23:30 UTC is already the next day in Warsaw."""
        dt_utils.set_default_timezone(WARSAW)

        assert date_key(datetime(2025, 4, 7, 23, 30, tzinfo=UTC)) == "2025-04-08"

    def test_iso_string(self) -> None:
        """ISO strings are normalized to the local day."""
        dt_utils.set_default_timezone(WARSAW)

        assert date_key("2025-04-07T22:30:00+00:00") == "2025-04-08"
        assert date_key("2025-04-07") == "2025-04-07"

    def test_unparseable_is_none(self) -> None:
        """Bad input yields None instead of raising."""
        assert date_key("garbage") is None
        assert date_key(None) is None


class TestParsing:
    """Test dt_parse_date, dt_parse and to_local_date."""

    def test_parse_date_formats(self) -> None:
        """ISO plus two common separators are accepted."""
        assert dt_parse_date("2025-04-07") == date(2025, 4, 7)
        assert dt_parse_date("2025/04/07") == date(2025, 4, 7)
        assert dt_parse_date("07.04.2025") == date(2025, 4, 7)
        assert dt_parse_date("April 7th") is None

    def test_parse_naive_gets_default_zone(self) -> None:
        """Naive inputs are interpreted in the configured zone."""
        dt_utils.set_default_timezone(WARSAW)

        parsed = dt_parse("2025-04-07T08:00:00")

        assert parsed is not None
        assert parsed.tzinfo == WARSAW

    def test_parse_date_is_local_midnight(self) -> None:
        """A plain date becomes local midnight."""
        dt_utils.set_default_timezone(WARSAW)

        parsed = dt_parse(date(2025, 4, 7))

        assert parsed == datetime(2025, 4, 7, tzinfo=WARSAW)

    def test_to_local_date_passes_dates_through(self) -> None:
        """Plain dates are not shifted by any zone."""
        dt_utils.set_default_timezone(WARSAW)

        assert to_local_date(date(2025, 4, 7)) == date(2025, 4, 7)


class TestDayBoundaries:
    """Test day boundaries and elapsed-day arithmetic."""

    def test_start_and_end_of_day(self) -> None:
        """Start is 00:00 and end is one microsecond before the next day."""
        dt_utils.set_default_timezone(WARSAW)

        start = start_of_local_day(date(2025, 4, 7))
        end = end_of_local_day(date(2025, 4, 7))

        assert start == datetime(2025, 4, 7, tzinfo=WARSAW)
        assert end == datetime(2025, 4, 7, 23, 59, 59, 999999, tzinfo=WARSAW)

    def test_days_elapsed_floors(self) -> None:
        """Only whole days count."""
        earlier = datetime(2025, 4, 1, 12, 0, tzinfo=UTC)

        assert days_elapsed(earlier, earlier + timedelta(days=3)) == 3
        assert days_elapsed(earlier, earlier + timedelta(days=2, hours=23)) == 2
        assert days_elapsed(earlier + timedelta(days=1), earlier) == -1

    def test_add_months_clamps(self) -> None:
        """Month arithmetic clamps to the last day of short months."""
        assert dt_add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert dt_add_months(date(2025, 1, 31), 2) == date(2025, 3, 31)
