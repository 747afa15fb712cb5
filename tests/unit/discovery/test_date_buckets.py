"""Unit tests for time-bucket key formatting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.errors import InvalidGranularity
from discovery.date_buckets import format_bucket_key

SAMPLE_INSTANT = datetime(2024, 1, 15, 10, 30, 45, 123000, tzinfo=timezone.utc)


def test_month_bucket_is_zero_padded_year_month() -> None:
    """Month buckets should render as YYYY-MM."""
    assert format_bucket_key(SAMPLE_INSTANT, "month") == "2024-01"


def test_day_bucket_is_zero_padded_date() -> None:
    """Day buckets should render as YYYY-MM-DD."""
    assert format_bucket_key(SAMPLE_INSTANT, "day") == "2024-01-15"


@pytest.mark.parametrize(
    ("instant", "expected_key"),
    [
        (datetime(2023, 12, 31, 12, 0, tzinfo=timezone.utc), "2023-W53"),
        (datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc), "2024-W01"),
        (datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc), "2024-W01"),
        (datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc), "2024-W02"),
        (SAMPLE_INSTANT, "2024-W03"),
        (datetime(2024, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc), "2024-W53"),
        (datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc), "2025-W01"),
        (datetime(2025, 1, 4, 0, 0, tzinfo=timezone.utc), "2025-W01"),
        (datetime(2025, 1, 4, 12, 0, tzinfo=timezone.utc), "2025-W02"),
    ],
)
def test_week_bucket_matches_reference_table(instant: datetime, expected_key: str) -> None:
    """Week numbers should follow the jan-1-weekday offset formula, not ISO weeks."""
    assert format_bucket_key(instant, "week") == expected_key


def test_week_bucket_differs_from_iso_week_at_year_start() -> None:
    """2024-01-06 is ISO week 1 but lands in bucket W02."""
    instant = datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc)

    assert instant.isocalendar()[1] == 1 and format_bucket_key(instant, "week") == "2024-W02"


def test_bucket_uses_calendar_of_requested_zone() -> None:
    """Late UTC evening should fall on the next day in a zone ahead of UTC."""
    instant = datetime(2024, 1, 31, 23, 30, tzinfo=timezone.utc)
    zone = timezone(timedelta(hours=2))

    assert format_bucket_key(instant, "month", zone) == "2024-02"


@pytest.mark.parametrize("granularity", ["year", "", "Month", "hour"])
def test_unsupported_granularity_raises(granularity: str) -> None:
    """Only day, week and month should be accepted."""
    with pytest.raises(InvalidGranularity):
        format_bucket_key(SAMPLE_INSTANT, granularity)
