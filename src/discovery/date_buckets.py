"""Time-bucket key formatting for run summaries."""

from __future__ import annotations

import math
from datetime import datetime, timezone, tzinfo

from core.constants import SUPPORTED_GRANULARITIES
from core.errors import InvalidGranularity
from core.run_types import Granularity

_SECONDS_PER_DAY = 86400


def validate_granularity(granularity: str) -> Granularity:
    """Return the granularity unchanged if supported.

    Raises:
        InvalidGranularity: For anything other than day, week or month.
    """
    if granularity not in SUPPORTED_GRANULARITIES:
        raise InvalidGranularity(
            f"Invalid granularity {granularity!r}. Must be one of: "
            f"{', '.join(SUPPORTED_GRANULARITIES)}."
        )
    return granularity  # type: ignore[return-value]


def format_bucket_key(
    timestamp: datetime,
    granularity: str,
    tz: tzinfo = timezone.utc,
) -> str:
    """Format the bucket key of a timestamp.

    Args:
        timestamp: Aware timestamp of a run.
        granularity: ``day``, ``week`` or ``month``.
        tz: Zone whose calendar defines days, weeks and months.

    Returns:
        ``YYYY-MM-DD``, ``YYYY-Www`` or ``YYYY-MM``.

    Raises:
        InvalidGranularity: For an unsupported unit.
    """
    validate_granularity(granularity)
    local_time = timestamp.astimezone(tz)
    if granularity == "day":
        return f"{local_time.year}-{local_time.month:02d}-{local_time.day:02d}"
    if granularity == "week":
        return f"{local_time.year}-W{week_number(local_time):02d}"
    return f"{local_time.year}-{local_time.month:02d}"


def week_number(local_time: datetime) -> int:
    """Week of year counted from January 1st, offset by its weekday.

    ``ceil((days_since_jan1 + jan1_weekday + 1) / 7)`` with weekdays numbered
    from Sunday = 0 and a fractional day count. Not ISO-8601 weeks.
    """
    start_of_year = local_time.replace(
        month=1, day=1, hour=0, minute=0, second=0, microsecond=0
    )
    elapsed_days = (local_time - start_of_year).total_seconds() / _SECONDS_PER_DAY
    sunday_based_weekday = (start_of_year.weekday() + 1) % 7
    return math.ceil((elapsed_days + sunday_based_weekday + 1) / 7)
