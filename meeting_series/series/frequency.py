"""Infer how often a series recurs.

The interval is never stored. It is the gap between the two chronologically
earliest instances, treated as a fixed duration: a monthly series created
on Jan 31 yields a 28, 29, 30 or 31 day interval depending on the month
that follows, and a DST change between the two dates is not compensated.
"""
from datetime import timedelta

from meeting_series.core.exceptions import InsufficientDataError
from meeting_series.models import Meeting
from meeting_series.series.index import as_utc, sort_by_date


def infer_interval(instances: list[Meeting]) -> timedelta:
    """
    Return the recurrence interval of a series.

    Raises:
        InsufficientDataError: fewer than two instances, or the two earliest
            instances share the same start, so no cadence can be inferred.
    """
    if len(instances) < 2:
        raise InsufficientDataError(
            "At least two meetings are needed to infer the series frequency",
            {"instance_count": len(instances)},
        )

    first, second = sort_by_date(instances)[:2]
    interval = as_utc(second.date) - as_utc(first.date)
    if interval <= timedelta(0):
        raise InsufficientDataError(
            "The earliest meetings in the series start at the same time",
            {"first_meeting_id": str(first.id), "second_meeting_id": str(second.id)},
        )
    return interval
