"""
Aggregator

Buckets records by their timestamp for the dashboard charts. All day
boundaries are UTC calendar days.

- bucket_by_day: trailing N-day window ending on (and including) the UTC day
  of `window_end_utc`. Every day of the window is present, zero-filled.
- bucket_by_week: key is the Sunday on or before the record's UTC day.
  Ascending, sparse.

Bucket keys are datetime.date values; key.isoformat() gives the ISO date
(YYYY-MM-DD). Records with a missing or unparseable timestamp are skipped.
Naive datetimes are taken to be UTC.
"""
from datetime import date, datetime, timedelta, timezone as dt_timezone

from dateutil.parser import isoparse

from core.records import field_value


def utc_day(value):
    """UTC calendar date of a timestamp, or None when it cannot be read."""
    if value is None:
        return None

    if isinstance(value, str):
        try:
            value = isoparse(value)
        except (ValueError, OverflowError):
            return None

    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            value = value.replace(tzinfo=dt_timezone.utc)
        return value.astimezone(dt_timezone.utc).date()

    if isinstance(value, date):
        return value

    return None


def week_start(day):
    """The Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_by_day(records, window_end_utc, window_size_days=7, field='timestamp'):
    """
    Count records per UTC day over a trailing window.

    Args:
        records: Model instances or dicts
        window_end_utc: Any moment of the last day of the window
        window_size_days: Number of days in the window (>= 1)
        field: Timestamp field to read

    Returns:
        dict: datetime.date -> count for each day of the window, oldest first

    Raises:
        ValueError: window_size_days < 1 or an unreadable window end
    """
    if window_size_days < 1:
        raise ValueError(f"window_size_days must be at least 1, got {window_size_days}")

    end = utc_day(window_end_utc)
    if end is None:
        raise ValueError(f"Invalid window end: {window_end_utc!r}")

    start = end - timedelta(days=window_size_days - 1)
    buckets = {start + timedelta(days=offset): 0 for offset in range(window_size_days)}

    for record in records:
        day = utc_day(field_value(record, field))
        if day is not None and start <= day <= end:
            buckets[day] += 1

    return buckets


def bucket_by_week(records, field='timestamp'):
    """
    Count records per week (weeks start on Sunday, UTC).

    Returns:
        dict: week-start datetime.date -> count, ascending, only weeks with records
    """
    counts = {}
    for record in records:
        day = utc_day(field_value(record, field))
        if day is None:
            continue
        key = week_start(day)
        counts[key] = counts.get(key, 0) + 1

    return dict(sorted(counts.items()))


def day_label(day):
    """'Mar 10'"""
    return f"{day:%b} {day.day}"


def week_label(day):
    """'Mar 10, 2024'"""
    return f"{day:%b} {day.day}, {day.year}"


def chart_series(buckets, label=day_label):
    return {
        'labels': [label(day) for day in buckets],
        'data': list(buckets.values()),
    }
