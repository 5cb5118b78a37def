"""
Tests for day/week bucketing of dashboard charts (no database).
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from dashboards.aggregation import (
    bucket_by_day,
    bucket_by_week,
    chart_series,
    day_label,
    utc_day,
    week_label,
    week_start,
)

UTC = timezone.utc
MANILA = timezone(timedelta(hours=8))


class TestUtcDay:

    def test_aware_datetime_is_converted(self):
        # 2024-03-11 07:00 in Manila is still 2024-03-10 in UTC
        assert utc_day(datetime(2024, 3, 11, 7, 0, tzinfo=MANILA)) == date(2024, 3, 10)

    def test_naive_datetime_is_utc(self):
        assert utc_day(datetime(2024, 3, 10, 23, 59)) == date(2024, 3, 10)

    def test_iso_string(self):
        assert utc_day('2024-03-10T23:30:00-02:00') == date(2024, 3, 11)

    def test_unreadable(self):
        assert utc_day('yesterday-ish') is None
        assert utc_day(None) is None
        assert utc_day(12345) is None


class TestBucketByDay:

    def test_window_is_zero_filled_and_ordered(self):
        buckets = bucket_by_day([], datetime(2024, 3, 13, 12, 0, tzinfo=UTC), 7)

        assert list(buckets) == [date(2024, 3, 7) + timedelta(days=i) for i in range(7)]
        assert set(buckets.values()) == {0}

    def test_counts_records_inside_window(self):
        records = [
            {'timestamp': datetime(2024, 3, 13, 0, 0, tzinfo=UTC)},
            {'timestamp': datetime(2024, 3, 13, 23, 59, tzinfo=UTC)},
            {'timestamp': datetime(2024, 3, 7, 0, 0, tzinfo=UTC)},
            {'timestamp': datetime(2024, 3, 6, 23, 59, tzinfo=UTC)},  # before window
            {'timestamp': datetime(2024, 3, 14, 0, 0, tzinfo=UTC)},  # after window
        ]

        buckets = bucket_by_day(records, datetime(2024, 3, 13, 8, 0, tzinfo=UTC), 7)

        assert buckets[date(2024, 3, 13)] == 2
        assert buckets[date(2024, 3, 7)] == 1
        assert sum(buckets.values()) == 3

    def test_missing_and_invalid_timestamps_are_skipped(self):
        records = [{}, {'timestamp': None}, {'timestamp': 'not a date'},
                   {'timestamp': '2024-03-12T10:00:00Z'}]

        buckets = bucket_by_day(records, '2024-03-13T00:00:00Z', 3)

        assert buckets == {date(2024, 3, 11): 0, date(2024, 3, 12): 1, date(2024, 3, 13): 0}

    def test_single_day_window(self):
        buckets = bucket_by_day([{'timestamp': '2024-03-13T01:00:00Z'}], '2024-03-13T22:00:00Z', 1)
        assert buckets == {date(2024, 3, 13): 1}

    def test_window_must_have_a_day(self):
        with pytest.raises(ValueError):
            bucket_by_day([], datetime(2024, 3, 13, tzinfo=UTC), 0)

    def test_window_end_must_be_readable(self):
        with pytest.raises(ValueError):
            bucket_by_day([], 'garbage', 7)

    def test_keys_are_calendar_dates(self):
        buckets = bucket_by_day([{'timestamp': '2024-03-12T10:00:00Z'}], '2024-03-13T00:00:00Z', 2)

        assert all(type(day) is date for day in buckets)
        assert {day.isoformat(): count for day, count in buckets.items()} == {
            '2024-03-12': 1, '2024-03-13': 0,
        }

    def test_pure(self):
        records = [{'timestamp': '2024-03-12T10:00:00Z'}]
        end = datetime(2024, 3, 13, tzinfo=UTC)
        assert bucket_by_day(records, end) == bucket_by_day(records, end)


class TestBucketByWeek:

    def test_week_starts_on_sunday(self):
        # 2024-03-13 is a Wednesday
        assert week_start(date(2024, 3, 13)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 10)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 16)) == date(2024, 3, 10)

    def test_sparse_and_ascending(self):
        records = [
            {'timestamp': '2024-03-13T10:00:00Z'},
            {'timestamp': '2024-02-01T10:00:00Z'},
            {'timestamp': '2024-03-10T00:00:00Z'},
            {'timestamp': '2024-03-09T23:59:59Z'},
            {'timestamp': None},
        ]

        buckets = bucket_by_week(records)

        assert buckets == {
            date(2024, 1, 28): 1,
            date(2024, 3, 3): 1,
            date(2024, 3, 10): 2,
        }
        assert list(buckets) == sorted(buckets)

    def test_empty(self):
        assert bucket_by_week([]) == {}


class TestLabels:

    def test_day_label(self):
        assert day_label(date(2024, 3, 10)) == 'Mar 10'
        assert day_label(date(2024, 3, 1)) == 'Mar 1'

    def test_week_label(self):
        assert week_label(date(2024, 3, 10)) == 'Mar 10, 2024'

    def test_chart_series(self):
        series = chart_series({date(2024, 3, 10): 2, date(2024, 3, 11): 0})
        assert series == {'labels': ['Mar 10', 'Mar 11'], 'data': [2, 0]}
