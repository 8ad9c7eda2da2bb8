"""Tests for shared time utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from painter_booking.utils import minutes_between, overlaps, to_naive_utc, to_utc

from tests.conftest import at


class TestToUtc:
    def test_naive_is_taken_as_utc(self):
        assert to_utc(datetime(2025, 1, 10, 9, 0)) == datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)

    def test_other_zone_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2025, 1, 10, 11, 0, tzinfo=plus_two)
        assert to_utc(value) == at("2025-01-10T09:00")
        assert to_utc(value).tzinfo == timezone.utc

    def test_to_naive_utc_strips_zone(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2025, 1, 10, 11, 0, tzinfo=plus_two)
        assert to_naive_utc(value) == datetime(2025, 1, 10, 9, 0)


class TestMinutesBetween:
    def test_symmetric(self):
        a, b = at("2025-01-10T10:00"), at("2025-01-11T09:00")
        assert minutes_between(a, b) == minutes_between(b, a) == 23 * 60

    def test_zero(self):
        assert minutes_between(at("2025-01-10T10:00"), at("2025-01-10T10:00")) == 0

    @pytest.mark.parametrize("seconds,expected", [(29, 0), (30, 1), (90, 2), (150, 3), (151, 3)])
    def test_half_minutes_round_up(self, seconds, expected):
        start = at("2025-01-10T10:00")
        assert minutes_between(start, start + timedelta(seconds=seconds)) == expected


class TestOverlaps:
    def test_partial_overlap(self):
        assert overlaps(at("2025-01-10T10:00"), at("2025-01-10T14:00"),
                        at("2025-01-10T12:00"), at("2025-01-10T16:00"))

    def test_adjacent_intervals_do_not_overlap(self):
        assert not overlaps(at("2025-01-10T08:00"), at("2025-01-10T10:00"),
                            at("2025-01-10T10:00"), at("2025-01-10T14:00"))

    def test_containment_overlaps(self):
        assert overlaps(at("2025-01-10T09:00"), at("2025-01-10T17:00"),
                        at("2025-01-10T10:00"), at("2025-01-10T11:00"))
