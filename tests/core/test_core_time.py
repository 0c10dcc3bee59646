"""
Tests for core.time — Clock protocol and business-day helpers.
"""

import pytest
from datetime import date, datetime, timezone, timedelta

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    set_default_clock,
    get_default_clock,
    now_utc,
    parse_iso,
    to_iso,
)
from core.time.temporal import business_days_between, is_business_day

MONDAY = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
FRIDAY = datetime(2026, 10, 23, 16, 30, tzinfo=timezone.utc)


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        clock = SystemClock()
        dt = clock.now_utc()
        assert dt.tzinfo is not None
        assert dt.tzinfo == timezone.utc

    def test_time_advances(self):
        clock = SystemClock()
        t1 = clock.now_utc()
        t2 = clock.now_utc()
        assert t2 >= t1


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.now_utc() == fixed  # Same every time

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 1, 1))

    def test_advance(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance(60)
        assert clock.now_utc() == fixed + timedelta(seconds=60)

    def test_advance_days(self):
        clock = FixedClock(MONDAY)
        clock.advance(days=3)
        assert clock.now_utc() == MONDAY + timedelta(days=3)

    def test_satisfies_protocol(self):
        clock: Clock = FixedClock(MONDAY)
        assert clock.now_utc() == MONDAY


class TestDefaultClock:
    def test_set_and_get_default(self):
        original = get_default_clock()
        fixed = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        set_default_clock(fixed)
        try:
            assert now_utc() == datetime(2025, 1, 1, tzinfo=timezone.utc)
        finally:
            set_default_clock(original)


# ── Store Timestamps ─────────────────────────────────────────

class TestIsoTimestamps:
    def test_round_trip(self):
        assert parse_iso(to_iso(MONDAY)) == MONDAY

    def test_z_suffix(self):
        assert parse_iso("2026-10-19T09:00:00Z") == MONDAY

    def test_naive_string_taken_as_utc(self):
        assert parse_iso("2026-10-19T09:00:00") == MONDAY

    def test_empty_is_none(self):
        assert parse_iso(None) is None
        assert parse_iso("") is None

    def test_refuses_naive_datetime(self):
        with pytest.raises(ValueError, match="naive"):
            to_iso(datetime(2026, 10, 19))


# ── Business Days ────────────────────────────────────────────

class TestBusinessDays:
    def test_weekdays_and_weekends(self):
        assert is_business_day(MONDAY)
        assert is_business_day(FRIDAY)
        assert not is_business_day(date(2026, 10, 24))
        assert not is_business_day(date(2026, 10, 25))

    def test_monday_to_next_monday_is_five(self):
        assert business_days_between(MONDAY, MONDAY + timedelta(days=7)) == 5

    def test_friday_to_monday_is_one(self):
        assert business_days_between(FRIDAY, date(2026, 10, 26)) == 1

    def test_same_day_is_zero(self):
        assert business_days_between(MONDAY, MONDAY + timedelta(hours=6)) == 0

    def test_reversed_is_negative(self):
        assert business_days_between(MONDAY + timedelta(days=7), MONDAY) == -5

    def test_several_weeks(self):
        assert business_days_between(MONDAY, MONDAY + timedelta(days=21)) == 15
