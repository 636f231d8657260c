import math
from types import SimpleNamespace

import pytest

from app.services.calculator import minutes_worked, live_minutes, earnings, round_currency
from conftest import utc


def record(clock_in, clock_out=None, break_minutes=0):
    return SimpleNamespace(clock_in=clock_in, clock_out=clock_out, break_minutes=break_minutes, job_id="job-1")


def test_full_day_with_break():
    shift = record(utc(2025, 3, 1, 9, 0), utc(2025, 3, 1, 17, 30), break_minutes=30)

    assert minutes_worked(shift) == 480
    assert earnings(shift, 200) == pytest.approx(1600.0)


def test_open_record_counts_nothing():
    assert minutes_worked(record(utc(2025, 3, 1, 9, 0))) == 0
    assert earnings(record(utc(2025, 3, 1, 9, 0)), 200) == 0


def test_partial_minutes_are_floored():
    shift = record(utc(2025, 3, 1, 9, 0, 0), utc(2025, 3, 1, 9, 59, 59))
    assert minutes_worked(shift) == 59


def test_clock_skew_never_goes_negative():
    shift = record(utc(2025, 3, 1, 17, 0), utc(2025, 3, 1, 9, 0))
    assert minutes_worked(shift) == 0


def test_break_longer_than_shift_never_goes_negative():
    shift = record(utc(2025, 3, 1, 9, 0), utc(2025, 3, 1, 10, 0), break_minutes=90)
    assert minutes_worked(shift) == 0


@pytest.mark.parametrize("rate", [None, 0, -5, math.inf, math.nan, "abc", True])
def test_invalid_rate_earns_nothing(rate):
    shift = record(utc(2025, 3, 1, 9, 0), utc(2025, 3, 1, 10, 0))
    assert earnings(shift, rate) == 0


def test_earnings_are_not_rounded():
    shift = record(utc(2025, 3, 1, 9, 0), utc(2025, 3, 1, 9, 10))
    assert earnings(shift, 100) == pytest.approx(100 * 10 / 60)


def test_live_minutes_uses_now_for_open_record():
    shift = record(utc(2025, 3, 1, 9, 0), break_minutes=15)
    assert live_minutes(shift, utc(2025, 3, 1, 10, 30)) == 75
    assert shift.clock_out is None


@pytest.mark.parametrize("amount, expected", [(2.5, 3), (1599.5, 1600), (0.49, 0), (1600.0, 1600)])
def test_round_currency_half_up(amount, expected):
    assert round_currency(amount) == expected
