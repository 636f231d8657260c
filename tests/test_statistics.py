import pytest

from app.models import TimeRecord
from app.services.statistics_service import compute_statistics, month_summary, summarize
from conftest import utc

# 2025-03-05 是週三，本週從 03-03 (週一) 開始
NOW = utc(2025, 3, 5, 12, 0)


def record(clock_in, clock_out=None, break_minutes=0, job_id="job-1", record_id=None):
    return TimeRecord(
        id=record_id or f"rec-{clock_in.isoformat()}",
        user_id="user-1",
        job_id=job_id,
        clock_in=clock_in,
        clock_out=clock_out,
        break_minutes=break_minutes,
        is_manual_edit=False,
        date=clock_in.date(),
    )


@pytest.fixture
def march_records():
    return [
        # 週日，屬於上一週
        record(utc(2025, 3, 2, 10, 0), utc(2025, 3, 2, 12, 0)),
        # 同一天兩筆，共 9.5 小時
        record(utc(2025, 3, 4, 9, 0), utc(2025, 3, 4, 14, 0)),
        record(utc(2025, 3, 4, 15, 0), utc(2025, 3, 4, 19, 30)),
        # 今天
        record(utc(2025, 3, 5, 8, 0), utc(2025, 3, 5, 12, 0)),
        # 進行中，不列入
        record(utc(2025, 3, 5, 12, 0)),
    ]


def test_windows_totals(march_records):
    stats = compute_statistics(march_records, 200, 8, now=NOW, timezone="UTC")

    assert stats.today.total_minutes == 240
    assert stats.week.total_minutes == 300 + 270 + 240
    assert stats.month.total_minutes == 120 + 300 + 270 + 240
    assert stats.month.total_hours == pytest.approx(15.5)
    assert stats.month.total_earnings == pytest.approx(15.5 * 200)
    assert stats.total_records == 4


def test_daily_overtime_accumulates(march_records):
    stats = compute_statistics(march_records, 200, 8, now=NOW, timezone="UTC")

    assert stats.week.overtime_minutes == 90
    assert stats.month.overtime_minutes == 90
    assert stats.today.overtime_minutes == 0


def test_average_hours_per_day(march_records):
    stats = compute_statistics(march_records, 200, 8, now=NOW, timezone="UTC")

    assert stats.month.days_worked == 3
    assert stats.average_hours_per_day == pytest.approx(15.5 / 3)


def test_average_is_zero_without_records():
    stats = compute_statistics([], 200, 8, now=NOW, timezone="UTC")

    assert stats.average_hours_per_day == 0
    assert stats.month.total_minutes == 0
    assert stats.total_records == 0


def test_sunday_belongs_to_previous_week():
    sunday = utc(2025, 3, 9, 18, 0)
    records = [
        record(utc(2025, 3, 3, 9, 0), utc(2025, 3, 3, 10, 0)),
        record(utc(2025, 3, 9, 9, 0), utc(2025, 3, 9, 10, 0)),
        record(utc(2025, 3, 10, 9, 0), utc(2025, 3, 10, 10, 0)),
    ]

    stats = compute_statistics(records, 100, 8, now=sunday, timezone="UTC")

    assert stats.week.total_minutes == 120
    assert stats.week.start == utc(2025, 3, 3)


def test_overnight_shift_counts_for_clock_in_month():
    overnight = record(utc(2025, 3, 31, 23, 0), utc(2025, 4, 1, 1, 0))

    march = month_summary([overnight], 2025, 3, 100, timezone="UTC")
    april = month_summary([overnight], 2025, 4, 100, timezone="UTC")

    assert march.summary.total_minutes == 120
    assert [item.id for item in march.records] == [overnight.id]
    assert april.summary.total_minutes == 0
    assert april.records == []


def test_boundary_week_is_not_adjusted():
    # 2025-04-01 是週二，本週包含 3 月 31 日
    records = [
        record(utc(2025, 3, 31, 9, 0), utc(2025, 3, 31, 11, 0)),
        record(utc(2025, 4, 1, 9, 0), utc(2025, 4, 1, 10, 0)),
    ]

    stats = compute_statistics(records, 100, 8, now=utc(2025, 4, 2, 12, 0), timezone="UTC")

    assert stats.week.total_minutes == 180
    assert stats.month.total_minutes == 60
    assert stats.week.total_minutes > stats.month.total_minutes


def test_statistics_are_idempotent(march_records):
    snapshot = [(r.clock_in, r.clock_out, r.break_minutes) for r in march_records]

    first = compute_statistics(march_records, 200, 8, now=NOW, timezone="UTC")
    second = compute_statistics(march_records, 200, 8, now=NOW, timezone="UTC")

    assert first == second
    assert [(r.clock_in, r.clock_out, r.break_minutes) for r in march_records] == snapshot


def test_multi_job_rates_sum_per_record():
    records = [
        record(utc(2025, 3, 4, 9, 0), utc(2025, 3, 4, 10, 0), job_id="job-a"),
        record(utc(2025, 3, 4, 11, 0), utc(2025, 3, 4, 12, 0), job_id="job-b"),
    ]

    summary = summarize(records, {"job-a": 100, "job-b": 200}, 8, "UTC")

    assert summary.total_earnings == pytest.approx(300)
    assert summary.total_minutes == 120


def test_unknown_job_rate_earns_nothing():
    records = [record(utc(2025, 3, 4, 9, 0), utc(2025, 3, 4, 10, 0), job_id="job-x")]

    summary = summarize(records, {"job-a": 100}, 8, "UTC")

    assert summary.total_earnings == 0
    assert summary.total_minutes == 60


def test_month_summary_is_newest_first(march_records):
    result = month_summary(march_records, 2025, 3, 200, 8, "UTC")

    clock_ins = [item.clock_in for item in result.records]
    assert clock_ins == sorted(clock_ins, reverse=True)
    assert len(result.records) == 4
    assert result.summary.record_count == 4


def test_day_grouping_uses_configured_zone():
    # 台北時間 03-05 07:00 至 12:00，UTC 為 03-04 23:00 至 03-05 04:00
    records = [
        record(utc(2025, 3, 4, 23, 0), utc(2025, 3, 5, 4, 0)),
        record(utc(2025, 3, 5, 5, 0), utc(2025, 3, 5, 9, 0)),
    ]

    taipei = summarize(records, 100, 8, "Asia/Taipei")
    utc_days = summarize(records, 100, 8, "UTC")

    assert taipei.days_worked == 1
    assert taipei.overtime_minutes == 60
    assert utc_days.days_worked == 2
    assert utc_days.overtime_minutes == 0
