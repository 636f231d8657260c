"""
Statistics aggregation over a user's time records.

Records are attributed entirely to the window containing their clock-in,
and grouped by the local calendar date of clock-in for overtime detection.
All functions are pure: they never modify the records they are given.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Union

from app.config import settings
from app.schemas.statistics import WorkSummary, Statistics, MonthlyRecords
from app.schemas.time_record import TimeRecordResponse
from app.services.calculator import minutes_worked, earnings
from app.utils.datetime_utils import (
    DateRange, utc_now, local_date, day_range, week_range, month_range, month_range_for, in_range,
)

HourlyRate = Union[float, int, Mapping[str, float], None]


def rate_for(record, hourly_rate: HourlyRate):
    """單一時薪或 jobId -> 時薪 的對照表"""
    if isinstance(hourly_rate, Mapping):
        return hourly_rate.get(record.job_id)
    return hourly_rate


def closed_records(records: Iterable) -> List:
    """只有已下班的紀錄會列入歷史統計"""
    return [record for record in records if record.clock_out is not None]


def records_in_range(records: Iterable, date_range: DateRange) -> List:
    return [record for record in records if in_range(record.clock_in, date_range)]


def summarize(
    records: Iterable,
    hourly_rate: HourlyRate,
    daily_hour_limit: Optional[float] = None,
    timezone: Optional[str] = None,
    date_range: Optional[DateRange] = None,
) -> WorkSummary:
    """
    彙總一組紀錄的工時、收入與加班。

    Args:
        records: 紀錄 (未下班者會被排除)
        hourly_rate: 時薪，或 jobId -> 時薪 對照表
        daily_hour_limit: 每日工時上限 (小時)，超出部分計入加班
        timezone: 分日使用的時區
        date_range: 只是標示用的期間起訖

    Returns:
        WorkSummary
    """
    if daily_hour_limit is None:
        daily_hour_limit = settings.DEFAULT_DAILY_HOUR_LIMIT

    eligible = closed_records(records)

    total_minutes = 0
    total_earnings = 0.0
    minutes_by_day: Dict = defaultdict(int)

    for record in eligible:
        worked = minutes_worked(record)
        total_minutes += worked
        # 逐筆加總未取整的收入
        total_earnings += earnings(record, rate_for(record, hourly_rate))
        minutes_by_day[local_date(record.clock_in, timezone)] += worked

    limit_minutes = daily_hour_limit * 60
    overtime = sum(max(0, day_total - limit_minutes) for day_total in minutes_by_day.values())

    start, end = date_range if date_range else (None, None)
    return WorkSummary(
        start=start,
        end=end,
        total_minutes=total_minutes,
        total_hours=total_minutes / 60,
        total_earnings=total_earnings,
        overtime_minutes=round(overtime),
        record_count=len(eligible),
        days_worked=len(minutes_by_day),
    )


def compute_statistics(
    records: Iterable,
    hourly_rate: HourlyRate,
    daily_hour_limit: Optional[float] = None,
    now: Optional[datetime] = None,
    timezone: Optional[str] = None,
) -> Statistics:
    """
    計算今日、本週 (週一開始)、本月的統計。

    averageHoursPerDay = 本月總時數 / 本月有紀錄的天數，沒有紀錄時為 0。
    """
    now = now or utc_now()
    timezone = timezone or settings.TIMEZONE
    eligible = closed_records(records)

    summaries = {}
    for name, period in (("today", day_range), ("week", week_range), ("month", month_range)):
        window = period(now, timezone)
        summaries[name] = summarize(
            records_in_range(eligible, window), hourly_rate, daily_hour_limit, timezone, window
        )

    month = summaries["month"]
    average = month.total_hours / month.days_worked if month.days_worked else 0.0

    return Statistics(
        timezone=timezone,
        generated_at=now,
        today=summaries["today"],
        week=summaries["week"],
        month=month,
        average_hours_per_day=average,
        total_records=len(eligible),
    )


def month_summary(
    records: Iterable,
    year: int,
    month: int,
    hourly_rate: HourlyRate,
    daily_hour_limit: Optional[float] = None,
    timezone: Optional[str] = None,
) -> MonthlyRecords:
    """歷史月份檢視：該月已下班的紀錄 (新到舊) 與彙總"""
    timezone = timezone or settings.TIMEZONE
    window = month_range_for(year, month, timezone)
    selected = records_in_range(closed_records(records), window)
    selected.sort(key=lambda record: record.clock_in, reverse=True)

    return MonthlyRecords(
        year=year,
        month=month,
        summary=summarize(selected, hourly_rate, daily_hour_limit, timezone, window),
        records=[TimeRecordResponse.model_validate(record) for record in selected],
    )
