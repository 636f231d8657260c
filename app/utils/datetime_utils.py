from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple

import pytz

from app.config import settings


DateRange = Tuple[datetime, datetime]


def get_user_timezone(timezone_str: Optional[str] = None) -> pytz.BaseTzInfo:
    """獲取時區，未知時區退回系統設定"""
    try:
        return pytz.timezone(timezone_str or settings.TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone(settings.TIMEZONE)


def utc_now() -> datetime:
    """獲取當前 UTC 時間"""
    return datetime.now(pytz.UTC)


def to_utc(dt: datetime, timezone_str: Optional[str] = None) -> datetime:
    """將本地時間轉換為 UTC，無時區資訊時視為設定時區"""
    if dt.tzinfo is None:
        dt = get_user_timezone(timezone_str).localize(dt)
    return dt.astimezone(pytz.UTC)


def to_user_timezone(dt: datetime, timezone_str: Optional[str] = None) -> datetime:
    """將 UTC 時間轉換為設定時區，無時區資訊時視為 UTC"""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(get_user_timezone(timezone_str))


def local_date(dt: datetime, timezone_str: Optional[str] = None) -> date:
    """時間點在設定時區下的日曆日期"""
    return to_user_timezone(dt, timezone_str).date()


def format_datetime(dt: datetime, timezone_str: Optional[str] = None, format_str: str = "%Y-%m-%d %H:%M") -> str:
    """格式化時間為設定時區字串"""
    return to_user_timezone(dt, timezone_str).strftime(format_str)


def start_of_day(day: date, timezone_str: Optional[str] = None) -> datetime:
    """本地日期的午夜 (含時區)"""
    return get_user_timezone(timezone_str).localize(datetime.combine(day, time.min))


def get_week_start(day: date) -> date:
    """獲取週開始日期 (週一)，週日視為前一週的第 7 天"""
    return day - timedelta(days=day.weekday())


def day_range(now: datetime, timezone_str: Optional[str] = None) -> DateRange:
    """今天：[午夜, 隔天午夜)"""
    today = local_date(now, timezone_str)
    return (
        start_of_day(today, timezone_str),
        start_of_day(today + timedelta(days=1), timezone_str),
    )


def week_range(now: datetime, timezone_str: Optional[str] = None) -> DateRange:
    """本週：[週一 00:00, 下週一 00:00)"""
    monday = get_week_start(local_date(now, timezone_str))
    return (
        start_of_day(monday, timezone_str),
        start_of_day(monday + timedelta(days=7), timezone_str),
    )


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """指定月份的第一天與下個月第一天"""
    first = date(year, month, 1)
    if month == 12:
        return first, date(year + 1, 1, 1)
    return first, date(year, month + 1, 1)


def month_range_for(year: int, month: int, timezone_str: Optional[str] = None) -> DateRange:
    """指定月份：[當月 1 日 00:00, 下月 1 日 00:00)"""
    first, next_first = month_bounds(year, month)
    return start_of_day(first, timezone_str), start_of_day(next_first, timezone_str)


def month_range(now: datetime, timezone_str: Optional[str] = None) -> DateRange:
    """本月"""
    today = local_date(now, timezone_str)
    return month_range_for(today.year, today.month, timezone_str)


def in_range(dt: datetime, date_range: DateRange) -> bool:
    start, end = date_range
    return start <= dt < end
