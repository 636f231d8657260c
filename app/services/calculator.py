"""
Duration and earnings calculations for a single time record.
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from app.utils.validators import validate_hourly_rate


def _gross_minutes(clock_in: datetime, clock_out: datetime) -> int:
    return math.floor((clock_out - clock_in).total_seconds() / 60)


def minutes_worked(record) -> int:
    """
    計算紀錄的實際工時 (分鐘)。

    未下班的紀錄回傳 0；扣除休息時間後不會小於 0，
    即使下班時間早於上班時間 (時鐘偏移) 亦同。
    """
    if record.clock_out is None:
        return 0
    gross = _gross_minutes(record.clock_in, record.clock_out)
    return max(0, gross - (record.break_minutes or 0))


def live_minutes(record, now: datetime) -> int:
    """進行中紀錄的暫時工時，以 now 代替下班時間，不寫回資料庫"""
    end = record.clock_out if record.clock_out is not None else now
    gross = _gross_minutes(record.clock_in, end)
    return max(0, gross - (record.break_minutes or 0))


def earnings(record, hourly_rate) -> float:
    """
    計算紀錄的收入：(工時 / 60) * 時薪。

    時薪缺漏、非有限數值或非正數時回傳 0。不做四捨五入。
    """
    if not validate_hourly_rate(hourly_rate):
        return 0.0
    return (minutes_worked(record) / 60) * float(hourly_rate)


def round_currency(amount: float) -> int:
    """顯示用的金額取整 (四捨五入到整數單位)"""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
