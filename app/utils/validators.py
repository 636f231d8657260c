import math
import re
from datetime import date
from typing import Optional

from app.config import settings
from app.exceptions import ValidationError


JOB_COLORS = [
    '#3b82f6',  # blue
    '#10b981',  # emerald
    '#f59e0b',  # amber
    '#ef4444',  # red
    '#8b5cf6',  # violet
    '#ec4899',  # pink
    '#06b6d4',  # cyan
    '#84cc16',  # lime
]

MIN_PASSWORD_LENGTH = 6


def validate_password_strength(password: str) -> tuple[bool, list]:
    """驗證密碼強度"""
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"密碼長度至少需要 {MIN_PASSWORD_LENGTH} 個字符")

    return len(errors) == 0, errors


def validate_time_format(value: str) -> bool:
    """驗證時間格式 (HH:mm)"""
    return re.match(r'^([01]\d|2[0-3]):[0-5]\d$', value or '') is not None


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def validate_time_range(start_time: str, end_time: str) -> None:
    """驗證排班時段，結束時間必須晚於開始時間"""
    for field, value in (('startTime', start_time), ('endTime', end_time)):
        if not validate_time_format(value):
            raise ValidationError(f"{field} must be in HH:mm format", field=field)

    if time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise ValidationError("endTime must be later than startTime", field='endTime')


def validate_hex_color(color: str) -> bool:
    """驗證顏色格式 (#RRGGBB)"""
    return re.match(r'^#[0-9a-fA-F]{6}$', color or '') is not None


def validate_hourly_rate(rate) -> bool:
    """時薪必須為有限正數"""
    if rate is None or isinstance(rate, bool):
        return False
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        return False
    return math.isfinite(rate) and rate > 0


def normalize_invite_code(code: str) -> str:
    """邀請碼比對不分大小寫，一律以大寫儲存"""
    return (code or '').strip().upper()


def validate_photo(photo: Optional[str], field: str = 'photo') -> Optional[str]:
    """照片為不透明的 base64 字串，只檢查大小"""
    if photo is None or photo == '':
        return None
    if len(photo) > settings.MAX_PHOTO_SIZE:
        raise ValidationError(f"{field} exceeds the maximum size of {settings.MAX_PHOTO_SIZE} bytes", field=field)
    return photo


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    """驗證日期範圍"""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate must not be after endDate", field='startDate')


def validate_year_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12", field='month')
    if not 1970 <= year <= 9999:
        raise ValidationError("year is out of range", field='year')


def sanitize_input(text: str) -> str:
    """清理輸入文字"""
    if not text:
        return ""

    # 移除前後空白
    text = text.strip()

    # 移除多餘的空白字符
    text = re.sub(r'\s+', ' ', text)

    return text
