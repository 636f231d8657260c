import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel, UpdateModel


class ClockStatus(str, Enum):
    IDLE = "idle"
    WORKING = "working"


class ClockInRequest(CamelModel):
    job_id: str
    user_id: Optional[str] = None
    clock_in_photo: Optional[str] = None


class ClockOutRequest(CamelModel):
    user_id: Optional[str] = None
    clock_out_photo: Optional[str] = None
    note: Optional[str] = Field(default=None, max_length=500)
    break_minutes: Optional[int] = Field(default=None, ge=0)


class TimeRecordUpdate(UpdateModel):
    """手動修正打卡紀錄允許變更的欄位"""
    clock_in: Optional[dt.datetime] = None
    clock_out: Optional[dt.datetime] = None
    break_minutes: Optional[int] = Field(default=None, ge=0)
    note: Optional[str] = Field(default=None, max_length=500)
    job_id: Optional[str] = None


class TimeRecordResponse(CamelModel):
    id: str
    user_id: str
    job_id: str
    clock_in: dt.datetime
    clock_out: Optional[dt.datetime] = None
    clock_in_photo: Optional[str] = None
    clock_out_photo: Optional[str] = None
    break_minutes: int = 0
    note: Optional[str] = None
    is_manual_edit: bool = False
    date: dt.date
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ClockStatusResponse(CamelModel):
    status: ClockStatus
    record: Optional[TimeRecordResponse] = None
    live_minutes: int = 0
