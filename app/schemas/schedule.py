import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from app.schemas.base import CamelModel, UpdateModel
from app.utils.validators import validate_time_format, time_to_minutes


class ScheduleMode(str, Enum):
    DATE = "date"
    WEEKLY = "weekly"


class ScheduleCreate(CamelModel):
    user_id: Optional[str] = None
    job_id: Optional[str] = None
    mode: ScheduleMode = ScheduleMode.DATE
    date: Optional[dt.date] = None
    weekday: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: str
    end_time: str
    note: Optional[str] = Field(default="", max_length=500)

    @model_validator(mode="after")
    def check_consistency(self):
        if self.mode == ScheduleMode.DATE and self.date is None:
            raise ValueError("date is required when mode is 'date'")
        if self.mode == ScheduleMode.WEEKLY and self.weekday is None:
            raise ValueError("weekday is required when mode is 'weekly'")
        if not validate_time_format(self.start_time) or not validate_time_format(self.end_time):
            raise ValueError("startTime and endTime must be in HH:mm format")
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError("endTime must be later than startTime")
        return self


class ScheduleUpdate(UpdateModel):
    job_id: Optional[str] = None
    mode: Optional[ScheduleMode] = None
    date: Optional[dt.date] = None
    weekday: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    note: Optional[str] = Field(default=None, max_length=500)


class ScheduleResponse(CamelModel):
    id: str
    user_id: str
    job_id: Optional[str] = None
    mode: ScheduleMode
    date: Optional[dt.date] = None
    weekday: Optional[int] = None
    start_time: str
    end_time: str
    note: Optional[str] = None
    created_by: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
