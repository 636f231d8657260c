from datetime import datetime
from typing import List, Optional

from app.schemas.base import CamelModel
from app.schemas.time_record import TimeRecordResponse


class WorkSummary(CamelModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    total_minutes: int = 0
    total_hours: float = 0.0
    total_earnings: float = 0.0
    overtime_minutes: int = 0
    record_count: int = 0
    days_worked: int = 0


class Statistics(CamelModel):
    timezone: str
    generated_at: datetime
    today: WorkSummary
    week: WorkSummary
    month: WorkSummary
    average_hours_per_day: float = 0.0
    total_records: int = 0


class MonthlyRecords(CamelModel):
    year: int
    month: int
    summary: WorkSummary
    records: List[TimeRecordResponse]
