"""
Report service layer for exporting time records.
"""

import io
import csv
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.models.job import Job
from app.models.user import User
from app.services.calculator import minutes_worked, earnings, round_currency
from app.services.clock_service import ClockService
from app.utils.datetime_utils import format_datetime

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "date", "job", "clock_in", "clock_out", "break_minutes",
    "minutes_worked", "hours_worked", "hourly_rate", "earnings", "note",
]


class ReportService:
    """報表業務邏輯服務"""

    def __init__(self, db: Session, timezone_str: str = None):
        self.clock_service = ClockService(db, timezone_str=timezone_str)
        self.store = self.clock_service.store
        self.timezone_str = self.clock_service.timezone_str

    def build_rows(self, user: User, start_date: Optional[date], end_date: Optional[date]) -> List[Dict]:
        """
        整理匯出用的資料列 (舊到新)。

        時間以設定時區顯示，金額四捨五入到整數。進行中的紀錄下班欄位留空。
        """
        records = self.clock_service.list_records(user.id, start_date, end_date, newest_first=False)
        jobs = {job.id: job for job in self.store.find(Job, Job.user_id == user.id)}

        rows = []
        for record in records:
            job = jobs.get(record.job_id)
            rate = job.hourly_rate if job else None
            worked = minutes_worked(record)
            rows.append({
                "date": record.date.strftime(settings.EXPORT_DATE_FORMAT),
                "job": job.name if job else "",
                "clock_in": format_datetime(record.clock_in, self.timezone_str, settings.EXPORT_DATETIME_FORMAT),
                "clock_out": (
                    format_datetime(record.clock_out, self.timezone_str, settings.EXPORT_DATETIME_FORMAT)
                    if record.clock_out else ""
                ),
                "break_minutes": record.break_minutes or 0,
                "minutes_worked": worked,
                "hours_worked": round(worked / 60, 2),
                "hourly_rate": rate if rate is not None else "",
                "earnings": round_currency(earnings(record, rate)),
                "note": record.note or "",
            })
        return rows

    def export_records_csv(
        self, user: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Tuple[bytes, str, str]:
        """
        匯出用戶的打卡紀錄為 CSV。

        Returns:
            (檔案內容, 檔案名稱, 內容類型) 的元組
        """
        rows = self.build_rows(user, start_date, end_date)

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        start = start_date.strftime("%Y%m%d") if start_date else "all"
        end = end_date.strftime("%Y%m%d") if end_date else "now"
        filename = f"records_{start}_{end}.csv"

        logger.info(f"Exported {len(rows)} records for user {user.id}")
        # BOM 讓試算表軟體正確辨識 UTF-8
        return output.getvalue().encode("utf-8-sig"), filename, "text/csv"
