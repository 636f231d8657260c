"""
Clock service layer: clock-in / clock-out transitions and manual corrections.

A user is either idle (no open record) or working (exactly one open record).
"""

import logging
from datetime import date, datetime
from threading import Lock
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ValidationError, PermissionDeniedError
from app.models.job import Job
from app.models.time_record import TimeRecord
from app.models.user import User
from app.schemas.time_record import ClockStatus, ClockStatusResponse, TimeRecordResponse
from app.services.calculator import live_minutes
from app.store import EntityStore
from app.utils.datetime_utils import utc_now, to_utc, local_date
from app.utils.validators import validate_photo, validate_date_range

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"clock_in", "clock_out", "break_minutes", "note", "job_id"}

# 以用戶 ID 為鍵，程序存續期間不回收；數量以用戶數為上限
_user_locks: Dict[str, Lock] = {}
_registry_lock = Lock()


def user_lock(user_id: str) -> Lock:
    """每位用戶一把鎖，序列化「檢查後寫入」"""
    with _registry_lock:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = _user_locks[user_id] = Lock()
        return lock


class ClockService:
    """上下班打卡業務邏輯服務"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = None, timezone_str: str = None):
        self.store = EntityStore(db)
        self.clock = clock or utc_now
        self.timezone_str = timezone_str or settings.TIMEZONE

    def clock_in(self, user_id: str, job_id: str, photo: Optional[str] = None) -> TimeRecord:
        """
        上班打卡。

        Args:
            user_id: 用戶 ID
            job_id: 工作 ID，必須屬於該用戶且為啟用狀態
            photo: 上班照片 (base64)

        Returns:
            新建立的進行中紀錄

        Raises:
            NotFoundError: 用戶或工作不存在
            ValidationError: 工作不屬於該用戶或已停用
            ConflictError: 已有進行中的紀錄
        """
        if self.store.get(User, user_id) is None:
            raise NotFoundError("User not found", {"userId": user_id})

        job = self.store.get(Job, job_id)
        if job is None:
            raise NotFoundError("Job not found", {"jobId": job_id})
        if job.user_id != user_id:
            raise ValidationError("Job does not belong to this user", field="jobId")
        if not job.is_active:
            raise ValidationError("Job is not active", field="jobId")

        photo = validate_photo(photo, "clockInPhoto")

        with user_lock(user_id):
            open_record = self.get_open_record(user_id)
            if open_record is not None:
                raise ConflictError("Already clocked in", {"recordId": open_record.id})

            now = self.clock()
            record = TimeRecord(
                user_id=user_id,
                job_id=job_id,
                clock_in=now,
                clock_out=None,
                clock_in_photo=photo,
                break_minutes=0,
                is_manual_edit=False,
                date=local_date(now, self.timezone_str),
            )
            try:
                record = self.store.insert(record)
            except ConflictError:
                # 其他程序搶先寫入，由唯一索引擋下
                raise ConflictError("Already clocked in", {"userId": user_id})

        logger.info(f"User {user_id} clocked in on job {job_id} at {record.clock_in.isoformat()}")
        return record

    def clock_out(
        self,
        user_id: str,
        photo: Optional[str] = None,
        note: Optional[str] = None,
        break_minutes: Optional[int] = None,
    ) -> TimeRecord:
        """
        下班打卡。

        下班時間早於上班時間時 (時鐘偏移) 照樣寫入，工時計算會視為 0。

        Raises:
            NotFoundError: 沒有進行中的紀錄
            ValidationError: 休息時間為負數
        """
        if break_minutes is not None and break_minutes < 0:
            raise ValidationError("breakMinutes must not be negative", field="breakMinutes")
        photo = validate_photo(photo, "clockOutPhoto")

        with user_lock(user_id):
            record = self.get_open_record(user_id)
            if record is None:
                raise NotFoundError("No open record to clock out", {"userId": user_id})

            now = self.clock()
            changes = {"clock_out": now, "clock_out_photo": photo}
            if note is not None:
                changes["note"] = note
            if break_minutes is not None:
                changes["break_minutes"] = break_minutes

            if now < record.clock_in:
                logger.warning(f"Clock-out for record {record.id} precedes its clock-in")

            record = self.store.update(TimeRecord, record.id, changes)

        logger.info(f"User {user_id} clocked out of record {record.id}")
        return record

    def get_open_record(self, user_id: str) -> Optional[TimeRecord]:
        return self.store.find_one(
            TimeRecord,
            TimeRecord.user_id == user_id,
            TimeRecord.clock_out.is_(None),
        )

    def get_status(self, user_id: str) -> ClockStatusResponse:
        """idle / working，以及進行中紀錄的暫時工時"""
        record = self.get_open_record(user_id)
        if record is None:
            return ClockStatusResponse(status=ClockStatus.IDLE)

        return ClockStatusResponse(
            status=ClockStatus.WORKING,
            record=TimeRecordResponse.model_validate(record),
            live_minutes=live_minutes(record, self.clock()),
        )

    def edit_record(self, record_id: str, editor_id: str, changes: Dict) -> TimeRecord:
        """
        手動修正紀錄，只有紀錄本人可以修改。

        Args:
            record_id: 紀錄 ID
            editor_id: 修改者 ID
            changes: 要變更的欄位 (clock_in, clock_out, break_minutes, note, job_id)

        Raises:
            NotFoundError: 紀錄或工作不存在
            PermissionDeniedError: 非紀錄本人
            ValidationError: 下班早於上班等不合法的資料
            ConflictError: 清空下班時間會造成兩筆進行中紀錄
        """
        record = self.store.get(TimeRecord, record_id)
        if record is None:
            raise NotFoundError("Record not found", {"recordId": record_id})
        if record.user_id != editor_id:
            raise PermissionDeniedError("Only the record owner can edit it")

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")

        changes = dict(changes)
        if "clock_in" in changes:
            if changes["clock_in"] is None:
                raise ValidationError("clockIn is required", field="clockIn")
            changes["clock_in"] = to_utc(changes["clock_in"], self.timezone_str)
        if changes.get("clock_out") is not None:
            changes["clock_out"] = to_utc(changes["clock_out"], self.timezone_str)

        clock_in = changes.get("clock_in", record.clock_in)
        clock_out = changes["clock_out"] if "clock_out" in changes else record.clock_out
        if clock_out is not None and clock_out < clock_in:
            raise ValidationError("clockOut must not be earlier than clockIn", field="clockOut")

        if "break_minutes" in changes:
            if changes["break_minutes"] is None:
                changes["break_minutes"] = 0
            elif changes["break_minutes"] < 0:
                raise ValidationError("breakMinutes must not be negative", field="breakMinutes")

        if changes.get("job_id") is not None:
            job = self.store.get(Job, changes["job_id"])
            if job is None:
                raise NotFoundError("Job not found", {"jobId": changes["job_id"]})
            if job.user_id != record.user_id:
                raise ValidationError("Job does not belong to this user", field="jobId")
        elif "job_id" in changes:
            raise ValidationError("jobId is required", field="jobId")

        changes["is_manual_edit"] = True
        changes["date"] = local_date(clock_in, self.timezone_str)

        with user_lock(record.user_id):
            if clock_out is None and record.clock_out is not None:
                other = self.get_open_record(record.user_id)
                if other is not None and other.id != record.id:
                    raise ConflictError(
                        "Reopening this record would leave two open records", {"recordId": other.id}
                    )
            record = self.store.update(TimeRecord, record_id, changes)

        logger.info(f"Record {record_id} manually edited by {editor_id}")
        return record

    def delete_record(self, record_id: str, editor_id: str) -> None:
        record = self.store.get(TimeRecord, record_id)
        if record is None:
            raise NotFoundError("Record not found", {"recordId": record_id})
        if record.user_id != editor_id:
            raise PermissionDeniedError("Only the record owner can delete it")

        self.store.delete(TimeRecord, record_id)
        logger.info(f"Record {record_id} deleted by {editor_id}")

    def list_records(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = True,
    ) -> List[TimeRecord]:
        """
        取得用戶的紀錄，可依日期範圍篩選 (含起訖日)。
        """
        validate_date_range(start_date, end_date)

        criteria = [TimeRecord.user_id == user_id]
        if start_date:
            criteria.append(TimeRecord.date >= start_date)
        if end_date:
            criteria.append(TimeRecord.date <= end_date)

        order = TimeRecord.clock_in.desc() if newest_first else TimeRecord.clock_in.asc()
        return self.store.find(TimeRecord, *criteria, order_by=order)
