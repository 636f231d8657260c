"""
Time record API routes: clock-in / clock-out, corrections and statistics.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.statistics import Statistics, MonthlyRecords
from app.schemas.time_record import (
    ClockInRequest, ClockOutRequest, TimeRecordUpdate, TimeRecordResponse, ClockStatusResponse,
)
from app.services.clock_service import ClockService
from app.services.job_service import JobService
from app.services.statistics_service import compute_statistics, month_summary
from app.utils.auth import get_current_user, resolve_target_user
from app.utils.datetime_utils import utc_now, local_date
from app.utils.validators import validate_year_month

router = APIRouter(prefix="/records", tags=["records"])


class RecordOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


@router.get("", response_model=List[TimeRecordResponse], summary="取得打卡紀錄列表")
async def list_records(
    user_id: Optional[str] = Query(None, alias="userId", description="用戶ID，預設為自己"),
    start_date: Optional[date] = Query(None, alias="startDate", description="開始日期"),
    end_date: Optional[date] = Query(None, alias="endDate", description="結束日期"),
    order: RecordOrder = Query(RecordOrder.NEWEST, description="newest 或 oldest"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    取得打卡紀錄。

    - 本人或其團隊管理者可以查看
    - 日期範圍以上班日期篩選，含起訖日
    """
    user = resolve_target_user(db, current_user, user_id)
    return ClockService(db).list_records(
        user.id, start_date, end_date, newest_first=order == RecordOrder.NEWEST
    )


@router.get("/status", response_model=ClockStatusResponse, summary="目前打卡狀態")
async def get_status(
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """idle 或 working，working 時附上進行中紀錄與目前累計分鐘數"""
    user = resolve_target_user(db, current_user, user_id)
    return ClockService(db).get_status(user.id)


@router.post("/clock-in", response_model=TimeRecordResponse, status_code=status.HTTP_201_CREATED, summary="上班打卡")
async def clock_in(
    request: ClockInRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    上班打卡。

    - 已有進行中的紀錄時回傳 409
    """
    user = resolve_target_user(db, current_user, request.user_id)
    return ClockService(db).clock_in(user.id, request.job_id, request.clock_in_photo)


@router.post("/clock-out", response_model=TimeRecordResponse, summary="下班打卡")
async def clock_out(
    request: ClockOutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    下班打卡。

    - 沒有進行中的紀錄時回傳 404
    """
    user = resolve_target_user(db, current_user, request.user_id)
    return ClockService(db).clock_out(
        user.id, request.clock_out_photo, request.note, request.break_minutes
    )


@router.get("/statistics", response_model=Statistics, summary="工時統計")
async def get_statistics(
    user_id: Optional[str] = Query(None, alias="userId"),
    job_id: Optional[str] = Query(None, alias="jobId", description="只統計此工作"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    今日、本週 (週一開始)、本月的工時、收入與加班。

    - 每日超過工時上限的部分計入加班
    """
    user = resolve_target_user(db, current_user, user_id)
    service = ClockService(db)
    hourly_rate, daily_limit = JobService(db).pay_terms(user.id, job_id)

    records = service.list_records(user.id)
    if job_id:
        records = [record for record in records if record.job_id == job_id]

    return compute_statistics(records, hourly_rate, daily_limit, now=utc_now(), timezone=service.timezone_str)


@router.get("/monthly", response_model=MonthlyRecords, summary="月份紀錄")
async def get_monthly(
    user_id: Optional[str] = Query(None, alias="userId"),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """歷史紀錄：選定月份已下班的紀錄 (新到舊) 與彙總"""
    user = resolve_target_user(db, current_user, user_id)
    service = ClockService(db)
    today = local_date(utc_now(), service.timezone_str)
    year, month = year or today.year, month or today.month
    validate_year_month(year, month)

    hourly_rate, daily_limit = JobService(db).pay_terms(user.id)
    return month_summary(
        service.list_records(user.id), year, month, hourly_rate, daily_limit, service.timezone_str
    )


@router.put("/{record_id}", response_model=TimeRecordResponse, summary="修正打卡紀錄")
async def update_record(
    record_id: str,
    update_data: TimeRecordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    手動修正紀錄。

    - 只有紀錄本人可以修改
    - 下班時間不可早於上班時間
    - 清空下班時間時不可造成兩筆進行中紀錄 (409)
    """
    changes = update_data.model_dump(exclude_unset=True)
    return ClockService(db).edit_record(record_id, current_user.id, changes)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT, summary="刪除打卡紀錄")
async def delete_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ClockService(db).delete_record(record_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
