"""
Schedule API routes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleResponse
from app.services.schedule_service import ScheduleService
from app.utils.auth import get_current_user, resolve_target_user

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", response_model=List[ScheduleResponse], summary="取得排班")
async def list_schedules(
    user_id: Optional[str] = Query(None, alias="userId"),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """指定年月時只回傳該月的單日排班，每週排班一律包含"""
    user = resolve_target_user(db, current_user, user_id)
    return ScheduleService(db).list_schedules(user.id, year, month)


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED, summary="建立排班")
async def create_schedule(
    schedule_data: ScheduleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    建立排班。

    - 未指定 userId 時為自己排班
    - 管理者可以為自己團隊的成員排班
    """
    return ScheduleService(db).create_schedule(current_user, schedule_data)


@router.put("/{schedule_id}", response_model=ScheduleResponse, summary="更新排班")
async def update_schedule(
    schedule_id: str,
    update_data: ScheduleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ScheduleService(db).update_schedule(schedule_id, current_user, update_data)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT, summary="刪除排班")
async def delete_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ScheduleService(db).delete_schedule(schedule_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
