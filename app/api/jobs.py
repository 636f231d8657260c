"""
Job API routes.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.job import JobCreate, JobUpdate, JobResponse
from app.services.job_service import JobService
from app.utils.auth import get_current_user

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobResponse], summary="取得工作列表")
async def list_jobs(
    include_inactive: bool = Query(False, alias="includeInactive", description="包含已停用的工作"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return JobService(db).list_jobs(current_user.id, include_inactive)


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED, summary="建立工作")
async def create_job(
    job_data: JobCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    建立工作。

    - 免費帳號只能有一個啟用中的工作
    """
    return JobService(db).create_job(current_user, job_data)


@router.put("/{job_id}", response_model=JobResponse, summary="更新工作")
async def update_job(
    job_id: str,
    update_data: JobUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return JobService(db).update_job(job_id, current_user, update_data)


@router.delete("/{job_id}", response_model=JobResponse, summary="停用工作")
async def retire_job(
    job_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """軟刪除，歷史紀錄仍保留"""
    return JobService(db).retire_job(job_id, current_user)
