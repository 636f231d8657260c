"""
Job service layer: hourly-rate jobs owned by a user.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.job import Job
from app.models.user import User
from app.schemas.job import JobCreate, JobUpdate, JobStatus
from app.store import EntityStore
from app.utils.validators import JOB_COLORS, validate_hourly_rate, sanitize_input

logger = logging.getLogger(__name__)


class JobService:
    """工作 (時薪) 業務邏輯服務"""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    def list_jobs(self, user_id: str, include_inactive: bool = False) -> List[Job]:
        criteria = [Job.user_id == user_id]
        if not include_inactive:
            criteria.append(Job.status == JobStatus.ACTIVE.value)
        return self.store.find(Job, *criteria, order_by=Job.created_at)

    def get_job(self, job_id: str, owner: User) -> Job:
        job = self.store.get(Job, job_id)
        if job is None:
            raise NotFoundError("Job not found", {"jobId": job_id})
        if job.user_id != owner.id:
            raise PermissionDeniedError("Job belongs to another user")
        return job

    def _check_active_limit(self, owner: User) -> None:
        """免費帳號只能有 FREE_ACTIVE_JOB_LIMIT 個啟用中的工作"""
        if owner.is_premium:
            return
        if len(self.list_jobs(owner.id)) >= settings.FREE_ACTIVE_JOB_LIMIT:
            raise PermissionDeniedError(
                "Free accounts are limited to one active job",
                {"limit": settings.FREE_ACTIVE_JOB_LIMIT},
            )

    def create_job(self, owner: User, job_data: JobCreate) -> Job:
        """
        建立工作。

        Raises:
            ValidationError: 時薪不是正數
            PermissionDeniedError: 超過免費帳號的工作數量
        """
        if not validate_hourly_rate(job_data.hourly_rate):
            raise ValidationError("hourlyRate must be a positive number", field="hourlyRate")

        self._check_active_limit(owner)

        # 未指定顏色時依序從色盤挑選
        color = job_data.color
        if not color:
            existing = self.store.find(Job, Job.user_id == owner.id)
            color = JOB_COLORS[len(existing) % len(JOB_COLORS)]

        job = self.store.insert(Job(
            user_id=owner.id,
            name=sanitize_input(job_data.name),
            hourly_rate=job_data.hourly_rate,
            daily_hour_limit=job_data.daily_hour_limit or settings.DEFAULT_DAILY_HOUR_LIMIT,
            status=JobStatus.ACTIVE.value,
            color=color,
        ))
        logger.info(f"User {owner.id} created job {job.id}")
        return job

    def update_job(self, job_id: str, owner: User, update_data: JobUpdate) -> Job:
        job = self.get_job(job_id, owner)

        changes: Dict = {
            field: value
            for field, value in update_data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if "name" in changes:
            changes["name"] = sanitize_input(changes["name"])
        if "status" in changes:
            changes["status"] = JobStatus(changes["status"]).value
            # 重新啟用也受數量限制
            if changes["status"] == JobStatus.ACTIVE.value and not job.is_active:
                self._check_active_limit(owner)

        if not changes:
            return job

        job = self.store.update(Job, job_id, changes)
        logger.info(f"Updated job {job_id}: {', '.join(sorted(changes))}")
        return job

    def retire_job(self, job_id: str, owner: User) -> Job:
        """軟刪除：狀態改為 retired，歷史紀錄仍可查到該工作"""
        job = self.get_job(job_id, owner)
        if not job.is_active:
            return job
        job = self.store.update(Job, job_id, {"status": JobStatus.RETIRED.value})
        logger.info(f"Retired job {job_id}")
        return job

    def pay_terms(self, user_id: str, job_id: Optional[str] = None) -> Tuple[Union[float, Dict[str, float]], float]:
        """
        統計用的時薪與每日工時上限。

        指定工作時使用該工作的設定；否則時薪為 jobId -> 時薪 對照表 (含已停用的工作)，
        上限取唯一啟用中工作的設定，沒有或有多個時用系統預設值。
        """
        jobs = self.store.find(Job, Job.user_id == user_id)
        if job_id is not None:
            job = next((job for job in jobs if job.id == job_id), None)
            if job is None:
                raise NotFoundError("Job not found", {"jobId": job_id})
            return job.hourly_rate, job.daily_hour_limit

        active = [job for job in jobs if job.is_active]
        limit = active[0].daily_hour_limit if len(active) == 1 else settings.DEFAULT_DAILY_HOUR_LIMIT
        return {job.id: job.hourly_rate for job in jobs}, limit
