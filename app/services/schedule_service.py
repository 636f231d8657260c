"""
Schedule service layer: planned shifts for a user, set by themself or their team manager.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.job import Job
from app.models.schedule import Schedule
from app.models.user import User, Team
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleMode
from app.store import EntityStore
from app.utils.auth import manages_user
from app.utils.datetime_utils import month_bounds
from app.utils.validators import validate_time_range, validate_year_month

logger = logging.getLogger(__name__)


class ScheduleService:
    """排班業務邏輯服務"""

    def __init__(self, db: Session):
        self.db = db
        self.store = EntityStore(db)

    def _check_access(self, actor: User, user_id: str) -> User:
        """本人或其團隊管理者才能排班"""
        user = self.store.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", {"userId": user_id})
        if actor.id != user.id and not manages_user(self.db, actor, user):
            raise PermissionDeniedError("Not allowed to manage this user's schedules")
        return user

    def _check_job(self, job_id: Optional[str], user_id: str) -> None:
        if job_id is None:
            return
        job = self.store.get(Job, job_id)
        if job is None:
            raise NotFoundError("Job not found", {"jobId": job_id})
        if job.user_id != user_id:
            raise ValidationError("Job does not belong to this user", field="jobId")

    def _month_criteria(self, year: Optional[int], month: Optional[int]) -> list:
        """指定月份時只取該月的單日排班，每週排班一律包含"""
        if year is None or month is None:
            return []
        validate_year_month(year, month)
        first, next_first = month_bounds(year, month)
        return [or_(
            Schedule.mode == ScheduleMode.WEEKLY.value,
            and_(Schedule.date >= first, Schedule.date < next_first),
        )]

    def list_schedules(self, user_id: str, year: int = None, month: int = None) -> List[Schedule]:
        criteria = [Schedule.user_id == user_id] + self._month_criteria(year, month)
        return self.store.find(
            Schedule, *criteria, order_by=[Schedule.date, Schedule.weekday, Schedule.start_time]
        )

    def team_schedules(self, team_id: str, requester: User, year: int = None, month: int = None) -> List[Schedule]:
        """團隊所有成員的排班，限團隊管理者與成員查看"""
        team = self.store.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found", {"teamId": team_id})
        if team.manager_id != requester.id and requester.team_id != team.id:
            raise PermissionDeniedError("Not a member of this team")

        member_ids = [member.id for member in self.store.find(User, User.team_id == team_id)]
        if not member_ids:
            return []

        criteria = [Schedule.user_id.in_(member_ids)] + self._month_criteria(year, month)
        return self.store.find(
            Schedule, *criteria, order_by=[Schedule.date, Schedule.weekday, Schedule.start_time]
        )

    def create_schedule(self, creator: User, data: ScheduleCreate) -> Schedule:
        """
        建立排班。

        Args:
            creator: 建立者，未指定 userId 時為自己排班
            data: 排班資料

        Raises:
            NotFoundError: 用戶或工作不存在
            PermissionDeniedError: 非本人也非其團隊管理者
        """
        user_id = data.user_id or creator.id
        self._check_access(creator, user_id)
        self._check_job(data.job_id, user_id)

        schedule = self.store.insert(Schedule(
            user_id=user_id,
            job_id=data.job_id,
            mode=data.mode.value,
            date=data.date if data.mode == ScheduleMode.DATE else None,
            weekday=data.weekday if data.mode == ScheduleMode.WEEKLY else None,
            start_time=data.start_time,
            end_time=data.end_time,
            note=data.note or "",
            created_by=creator.id,
        ))
        logger.info(f"User {creator.id} scheduled {user_id} ({schedule.mode})")
        return schedule

    def get_schedule(self, schedule_id: str, actor: User) -> Schedule:
        schedule = self.store.get(Schedule, schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found", {"scheduleId": schedule_id})
        self._check_access(actor, schedule.user_id)
        return schedule

    def update_schedule(self, schedule_id: str, actor: User, data: ScheduleUpdate) -> Schedule:
        schedule = self.get_schedule(schedule_id, actor)
        changes = data.model_dump(exclude_unset=True)
        for field in ("start_time", "end_time"):
            if field in changes and changes[field] is None:
                changes.pop(field)

        mode = ScheduleMode(changes.get("mode") or schedule.mode)
        changes["mode"] = mode.value
        if mode == ScheduleMode.DATE:
            if (changes.get("date") if "date" in changes else schedule.date) is None:
                raise ValidationError("date is required when mode is 'date'", field="date")
            changes["weekday"] = None
        else:
            if (changes.get("weekday") if "weekday" in changes else schedule.weekday) is None:
                raise ValidationError("weekday is required when mode is 'weekly'", field="weekday")
            changes["date"] = None

        validate_time_range(
            changes.get("start_time") or schedule.start_time,
            changes.get("end_time") or schedule.end_time,
        )
        if "job_id" in changes:
            self._check_job(changes["job_id"], schedule.user_id)
        if "note" in changes and changes["note"] is None:
            changes["note"] = ""

        schedule = self.store.update(Schedule, schedule_id, changes)
        logger.info(f"Schedule {schedule_id} updated by {actor.id}")
        return schedule

    def delete_schedule(self, schedule_id: str, actor: User) -> None:
        self.get_schedule(schedule_id, actor)
        self.store.delete(Schedule, schedule_id)
        logger.info(f"Schedule {schedule_id} deleted by {actor.id}")
