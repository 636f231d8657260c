"""
Team service layer: team membership and the manager roll-up.
"""

import logging
import secrets
import string
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ValidationError, PermissionDeniedError
from app.models.time_record import TimeRecord
from app.models.user import User, Team
from app.schemas.team import MemberView, MemberRollup, TeamTotals, TeamRollup
from app.schemas.user import UserResponse
from app.services.statistics_service import compute_statistics, month_summary
from app.store import EntityStore
from app.utils.datetime_utils import utc_now
from app.utils.validators import normalize_invite_code, sanitize_input, validate_year_month

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code(length: int = None) -> str:
    length = length or settings.INVITE_CODE_LENGTH
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


class TeamService:
    """團隊業務邏輯服務"""

    def __init__(self, db: Session, code_generator=None, timezone_str: str = None):
        self.store = EntityStore(db)
        self.code_generator = code_generator or generate_invite_code
        self.timezone_str = timezone_str or settings.TIMEZONE

    def create_team(self, manager: User, name: str, description: Optional[str] = None) -> Team:
        """
        建立團隊，每位管理者只能擁有一個團隊。

        邀請碼碰撞時重新產生，最多嘗試 INVITE_CODE_MAX_ATTEMPTS 次。

        Raises:
            PermissionDeniedError: 非管理者
            ConflictError: 已擁有團隊，或無法產生不重複的邀請碼
        """
        if not manager.is_manager:
            raise PermissionDeniedError("Only managers can create teams")
        if self.store.find_one(Team, Team.manager_id == manager.id) is not None:
            raise ConflictError("Manager already owns a team")

        name = sanitize_input(name)
        if not name:
            raise ValidationError("Team name is required", field="name")

        team = None
        for attempt in range(settings.INVITE_CODE_MAX_ATTEMPTS):
            code = self.code_generator()
            if self.store.find_one(Team, Team.invite_code == code) is not None:
                logger.debug(f"Invite code collision on attempt {attempt + 1}")
                continue
            try:
                team = self.store.insert(
                    Team(name=name, description=description, manager_id=manager.id, invite_code=code)
                )
                break
            except ConflictError:
                logger.debug(f"Invite code taken concurrently on attempt {attempt + 1}")

        if team is None:
            raise ConflictError("Could not generate a unique invite code")

        self.store.update(User, manager.id, {"team_id": team.id})
        logger.info(f"Manager {manager.id} created team {team.id} ({team.invite_code})")
        return team

    def get_team(self, team_id: str) -> Team:
        team = self.store.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found", {"teamId": team_id})
        return team

    def get_team_for_manager(self, team_id: str, manager: User) -> Team:
        team = self.get_team(team_id)
        if team.manager_id != manager.id:
            raise PermissionDeniedError("Only the team's manager can do this")
        return team

    def join_team(self, user: User, invite_code: str) -> Team:
        """
        以邀請碼加入團隊 (不分大小寫)。

        Raises:
            NotFoundError: 邀請碼不存在
            ConflictError: 管理者已擁有其他團隊
        """
        code = normalize_invite_code(invite_code)
        team = self.store.find_one(Team, Team.invite_code == code)
        if team is None:
            raise NotFoundError("Invalid invite code", {"inviteCode": code})

        if user.team_id == team.id:
            return team

        owned = self.store.find_one(Team, Team.manager_id == user.id)
        if owned is not None:
            raise ConflictError("Managers cannot join another team while owning one")

        self.store.update(User, user.id, {"team_id": team.id})
        logger.info(f"User {user.id} joined team {team.id}")
        return team

    def leave_team(self, user: User) -> User:
        """離開團隊；管理者不能離開自己擁有的團隊"""
        if not user.team_id:
            raise ValidationError("User is not in a team")

        team = self.store.get(Team, user.team_id)
        if team is not None and team.manager_id == user.id:
            raise ConflictError("A manager cannot leave the team they own")

        team_id = user.team_id
        user = self.store.update(User, user.id, {"team_id": None})
        logger.info(f"User {user.id} left team {team_id}")
        return user

    def get_members(self, team_id: str, view: MemberView = MemberView.ALL) -> List[User]:
        """
        團隊成員清單。

        Args:
            team_id: 團隊 ID
            view: all 為所有成員，employees 只含員工 (排除管理者角色)
        """
        self.get_team(team_id)

        criteria = [User.team_id == team_id]
        if view == MemberView.EMPLOYEES:
            criteria.append(User.role == "employee")
        return self.store.find(User, *criteria, order_by=User.name)

    def rollup(
        self,
        team_id: str,
        requester: User,
        year: int,
        month: int,
        view: MemberView = MemberView.ALL,
        now: Optional[datetime] = None,
    ) -> TeamRollup:
        """
        管理者的團隊彙總：每位成員獨立計算今日、本週、本月與選定月份的工時。

        團隊合計為各成員合計的逐項相加，不從合併後的紀錄重新計算。

        Raises:
            NotFoundError: 團隊不存在
            PermissionDeniedError: 非該團隊的管理者
        """
        validate_year_month(year, month)
        self.get_team_for_manager(team_id, requester)
        now = now or utc_now()

        members = []
        totals = TeamTotals()
        for member in self.get_members(team_id, view):
            records = self.store.find(TimeRecord, TimeRecord.user_id == member.id)
            stats = compute_statistics(records, None, now=now, timezone=self.timezone_str)
            selected = month_summary(records, year, month, None, timezone=self.timezone_str)

            row = MemberRollup(
                member=UserResponse.model_validate(member),
                today_minutes=stats.today.total_minutes,
                week_minutes=stats.week.total_minutes,
                month_minutes=stats.month.total_minutes,
                selected_month_minutes=selected.summary.total_minutes,
                records=selected.records,
            )
            members.append(row)

            totals.today_minutes += row.today_minutes
            totals.week_minutes += row.week_minutes
            totals.month_minutes += row.month_minutes
            totals.selected_month_minutes += row.selected_month_minutes

        return TeamRollup(
            team_id=team_id,
            year=year,
            month=month,
            view=view,
            members=members,
            totals=totals,
        )
