"""
Team API routes: creation, membership and the manager roll-up.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import PermissionDeniedError
from app.models.user import User
from app.schemas.schedule import ScheduleResponse
from app.schemas.team import (
    MemberView, TeamCreate, JoinTeamRequest, TeamResponse, JoinTeamResponse, TeamRollup,
)
from app.schemas.user import UserResponse
from app.services.schedule_service import ScheduleService
from app.services.team_service import TeamService
from app.utils.auth import get_current_user, get_current_manager
from app.utils.datetime_utils import utc_now, local_date

router = APIRouter(prefix="/teams", tags=["teams"])


def _check_can_view(team, current_user: User) -> None:
    if team.manager_id != current_user.id and current_user.team_id != team.id:
        raise PermissionDeniedError("Not a member of this team")


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED, summary="建立團隊")
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(get_current_manager),
    db: Session = Depends(get_db)
):
    """
    建立團隊並產生邀請碼。

    - 僅管理者可以建立
    - 每位管理者只能擁有一個團隊
    """
    return TeamService(db).create_team(current_user, team_data.name, team_data.description)


@router.post("/join", response_model=JoinTeamResponse, summary="加入團隊")
async def join_team(
    join_request: JoinTeamRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """以邀請碼加入團隊，邀請碼不分大小寫"""
    team = TeamService(db).join_team(current_user, join_request.invite_code)
    return JoinTeamResponse(
        team=TeamResponse.model_validate(team),
        user=UserResponse.model_validate(current_user),
    )


@router.post("/leave", response_model=UserResponse, summary="離開團隊")
async def leave_team(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TeamService(db).leave_team(current_user)


@router.get("/{team_id}", response_model=TeamResponse, summary="取得團隊")
async def get_team(
    team_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    team = TeamService(db).get_team(team_id)
    _check_can_view(team, current_user)
    return team


@router.get("/{team_id}/members", response_model=List[UserResponse], summary="團隊所有成員")
async def get_members(
    team_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = TeamService(db)
    _check_can_view(service.get_team(team_id), current_user)
    return service.get_members(team_id, MemberView.ALL)


@router.get("/{team_id}/employees", response_model=List[UserResponse], summary="團隊員工")
async def get_employees(
    team_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """只含員工角色的成員"""
    service = TeamService(db)
    _check_can_view(service.get_team(team_id), current_user)
    return service.get_members(team_id, MemberView.EMPLOYEES)


@router.get("/{team_id}/rollup", response_model=TeamRollup, summary="團隊工時彙總")
async def get_rollup(
    team_id: str,
    year: Optional[int] = Query(None, description="選定年份，預設今年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="選定月份，預設本月"),
    view: MemberView = Query(MemberView.ALL, description="all 或 employees"),
    current_user: User = Depends(get_current_manager),
    db: Session = Depends(get_db)
):
    """
    管理者查看團隊成員的工時。

    - 每位成員的今日、本週、本月工時
    - 選定月份的工時與紀錄 (含照片)
    - 團隊合計為成員合計相加
    """
    service = TeamService(db)
    now = utc_now()
    today = local_date(now, service.timezone_str)
    return service.rollup(
        team_id, current_user, year or today.year, month or today.month, view, now=now
    )


@router.get("/{team_id}/schedules", response_model=List[ScheduleResponse], summary="團隊排班")
async def get_team_schedules(
    team_id: str,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ScheduleService(db).team_schedules(team_id, current_user, year, month)
