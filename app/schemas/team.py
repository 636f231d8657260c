from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.time_record import TimeRecordResponse
from app.schemas.user import UserResponse


class MemberView(str, Enum):
    """兩種成員清單：全部成員或只有員工"""
    ALL = "all"
    EMPLOYEES = "employees"


class TeamCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class JoinTeamRequest(CamelModel):
    invite_code: str = Field(min_length=1, max_length=12)


class TeamResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    manager_id: str
    invite_code: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JoinTeamResponse(CamelModel):
    team: TeamResponse
    user: UserResponse


class MemberRollup(CamelModel):
    member: UserResponse
    today_minutes: int = 0
    week_minutes: int = 0
    month_minutes: int = 0
    selected_month_minutes: int = 0
    records: List[TimeRecordResponse] = []


class TeamTotals(CamelModel):
    today_minutes: int = 0
    week_minutes: int = 0
    month_minutes: int = 0
    selected_month_minutes: int = 0


class TeamRollup(CamelModel):
    team_id: str
    year: int
    month: int
    view: MemberView
    members: List[MemberRollup]
    totals: TeamTotals
