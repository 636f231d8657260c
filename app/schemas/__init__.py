from .user import UserRole, UserCreate, UserUpdate, UserResponse, LoginRequest, Token
from .job import JobStatus, JobCreate, JobUpdate, JobResponse
from .time_record import (
    ClockStatus, ClockInRequest, ClockOutRequest, TimeRecordUpdate, TimeRecordResponse, ClockStatusResponse
)
from .statistics import WorkSummary, Statistics, MonthlyRecords
from .team import (
    MemberView, TeamCreate, JoinTeamRequest, TeamResponse, JoinTeamResponse, MemberRollup, TeamTotals, TeamRollup
)
from .schedule import ScheduleMode, ScheduleCreate, ScheduleUpdate, ScheduleResponse

__all__ = [
    "UserRole", "UserCreate", "UserUpdate", "UserResponse", "LoginRequest", "Token",
    "JobStatus", "JobCreate", "JobUpdate", "JobResponse",
    "ClockStatus", "ClockInRequest", "ClockOutRequest", "TimeRecordUpdate", "TimeRecordResponse",
    "ClockStatusResponse",
    "WorkSummary", "Statistics", "MonthlyRecords",
    "MemberView", "TeamCreate", "JoinTeamRequest", "TeamResponse", "JoinTeamResponse",
    "MemberRollup", "TeamTotals", "TeamRollup",
    "ScheduleMode", "ScheduleCreate", "ScheduleUpdate", "ScheduleResponse",
]
