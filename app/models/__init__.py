from .user import User, Team
from .job import Job
from .time_record import TimeRecord
from .schedule import Schedule

__all__ = ["User", "Team", "Job", "TimeRecord", "Schedule"]
