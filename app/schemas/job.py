from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.base import CamelModel, UpdateModel
from app.utils.validators import validate_hex_color


class JobStatus(str, Enum):
    ACTIVE = "active"
    RETIRED = "retired"
    ARCHIVED = "archived"


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not validate_hex_color(value):
        raise ValueError("color must be in #RRGGBB format")
    return value


class JobCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    hourly_rate: float = Field(gt=0, allow_inf_nan=False)
    daily_hour_limit: Optional[float] = Field(default=None, gt=0, le=24, allow_inf_nan=False)
    color: Optional[str] = None

    @field_validator("color")
    @classmethod
    def check_color(cls, value: Optional[str]) -> Optional[str]:
        return _check_color(value)


class JobUpdate(UpdateModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    hourly_rate: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    daily_hour_limit: Optional[float] = Field(default=None, gt=0, le=24, allow_inf_nan=False)
    color: Optional[str] = None
    status: Optional[JobStatus] = None

    @field_validator("color")
    @classmethod
    def check_color(cls, value: Optional[str]) -> Optional[str]:
        return _check_color(value)


class JobResponse(CamelModel):
    id: str
    user_id: str
    name: str
    hourly_rate: float
    daily_hour_limit: float
    status: JobStatus
    is_active: bool
    color: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
