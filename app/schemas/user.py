from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.base import CamelModel, UpdateModel
from app.utils.validators import MIN_PASSWORD_LENGTH, sanitize_input


class UserRole(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1, max_length=100)
    role: UserRole = UserRole.EMPLOYEE
    avatar: Optional[str] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        value = sanitize_input(value)
        if not value:
            raise ValueError("name must not be blank")
        return value


class UserUpdate(UpdateModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[str] = None
    is_premium: Optional[bool] = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    avatar: Optional[str] = None
    team_id: Optional[str] = None
    is_premium: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
