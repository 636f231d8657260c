"""
User management service layer: registration, login, profile updates and account removal.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ValidationError, PermissionDeniedError
from app.models.job import Job
from app.models.schedule import Schedule
from app.models.time_record import TimeRecord
from app.models.user import User, Team
from app.schemas.user import UserCreate, UserUpdate
from app.store import EntityStore
from app.utils.auth import get_password_hash, verify_password
from app.utils.validators import validate_password_strength, validate_photo, sanitize_input

logger = logging.getLogger(__name__)


class UserService:
    """用戶管理業務邏輯服務"""

    def __init__(self, db: Session):
        self.store = EntityStore(db)

    def register(self, user_data: UserCreate) -> User:
        """
        建立新用戶。

        Args:
            user_data: 用戶註冊資料

        Returns:
            新建立的用戶

        Raises:
            ConflictError: email 已被使用
            ValidationError: 密碼強度不足
        """
        email = user_data.email.lower()

        is_valid, errors = validate_password_strength(user_data.password)
        if not is_valid:
            raise ValidationError(errors[0], field="password")

        if self.get_user_by_email(email) is not None:
            raise ConflictError("Email already registered", {"email": email})

        try:
            user = self.store.insert(User(
                email=email,
                name=user_data.name,
                password_hash=get_password_hash(user_data.password),
                role=user_data.role.value,
                avatar=validate_photo(user_data.avatar, "avatar"),
                is_premium=False,
            ))
        except ConflictError:
            raise ConflictError("Email already registered", {"email": email})

        logger.info(f"Registered user {user.id} ({user.role})")
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """驗證帳號密碼，失敗時回傳 None"""
        user = self.get_user_by_email(email.lower())
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login attempt for {email}")
            return None
        return user

    def get_user(self, user_id: str) -> User:
        user = self.store.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", {"userId": user_id})
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.store.find_one(User, User.email == email)

    def update_user(self, user_id: str, editor: User, update_data: UserUpdate) -> User:
        """
        更新個人資料，只接受 name / avatar / isPremium。

        Raises:
            NotFoundError: 用戶不存在
            PermissionDeniedError: 只能修改自己的資料
        """
        user = self.get_user(user_id)
        if user.id != editor.id:
            raise PermissionDeniedError("Users can only update their own profile")

        changes = update_data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = sanitize_input(changes["name"] or "")
            if not changes["name"]:
                raise ValidationError("name must not be blank", field="name")
        if "avatar" in changes:
            changes["avatar"] = validate_photo(changes["avatar"], "avatar")
        if "is_premium" in changes and changes["is_premium"] is None:
            changes.pop("is_premium")

        if not changes:
            return user

        user = self.store.update(User, user_id, changes)
        logger.info(f"Updated user {user_id}: {', '.join(sorted(changes))}")
        return user

    def delete_user(self, user_id: str, editor: User) -> None:
        """
        刪除帳號，連帶刪除其工作、打卡紀錄與排班。

        若為團隊管理者，一併刪除團隊並清空其餘成員的 team_id。
        每次寫入各自提交，中途失敗不會回復先前的刪除。
        """
        user = self.get_user(user_id)
        if user.id != editor.id:
            raise PermissionDeniedError("Users can only delete their own account")

        records = self.store.delete_where(TimeRecord, TimeRecord.user_id == user_id)
        schedules = self.store.delete_where(Schedule, Schedule.user_id == user_id)
        jobs = self.store.delete_where(Job, Job.user_id == user_id)

        team = self.store.find_one(Team, Team.manager_id == user_id)
        if team is not None:
            members = self.store.find(User, User.team_id == team.id, User.id != user_id)
            for member in members:
                self.store.update(User, member.id, {"team_id": None})
            self.store.delete(Team, team.id)
            logger.info(f"Deleted team {team.id} of manager {user_id}, cleared {len(members)} members")

        self.store.delete(User, user_id)
        logger.info(
            f"Deleted user {user_id} with {records} records, {schedules} schedules, {jobs} jobs"
        )
