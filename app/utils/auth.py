"""
JWT 認證、密碼雜湊，以及跨用戶查詢的權限判斷。
"""

from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, Team
from app.config import settings
from app.exceptions import NotFoundError, PermissionDeniedError
from app.utils.datetime_utils import utc_now

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer()


class AuthError(Exception):
    """Token 無效或過期"""
    pass


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """簽發 access token，subject 為用戶 ID"""
    expire = utc_now() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"sub": user.id, "role": user.role, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    解析 token，回傳用戶 ID。

    Raises:
        AuthError: 簽章錯誤、過期或缺少 subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Token has no subject")
    return user_id


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """由 Bearer token 取得目前用戶，失敗時回傳 401"""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = decode_access_token(credentials.credentials)
    except AuthError:
        raise unauthorized

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise unauthorized
    return user


async def get_current_manager(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_manager:
        raise PermissionDeniedError("Manager role required")
    return current_user


def manages_user(db: Session, manager: User, user: User) -> bool:
    """manager 是否為 user 所屬團隊的管理者"""
    if not manager.is_manager or not user.team_id:
        return False
    team = db.query(Team).filter(Team.id == user.team_id).first()
    return team is not None and team.manager_id == manager.id


def resolve_target_user(db: Session, current_user: User, user_id: Optional[str]) -> User:
    """
    決定要查詢的用戶：未指定時為自己，指定他人時需為其團隊管理者。

    Raises:
        NotFoundError: 用戶不存在
        PermissionDeniedError: 無權查看該用戶資料
    """
    if not user_id or user_id == current_user.id:
        return current_user

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found", {"userId": user_id})
    if not manages_user(db, current_user, user):
        raise PermissionDeniedError("Not allowed to access this user's data")
    return user
