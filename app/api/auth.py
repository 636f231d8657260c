"""
Authentication API routes for registration, login and JWT token refresh.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserResponse, LoginRequest, Token
from app.services.user_service import UserService
from app.utils.auth import create_access_token, get_current_user
from app.config import settings

router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_for(user: User) -> Token:
    return Token(
        access_token=create_access_token(user),
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED, summary="註冊")
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    建立帳號並直接回傳 access token。

    - email 不可重複 (409)
    - 密碼至少 6 個字元
    """
    user = UserService(db).register(user_data)
    return _token_for(user)


@router.post("/login", response_model=Token, summary="登入")
async def login(
    login_request: LoginRequest,
    db: Session = Depends(get_db)
):
    """以 email 與密碼登入"""
    user = UserService(db).authenticate(login_request.email, login_request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)


@router.post("/refresh", response_model=Token, summary="刷新Token")
async def refresh_token(
    current_user: User = Depends(get_current_user)
):
    """
    刷新 JWT token。

    - 使用現有有效 token 獲取新 token
    """
    return _token_for(current_user)


@router.get("/me", response_model=UserResponse, summary="取得當前用戶資訊")
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    return current_user
