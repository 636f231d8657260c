"""
User profile API routes.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserUpdate, UserResponse
from app.services.user_service import UserService
from app.utils.auth import get_current_user, resolve_target_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserResponse, summary="取得用戶資料")
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    取得用戶資料。

    - 本人或其團隊管理者可以查看
    """
    return resolve_target_user(db, current_user, user_id)


@router.put("/{user_id}", response_model=UserResponse, summary="更新用戶資料")
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    更新個人資料。

    - 只能修改 name、avatar、isPremium
    - 其他欄位 (email、role、密碼) 會被拒絕
    """
    return UserService(db).update_user(user_id, current_user, update_data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="刪除帳號")
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    刪除帳號，連帶刪除工作、打卡紀錄與排班。

    - 管理者的團隊一併刪除，成員的 teamId 清空
    """
    UserService(db).delete_user(user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
