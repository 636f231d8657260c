"""
Application error taxonomy and the FastAPI handler that renders it.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """所有業務錯誤的基底類別"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConflictError(AppError):
    """狀態衝突：重複上班打卡、重複的 email 或邀請碼"""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(AppError):
    """找不到指定的資源，或下班打卡時沒有進行中的紀錄"""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(AppError):
    """資料驗證錯誤"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: str = None, details: Optional[Dict[str, Any]] = None):
        self.field = field
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message, details)


class PermissionDeniedError(AppError):
    """權限不足"""

    status_code = status.HTTP_403_FORBIDDEN


class StoreError(AppError):
    """底層儲存失敗"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """將業務錯誤轉為結構化回應 (code + message)"""
    if isinstance(exc, StoreError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
                "path": request.url.path,
            }
        },
    )
