"""
Report API routes for exporting time records.
"""

import io
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services.report_service import ReportService
from app.utils.auth import get_current_user, resolve_target_user

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/records.csv", summary="匯出打卡紀錄")
async def export_records(
    user_id: Optional[str] = Query(None, alias="userId"),
    start_date: Optional[date] = Query(None, alias="startDate", description="開始日期"),
    end_date: Optional[date] = Query(None, alias="endDate", description="結束日期"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    匯出打卡紀錄為 CSV。

    - 本人或其團隊管理者可以匯出
    - 時間以系統時區顯示
    """
    user = resolve_target_user(db, current_user, user_id)
    file_content, filename, content_type = ReportService(db).export_records_csv(user, start_date, end_date)

    # 返回檔案下載回應
    return StreamingResponse(
        io.BytesIO(file_content),
        media_type=content_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
