from sqlalchemy import Column, String, Integer, Boolean, Date, Text, ForeignKey, Index, func, text
from app.database import Base, UTCDateTime, generate_uuid


class TimeRecord(Base):
    __tablename__ = "time_records"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    clock_in = Column(UTCDateTime, nullable=False)
    clock_out = Column(UTCDateTime)
    clock_in_photo = Column(Text)
    clock_out_photo = Column(Text)
    break_minutes = Column(Integer, nullable=False, default=0)
    note = Column(Text)
    is_manual_edit = Column(Boolean, default=False)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # 每位用戶最多一筆未下班的紀錄
        Index(
            "uix_time_records_open_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("clock_out IS NULL"),
            postgresql_where=text("clock_out IS NULL"),
        ),
    )
