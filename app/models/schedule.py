from sqlalchemy import Column, String, Integer, Date, Text, ForeignKey, func
from app.database import Base, UTCDateTime, generate_uuid


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(String(36), ForeignKey("jobs.id"))
    mode = Column(String(10), nullable=False, default="date")  # 'date', 'weekly'
    date = Column(Date, index=True)
    weekday = Column(Integer)  # 0 = 週一
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    note = Column(Text, default="")
    created_by = Column(String(36), nullable=False)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())
